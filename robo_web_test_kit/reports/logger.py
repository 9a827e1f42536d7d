"""
Report logger: status entries on the current thread's test node.

Usage from test or page code::

    from robo_web_test_kit.reports import logger as report

    report.info("Navigated to home page")
    report.pass_with_screenshot("Login successful")
    report.fail("Login failed due to invalid credentials")

Every entry is also written to the standard ``logging`` logger of this
module, so it shows up in pytest's captured log output.
"""

import logging
from typing import Optional

from ..driver.session import SessionRegistry, session_registry
from ..utils import screenshot
from .spark import MediaEntityBuilder, Status
from .test_manager import TestManager, test_manager

logger = logging.getLogger(__name__)
logger.propagate = True

SCREENSHOT_SKIPPED_SUFFIX = " (screenshot skipped - driver not set)"

_LOG_LEVELS = {
    Status.INFO: logging.INFO,
    Status.PASS: logging.INFO,
    Status.FAIL: logging.ERROR,
    Status.WARNING: logging.WARNING,
    Status.SKIP: logging.INFO,
}


class ReportLogger:
    def __init__(
        self,
        tests: Optional[TestManager] = None,
        sessions: Optional[SessionRegistry] = None,
        screenshots_dir=None,
    ):
        self.tests = tests or test_manager
        self.sessions = sessions or session_registry
        self.screenshots_dir = screenshots_dir

    def log(self, status: Status, message: str, media=None):
        node = self.tests.require_test()
        node.log(status, message, media)
        logger.log(_LOG_LEVELS[status], f"[{status.value}] {node.name}: {message}")

    def info(self, message: str):
        self.log(Status.INFO, message)

    def pass_(self, message: str):
        self.log(Status.PASS, message)

    def fail(self, message: str):
        self.log(Status.FAIL, message)

    def warning(self, message: str):
        self.log(Status.WARNING, message)

    def skip(self, message: str):
        self.log(Status.SKIP, message)

    def info_with_screenshot(self, message: str, name: Optional[str] = None):
        self.attach_screenshot(Status.INFO, message, name)

    def pass_with_screenshot(self, message: str, name: Optional[str] = None):
        self.attach_screenshot(Status.PASS, message, name)

    def fail_with_screenshot(self, message: str, name: Optional[str] = None):
        self.attach_screenshot(Status.FAIL, message, name)

    def warning_with_screenshot(self, message: str, name: Optional[str] = None):
        self.attach_screenshot(Status.WARNING, message, name)

    def skip_with_screenshot(self, message: str, name: Optional[str] = None):
        self.attach_screenshot(Status.SKIP, message, name)

    def attach_screenshot(self, status: Status, message: str, name: Optional[str] = None):
        """
        Log ``message`` with a screenshot of the current session.

        ``name`` labels the screenshot file and defaults to the message.
        Capture and I/O failures become a WARN entry and never propagate.
        """
        # Resolve first: a missing node is a listener bug and must surface
        self.tests.require_test()

        session = self.sessions.current()
        if session is None:
            self.log(status, message + SCREENSHOT_SKIPPED_SUFFIX)
            return

        try:
            path, payload = screenshot.capture_base64(
                session.driver, name or message, self.screenshots_dir
            )
            media = MediaEntityBuilder.create_screen_capture_from_base64_string(
                payload, title=path.name
            )
        except Exception as e:
            logger.warning(f"Screenshot capture failed: {e}", exc_info=True)
            self.log(Status.WARNING, f"Failed to attach screenshot: {e}")
            return

        self.log(status, message, media)


_default = ReportLogger()


def get_logger() -> ReportLogger:
    return _default


info = _default.info
pass_ = _default.pass_
fail = _default.fail
warning = _default.warning
skip = _default.skip
info_with_screenshot = _default.info_with_screenshot
pass_with_screenshot = _default.pass_with_screenshot
fail_with_screenshot = _default.fail_with_screenshot
warning_with_screenshot = _default.warning_with_screenshot
skip_with_screenshot = _default.skip_with_screenshot
