"""
Exception types raised by robo_web_test_kit.

Everything except ScreenshotFailure propagates to pytest, where the
lifecycle listener records it as a FAIL entry on the current test node.
"""

from typing import Any, Optional


class RoboError(Exception):
    """Base exception for all kit errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationMissing(RoboError):
    """
    Raised when the configuration file cannot be read or a required key is absent.

    Fatal at initialization; the pytest session aborts.
    """

    pass


class SessionConstructionFailure(RoboError):
    """Raised when the browser engine refuses to start a session."""

    pass


class SessionNotBound(RoboError):
    """Raised when a browser helper runs on a thread that has no session."""

    pass


class ElementNotReady(RoboError):
    """Raised when an element wait times out."""

    pass


class DataIngestionFailure(RoboError):
    """Raised when a spreadsheet, CSV or JSON data file cannot be read."""

    pass


class ScreenshotFailure(RoboError):
    """
    Raised when a screenshot cannot be captured, stored or encoded.

    The report logger demotes it to a WARN entry; it never reaches the test.
    """

    pass


class TestNodeNotBound(RoboError):
    """Raised when a report log call runs on a thread with no bound test node."""

    __test__ = False
