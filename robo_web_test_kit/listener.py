"""
Lifecycle listener driving the reporting spine.

The listener reacts to runner events and keeps the per-thread bindings in
step:

    suite-start        -> create the timestamped suite folder
    group-start        -> create the group's report and bind it to the thread
    test-method-start  -> create the test node, bind it, log "Test Started"
    pass / fail / skip -> log the verdict (failures get a screenshot)
    teardown           -> dispose the thread's session and unbind the node
    group-end          -> flush the group's report (or hand it to the master
                          process, see ``deferred``)
    suite-end          -> nothing; groups flush themselves

Every test event must arrive on the thread that runs the test method. A
thread that did not see group-start adopts the open report of its group.
The pytest adapter in ``plugin.py`` is the production caller; ``as_hooks``
exposes the same events as a plain record of callables for other runners.
"""

import logging
import threading
import traceback
from pathlib import Path
from typing import Callable, NamedTuple, Optional, Union

from .driver.session import SessionRegistry, session_registry
from .reports.logger import ReportLogger
from .reports.report_manager import ReportManager
from .reports.spark import ExtentReports, ExtentTest
from .reports.test_manager import TestManager, test_manager

logger = logging.getLogger(__name__)
logger.propagate = True


class RunnerHooks(NamedTuple):
    suite_start: Callable
    group_start: Callable
    method_start: Callable
    method_pass: Callable
    method_fail: Callable
    method_skip: Callable
    group_end: Callable


def format_throwable(error) -> str:
    """``"<ExceptionType>: <message>"`` for exceptions, ``str()`` otherwise."""
    if error is None:
        return "None"
    if isinstance(error, BaseException):
        return "".join(traceback.format_exception_only(type(error), error)).strip()
    return str(error)


class LifecycleListener:
    def __init__(
        self,
        reports: Optional[ReportManager] = None,
        tests: Optional[TestManager] = None,
        sessions: Optional[SessionRegistry] = None,
        report_logger: Optional[ReportLogger] = None,
        deferred: bool = False,
    ):
        self.reports = reports or ReportManager()
        self.tests = tests or test_manager
        self.sessions = sessions or session_registry
        self.log = report_logger or ReportLogger(self.tests, self.sessions)
        self.flushed_reports: list[tuple[str, Path, dict]] = []
        self._flushed_lock = threading.Lock()
        # Worker processes keep finished groups for the master instead of writing them
        self.deferred = deferred
        self.deferred_reports: list[ExtentReports] = []

    # ------------------------------------------------------------------
    # Suite
    # ------------------------------------------------------------------

    def on_suite_start(self, suite_folder: Optional[Union[str, Path]] = None) -> Path:
        return self.reports.create_suite_folder(suite_folder)

    def on_suite_finish(self):
        pass

    # ------------------------------------------------------------------
    # Group
    # ------------------------------------------------------------------

    def on_group_start(self, group_name: str) -> ExtentReports:
        logger.info(f"Group started: {group_name}")
        return self.reports.create_group_report(group_name)

    def on_group_finish(self) -> Optional[Path]:
        if self.deferred:
            extent = self.reports.detach_current_group()
            if extent is not None:
                with self._flushed_lock:
                    self.deferred_reports.append(extent)
                logger.info(f"Group finished: {extent.group_name} (kept for the master)")
            return None

        extent = self.reports.current_group_report()
        if extent is None:
            return None
        path = self.reports.flush_current_group()
        self._record_flush(extent, path)
        logger.info(f"Group finished: {extent.group_name}")
        return path

    def _record_flush(self, extent: ExtentReports, path: Path):
        with self._flushed_lock:
            self.flushed_reports.append((extent.group_name, path, extent.status_counts()))

    def on_worker_reports(self, reports_data):
        """Merge group reports shipped by a worker process (see ``ExtentReports.to_dict``)."""
        for data in reports_data:
            self.reports.merge_group_report(data)

    def flush_merged_reports(self) -> list[tuple[str, Path]]:
        written = []
        for extent, path in self.reports.flush_merged_reports():
            self._record_flush(extent, path)
            written.append((extent.group_name, path))
        return written

    def current_group(self) -> Optional[str]:
        extent = self.reports.current_group_report()
        return extent.group_name if extent is not None else None

    # ------------------------------------------------------------------
    # Test method
    # ------------------------------------------------------------------

    def on_test_start(
        self,
        method_name: str,
        description: Optional[str] = None,
        group_name: Optional[str] = None,
    ) -> ExtentTest:
        extent = self.reports.current_group_report()
        if extent is None:
            extent = self.reports.adopt_group_report(group_name)
        if extent is None:
            raise RuntimeError(
                f"Test '{method_name}' started on thread "
                f"'{threading.current_thread().name}' without a group report"
            )
        node = extent.create_test(method_name, description)
        self.tests.set_test(node)
        self.log.info(f"Test Started: {method_name}")
        return node

    def on_test_success(self, method_name: str):
        self.log.pass_(f"Test Passed : {method_name}")

    def on_test_failure(self, method_name: str, error):
        message = f"Test Failed: {method_name}\n Error : \n{format_throwable(error)}"
        if self.sessions.current() is not None:
            self.log.fail_with_screenshot(message, name=method_name)
        else:
            self.log.fail(message)

    def on_test_skipped(self, method_name: str, reason):
        self.log.skip(f"Test Skipped: {method_name}\n Error : \n{format_throwable(reason)}")

    def on_test_teardown(self):
        try:
            self.sessions.dispose()
        finally:
            self.tests.unload()

    def as_hooks(self) -> RunnerHooks:
        return RunnerHooks(
            suite_start=self.on_suite_start,
            group_start=self.on_group_start,
            method_start=self.on_test_start,
            method_pass=self.on_test_success,
            method_fail=self.on_test_failure,
            method_skip=self.on_test_skipped,
            group_end=self.on_group_finish,
        )
