"""
Per-suite report folder and per-group report instances.

One suite run gets one timestamped folder; each group (the unit a report
file is produced for) gets its own ExtentReports instance writing to
``<suiteFolder>/<groupName>_ExtentReport.html``. The active instance is
bound to the creating thread. While a group is open, other threads running
the same group adopt its instance, so one group never has two writers.

Under pytest-xdist each worker records its groups in memory and the master
merges them by group name and writes each file once.
"""

import logging
import platform
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .. import constants
from ..config import ConfigKey, ConfigReader, get_config
from .spark import ExtentReports, SparkReporter, Theme

logger = logging.getLogger(__name__)
logger.propagate = True


class ReportManager:
    def __init__(
        self,
        reports_root: Optional[Union[str, Path]] = None,
        config: Optional[ConfigReader] = None,
    ):
        self._reports_root = Path(reports_root) if reports_root else None
        self._config = config
        self._suite_folder: Optional[Path] = None
        self._local = threading.local()
        self._open: dict[str, ExtentReports] = {}
        self._open_lock = threading.Lock()
        self._merged: dict[str, ExtentReports] = {}

    @property
    def config(self) -> ConfigReader:
        return self._config if self._config is not None else get_config()

    @property
    def reports_root(self) -> Path:
        return self._reports_root or constants.reports_root()

    @property
    def suite_folder(self) -> Optional[Path]:
        return self._suite_folder

    def create_suite_folder(self, folder: Optional[Union[str, Path]] = None) -> Path:
        """
        Create the report folder for this suite run.

        The folder is ``<reportsRoot><YYYYMMDD_HHMMSS>``, e.g. ``Reports20251026_194522``.
        Passing ``folder`` adopts an existing folder instead (xdist workers).
        """
        if folder is None:
            timestamp = datetime.now().strftime(constants.TIMESTAMP_FORMAT)
            root = self.reports_root
            folder = root.parent / f"{root.name}{timestamp}"
        folder = Path(folder)
        folder.mkdir(parents=True, exist_ok=True)
        self._suite_folder = folder
        logger.info(f"Suite report folder: {folder}")
        return folder

    def report_path_for(self, group_name: str) -> Path:
        if self._suite_folder is None:
            raise RuntimeError(
                "Suite report folder has not been created; call create_suite_folder() first"
            )
        return self._suite_folder / f"{group_name}{constants.REPORT_FILE_SUFFIX}"

    def _build_report(self, group_name: str) -> ExtentReports:
        spark_reporter = SparkReporter(self.report_path_for(group_name))

        report_title = self.config.get(ConfigKey.REPORTTITLE) or constants.DEFAULT_REPORT_TITLE
        spark_reporter.config().document_title = f"{report_title} - {group_name}"
        spark_reporter.config().report_name = f"Execution Report for {group_name}"
        spark_reporter.config().theme = Theme.STANDARD

        extent = ExtentReports()
        extent.attach_reporter(spark_reporter)
        extent.set_system_info("OS", platform.system() or "unknown")
        extent.set_system_info("Test Name", group_name)
        extent.group_name = group_name
        return extent

    def create_group_report(self, group_name: str) -> ExtentReports:
        extent = self._build_report(group_name)
        with self._open_lock:
            self._open[group_name] = extent
        self._local.report = extent
        logger.debug(f"Created report for group '{group_name}' at {extent.output_path}")
        return extent

    def _is_open(self, extent: ExtentReports) -> bool:
        with self._open_lock:
            return self._open.get(extent.group_name) is extent

    def current_group_report(self) -> Optional[ExtentReports]:
        extent = getattr(self._local, "report", None)
        if extent is not None and not self._is_open(extent):
            # Closed by group-end on another thread
            self._local.report = None
            return None
        return extent

    def adopt_group_report(self, group_name: Optional[str] = None) -> Optional[ExtentReports]:
        """
        Bind an open group report created on another thread to this one.

        Without ``group_name`` the report is only adopted when exactly one
        group is open. Returns None when nothing matches.
        """
        with self._open_lock:
            if group_name is not None:
                extent = self._open.get(group_name)
            elif len(self._open) == 1:
                extent = next(iter(self._open.values()))
            else:
                extent = None
        if extent is not None:
            self._local.report = extent
        return extent

    def detach_current_group(self) -> Optional[ExtentReports]:
        """Close and unbind the thread's report without writing it."""
        extent = self.current_group_report()
        if extent is None:
            return None
        self._local.report = None
        with self._open_lock:
            if self._open.get(extent.group_name) is extent:
                del self._open[extent.group_name]
        return extent

    def flush_current_group(self) -> Optional[Path]:
        """Flush the thread's report and unbind it. Returns the written file."""
        extent = self.detach_current_group()
        if extent is None:
            return None
        path = extent.flush()
        logger.info(f"Report written: {path}")
        return path

    # ------------------------------------------------------------------
    # Reports recorded in other processes (pytest-xdist workers)
    # ------------------------------------------------------------------

    def merge_group_report(self, data: dict) -> ExtentReports:
        """Fold a report recorded elsewhere into this process's copy of its group."""
        group_name = data["group_name"]
        extent = self._merged.get(group_name)
        if extent is None:
            extent = self._build_report(group_name)
            self._merged[group_name] = extent
        extent.merge(data)
        return extent

    def flush_merged_reports(self) -> list[tuple[ExtentReports, Path]]:
        """Write every merged group report once, oldest group first."""
        written = []
        for extent in sorted(self._merged.values(), key=lambda extent: extent.created_at):
            path = extent.flush()
            logger.info(f"Report written: {path}")
            written.append((extent, path))
        self._merged.clear()
        return written
