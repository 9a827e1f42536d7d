"""
Reporting spine: spark reports, per-thread test nodes and the report logger.
"""

from .logger import ReportLogger, get_logger
from .report_manager import ReportManager
from .spark import ExtentReports, ExtentTest, MediaEntityBuilder, Status, Theme
from .test_manager import TestManager, test_manager

__all__ = [
    "ReportLogger",
    "get_logger",
    "ReportManager",
    "ExtentReports",
    "ExtentTest",
    "MediaEntityBuilder",
    "Status",
    "Theme",
    "TestManager",
    "test_manager",
]
