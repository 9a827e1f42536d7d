"""
Robo Web Test Kit
Browser test automation for pytest: per-thread Selenium sessions, per-group
Spark HTML reports and screenshot-carrying report entries.
"""

from robo_web_test_kit.utils import RoboHelper
from robo_web_test_kit.driver import get_driver, session_registry
from robo_web_test_kit.reports import get_logger, test_manager

__version__ = RoboHelper.get_version()

__all__ = ["RoboHelper", "get_driver", "session_registry", "get_logger", "test_manager"]
