"""
Project paths and fixed names used across the kit.

All paths are anchored at the current working directory, which is the
project root of the consuming test project. They are functions rather than
module constants so that a changed working directory (e.g. pytester runs)
is picked up.
"""

import os
from pathlib import Path

REPORTS_FOLDER_NAME = "Reports"
SCREENSHOTS_FOLDER_NAME = "screenshots"
REPORT_FILE_SUFFIX = "_ExtentReport.html"
DEFAULT_REPORT_TITLE = "Automation Report"

# Suite folder suffix and screenshot timestamp
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
SCREENSHOT_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S_%f"

CONFIG_PATH_ENV = "ROBO_CONFIG_PATH"
CONFIG_RELATIVE_PATH = Path("tests", "resources", "config.properties")
TESTDATA_RELATIVE_PATH = Path("tests", "resources", "testdata")

DEFAULT_WAIT_SECONDS = 15
POLL_INTERVAL_SECONDS = 0.5


def project_path() -> Path:
    return Path.cwd()


def reports_root() -> Path:
    return project_path() / REPORTS_FOLDER_NAME


def screenshots_folder() -> Path:
    return project_path() / SCREENSHOTS_FOLDER_NAME


def config_file_path() -> Path:
    """Config file location, honouring the ROBO_CONFIG_PATH override."""
    override = os.getenv(CONFIG_PATH_ENV, "").strip()
    if override:
        return Path(override)
    return project_path() / CONFIG_RELATIVE_PATH


def testdata_folder() -> Path:
    return project_path() / TESTDATA_RELATIVE_PATH
