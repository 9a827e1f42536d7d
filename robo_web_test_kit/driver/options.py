"""
Browser option builders, one per engine family.

Every builder applies the same intent:
- start maximized (or a 1920x1080 window when the family lacks maximize)
- disable notifications
- disable automation info bars where available
- enable headless mode when requested
"""

import logging
import tempfile
from enum import Enum
from typing import Optional

from selenium.webdriver.chrome.options import Options as ChromeOptions
from selenium.webdriver.edge.options import Options as EdgeOptions
from selenium.webdriver.firefox.options import Options as FirefoxOptions
from selenium.webdriver.safari.options import Options as SafariOptions

logger = logging.getLogger(__name__)


class BrowserFamily(str, Enum):
    CHROME = "chrome"
    FIREFOX = "firefox"
    EDGE = "edge"
    SAFARI = "safari"

    @classmethod
    def parse(cls, name: Optional[str]) -> "BrowserFamily":
        """Case-insensitive lookup; unknown or empty names fall back to CHROME."""
        normalized = (name or "").strip().lower()
        if normalized == "msedge":
            normalized = "edge"
        for family in cls:
            if family.value == normalized:
                return family
        logger.warning(
            f"Unsupported browser '{name}', falling back to {cls.CHROME.value}"
        )
        return cls.CHROME


def _chromium_arguments(options, profile_dir: Optional[str], headless: bool):
    options.add_argument("--start-maximized")
    options.add_argument("--disable-notifications")
    # Removes "<browser> is being controlled by automated test software"
    options.add_argument("--disable-infobars")
    options.add_argument("--no-sandbox")
    options.add_argument("--disable-dev-shm-usage")
    if profile_dir:
        options.add_argument(f"--user-data-dir={profile_dir}")
    if headless:
        options.add_argument("--headless")
    return options


def chrome_options(headless: bool, profile_dir: Optional[str] = None) -> ChromeOptions:
    return _chromium_arguments(ChromeOptions(), profile_dir, headless)


def edge_options(headless: bool, profile_dir: Optional[str] = None) -> EdgeOptions:
    return _chromium_arguments(EdgeOptions(), profile_dir, headless)


def firefox_options(headless: bool) -> FirefoxOptions:
    options = FirefoxOptions()
    options.set_preference("dom.webnotifications.enabled", False)
    options.add_argument("--width=1920")
    options.add_argument("--height=1080")
    if headless:
        options.add_argument("--headless")
    return options


def safari_options(headless: bool) -> SafariOptions:
    options = SafariOptions()
    options.automatic_inspection = False
    options.automatic_profiling = False
    # Only honoured by Safari Technology Preview
    if headless:
        options.set_capability("safari.options.headless", True)
    return options


def create_profile_dir(family: BrowserFamily) -> Optional[str]:
    """Unique throw-away profile directory for Chromium families, None otherwise."""
    if family in (BrowserFamily.CHROME, BrowserFamily.EDGE):
        return tempfile.mkdtemp(prefix=f"{family.value}_profile_")
    return None


def build_options(
    family: BrowserFamily, headless: bool, profile_dir: Optional[str] = None
):
    if family is BrowserFamily.FIREFOX:
        return firefox_options(headless)
    if family is BrowserFamily.EDGE:
        return edge_options(headless, profile_dir)
    if family is BrowserFamily.SAFARI:
        return safari_options(headless)
    return chrome_options(headless, profile_dir)
