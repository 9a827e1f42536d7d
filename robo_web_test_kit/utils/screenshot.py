"""
Screenshot capture for report entries.

A capture is written to ``<cwd>/screenshots/<fragment>_<timestamp>.png``
and read back as base64 so the same image serves the embedded report and
out-of-band debugging.
"""

import base64
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .. import constants
from ..errors import ScreenshotFailure

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9]")
MAX_FRAGMENT_LENGTH = 120


def sanitize(name: str) -> str:
    """Replace every character outside [A-Za-z0-9] with '_'."""
    return _UNSAFE_CHARS.sub("_", name)


def screenshot_path(
    name: str, folder: Optional[Union[str, Path]] = None, now: Optional[datetime] = None
) -> Path:
    fragment = sanitize(name)[:MAX_FRAGMENT_LENGTH] or "screenshot"
    timestamp = (now or datetime.now()).strftime(constants.SCREENSHOT_TIMESTAMP_FORMAT)
    folder = Path(folder) if folder else constants.screenshots_folder()
    return folder / f"{fragment}_{timestamp}.png"


def capture_screenshot(driver, name: str, folder: Optional[Union[str, Path]] = None) -> Path:
    """Capture the current page and store it as PNG. Returns the file path."""
    png = driver.get_screenshot_as_png()
    if not png:
        raise ScreenshotFailure("Driver returned an empty screenshot")

    path = screenshot_path(name, folder)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(png)
    logger.debug(f"Screenshot saved: {path}")
    return path


def encode_base64(path: Union[str, Path]) -> str:
    return base64.b64encode(Path(path).read_bytes()).decode("ascii")


def capture_base64(driver, name: str, folder: Optional[Union[str, Path]] = None) -> tuple[Path, str]:
    """Capture, persist, and return ``(path, base64_payload)``."""
    path = capture_screenshot(driver, name, folder)
    return path, encode_base64(path)
