"""
Explicit and fluent wait helpers.

The timeout comes from the ``implicitWait`` config key (seconds), then
``timeout``, then 15 seconds. A timed-out wait raises ElementNotReady,
which fails the test and is recorded by the lifecycle listener.
"""

import logging
import time
from typing import Callable, Optional, Sequence

from selenium.common.exceptions import (
    NoSuchElementException,
    StaleElementReferenceException,
    TimeoutException,
)
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from .. import constants
from ..config import ConfigKey, get_config
from ..errors import ElementNotReady

logger = logging.getLogger(__name__)

FLUENT_IGNORED_EXCEPTIONS = (NoSuchElementException, StaleElementReferenceException)


def default_timeout() -> int:
    config = get_config()
    timeout = config.get_int(ConfigKey.WAITTIMEOUT)
    if timeout is None:
        timeout = config.get_int(ConfigKey.TIMEOUT, constants.DEFAULT_WAIT_SECONDS)
    return timeout


def _until(driver, condition, description: str, timeout=None, poll=None, ignored=None):
    timeout = default_timeout() if timeout is None else timeout
    kwargs = {}
    if poll is not None:
        kwargs["poll_frequency"] = poll
    if ignored is not None:
        kwargs["ignored_exceptions"] = ignored
    wait = WebDriverWait(driver, timeout, **kwargs)
    try:
        return wait.until(condition)
    except TimeoutException as exc:
        raise ElementNotReady(
            f"Timed out after {timeout}s waiting for {description}",
            {"timeout": timeout},
        ) from exc


def wait_for_visibility(driver, locator, timeout: Optional[float] = None):
    return _until(
        driver,
        EC.visibility_of_element_located(locator),
        f"visibility of {locator}",
        timeout,
    )


def wait_for_clickability(driver, locator, timeout: Optional[float] = None):
    return _until(
        driver,
        EC.element_to_be_clickable(locator),
        f"clickability of {locator}",
        timeout,
    )


def wait_for_presence(driver, locator, timeout: Optional[float] = None):
    return _until(
        driver,
        EC.presence_of_element_located(locator),
        f"presence of {locator}",
        timeout,
    )


def wait_for_title_contains(driver, title: str, timeout: Optional[float] = None):
    return _until(
        driver, EC.title_contains(title), f"title containing '{title}'", timeout
    )


def fluent_wait(
    driver,
    condition: Callable,
    timeout: Optional[float] = None,
    poll: float = constants.POLL_INTERVAL_SECONDS,
    ignored: Sequence[type] = FLUENT_IGNORED_EXCEPTIONS,
    description: str = "condition",
):
    """Poll ``condition(driver)`` every ``poll`` seconds until it is truthy."""
    return _until(driver, condition, description, timeout, poll, tuple(ignored))


def sleep(seconds: float):
    logger.debug(f"Sleeping {seconds}s")
    time.sleep(seconds)
