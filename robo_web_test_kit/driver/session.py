"""
Per-thread ownership of browser-automation sessions.

Each thread sees at most one Session. ``init`` creates it on demand,
``current`` looks it up without creating, ``dispose`` quits and unbinds it.
The binding is only set after the engine started successfully.
"""

import logging
import shutil
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

from selenium import webdriver
from selenium.common.exceptions import WebDriverException

from ..config import ConfigKey, ConfigReader, get_config
from ..errors import ConfigurationMissing, SessionConstructionFailure
from .options import BrowserFamily, build_options, create_profile_dir

logger = logging.getLogger(__name__)
logger.propagate = True

# factory(family, options, config) -> WebDriver
DriverFactory = Callable[[BrowserFamily, Any, ConfigReader], Any]

_REMOTE_MODES = ("grid", "remote")


@dataclass
class Session:
    driver: Any
    family: BrowserFamily
    headless: bool
    profile_dir: Optional[str] = None
    thread_name: str = ""

    def quit(self):
        try:
            self.driver.quit()
        finally:
            if self.profile_dir:
                shutil.rmtree(self.profile_dir, ignore_errors=True)


def create_driver(family: BrowserFamily, options, config: ConfigReader):
    """Default factory: local engine, or Remote when execution=grid."""
    execution = (config.get(ConfigKey.EXECUTION, "local") or "local").lower()
    if execution in _REMOTE_MODES:
        grid_url = config.get(ConfigKey.GRIDURL)
        if not grid_url:
            raise ConfigurationMissing(
                f"execution={execution} requires '{ConfigKey.GRIDURL.value}'",
                {"missing": [ConfigKey.GRIDURL.value]},
            )
        logger.info(f"Starting remote {family.value} session on {grid_url}")
        return webdriver.Remote(command_executor=grid_url, options=options)

    logger.info(f"Starting local {family.value} session")
    if family is BrowserFamily.FIREFOX:
        return webdriver.Firefox(options=options)
    if family is BrowserFamily.EDGE:
        return webdriver.Edge(options=options)
    if family is BrowserFamily.SAFARI:
        return webdriver.Safari(options=options)
    return webdriver.Chrome(options=options)


class SessionRegistry:
    """Thread-bound session store."""

    def __init__(
        self,
        config: Optional[ConfigReader] = None,
        driver_factory: Optional[DriverFactory] = None,
    ):
        self._config = config
        self.driver_factory = driver_factory or create_driver
        self._local = threading.local()
        self._headless: Optional[bool] = None

    @property
    def config(self) -> ConfigReader:
        return self._config if self._config is not None else get_config()

    def configure(self, config: Optional[ConfigReader] = None):
        """Rebind to ``config`` and forget the cached headless flag."""
        self._config = config
        self._headless = None

    @property
    def headless(self) -> bool:
        # Read once per registry
        if self._headless is None:
            self._headless = self.config.get_bool(ConfigKey.HEADLESS, False)
        return self._headless

    def init(
        self,
        browser: Optional[str] = None,
        factory: Optional[DriverFactory] = None,
    ) -> Session:
        existing = self.current()
        if existing is not None:
            return existing

        if browser is None:
            browser = self.config.get(ConfigKey.BROWSER)
        family = BrowserFamily.parse(browser)
        headless = self.headless
        profile_dir = create_profile_dir(family)
        options = build_options(family, headless, profile_dir)

        driver = None
        try:
            driver = (factory or self.driver_factory)(family, options, self.config)
            if driver is None:
                raise SessionConstructionFailure(
                    f"Driver factory returned no {family.value} driver",
                    {"browser": family.value, "headless": headless},
                )
        except (WebDriverException, OSError) as exc:
            raise SessionConstructionFailure(
                f"Could not start {family.value} session: {exc}",
                {"browser": family.value, "headless": headless},
            ) from exc
        finally:
            if driver is None:
                self._remove_profile(profile_dir)

        session = Session(
            driver=driver,
            family=family,
            headless=headless,
            profile_dir=profile_dir,
            thread_name=threading.current_thread().name,
        )
        self._local.session = session
        return session

    def current(self) -> Optional[Session]:
        return getattr(self._local, "session", None)

    @property
    def driver(self):
        session = self.current()
        return session.driver if session is not None else None

    def dispose(self):
        session = self.current()
        if session is None:
            return
        self._local.session = None
        try:
            session.quit()
        except WebDriverException as exc:
            logger.warning(f"Error while quitting {session.family.value} session: {exc}")

    @staticmethod
    def _remove_profile(profile_dir: Optional[str]):
        if profile_dir:
            shutil.rmtree(profile_dir, ignore_errors=True)


session_registry = SessionRegistry()


def get_driver():
    """Driver bound to the calling thread, or None."""
    return session_registry.driver
