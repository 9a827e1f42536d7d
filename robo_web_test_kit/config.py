"""
Configuration bag backed by tests/resources/config.properties.

The file is a flat key=value list parsed with python-dotenv. Values are
resolved in this order (later wins):

1. the base properties file
2. config.<app_env>.properties next to it, when APP_ENV is set
3. ROBO_<KEY> environment variables (e.g. ROBO_HEADLESS=true)

The bag is loaded lazily on first access and is read-only afterwards.
"""

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from dotenv import dotenv_values

from . import constants
from .errors import ConfigurationMissing
from .utils.RoboHelper import get_env

logger = logging.getLogger(__name__)
logger.propagate = True

_TRUE_VALUES = ("true", "yes", "y", "1")


class ConfigKey(str, Enum):
    """Recognized configuration keys. Keys are case-sensitive."""

    EXECUTION = "execution"
    BROWSER = "browser"
    GRIDURL = "gridURL"
    BASEURL = "baseURL"
    APIBASEURL = "apiBaseUrl"
    REPORTTITLE = "reportTitle"
    REPORTNAME = "reportName"
    PARALLEL = "parallel"
    THREADCOUNT = "threadCount"
    HEADLESS = "headless"
    WAITTIMEOUT = "implicitWait"
    TIMEOUT = "timeout"

    @property
    def env_name(self) -> str:
        return f"ROBO_{self.value.upper()}"


KeyLike = Union[ConfigKey, str]


class ConfigReader:
    """Read-only key/value view over the project configuration file."""

    REQUIRED_KEYS = (ConfigKey.BROWSER,)

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else constants.config_file_path()
        self._values: Optional[dict[str, str]] = None
        self._lock = threading.Lock()

    def _load(self) -> dict[str, str]:
        if not self.path.is_file():
            raise ConfigurationMissing(
                f"Configuration file not found: {self.path}",
                {"path": str(self.path)},
            )

        values = {k: v for k, v in dotenv_values(self.path).items() if v is not None}

        app_env = get_env("APP_ENV").lower()
        if app_env:
            overlay = self.path.with_name(f"{self.path.stem}.{app_env}{self.path.suffix}")
            if overlay.is_file():
                values.update(
                    {k: v for k, v in dotenv_values(overlay).items() if v is not None}
                )
                logger.info(f"Loaded environment-specific config from {overlay}")
            else:
                logger.warning(
                    f"Config overlay {overlay.name} not found for APP_ENV={app_env}"
                )

        for key in ConfigKey:
            env_value = get_env(key.env_name)
            if env_value:
                values[key.value] = env_value

        missing = [key.value for key in self.REQUIRED_KEYS if not values.get(key.value)]
        if missing:
            raise ConfigurationMissing(
                f"Required configuration key(s) missing: {', '.join(missing)}. "
                f"Check properties file: {self.path}",
                {"path": str(self.path), "missing": missing},
            )

        logger.debug(f"Configuration loaded from {self.path}")
        return values

    @property
    def values(self) -> dict[str, str]:
        if self._values is None:
            with self._lock:
                if self._values is None:
                    self._values = self._load()
        return self._values

    @staticmethod
    def _key(key: KeyLike) -> str:
        name = key.value if isinstance(key, ConfigKey) else key
        if not name:
            raise ValueError("Configuration key must be a non-empty string")
        return name

    def get(self, key: KeyLike, default: Optional[str] = None) -> Optional[str]:
        value = self.values.get(self._key(key))
        if value is None or value.strip() == "":
            return default
        return value.strip()

    def require(self, key: KeyLike) -> str:
        value = self.get(key)
        if value is None:
            raise ConfigurationMissing(
                f"Required configuration key '{self._key(key)}' is missing. "
                f"Check properties file: {self.path}",
                {"path": str(self.path), "missing": [self._key(key)]},
            )
        return value

    def get_int(self, key: KeyLike, default: Optional[int] = None) -> Optional[int]:
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning(
                f"Config key '{self._key(key)}' is not an integer ({value!r}); "
                f"using default {default}"
            )
            return default

    def get_bool(self, key: KeyLike, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        return value.lower() in _TRUE_VALUES

    def as_dict(self) -> dict[str, str]:
        return dict(self.values)


_config: Optional[ConfigReader] = None
_config_lock = threading.Lock()


def configure(path: Optional[Union[str, Path]] = None) -> ConfigReader:
    """Replace the process-wide configuration with one bound to ``path``."""
    global _config
    with _config_lock:
        _config = ConfigReader(path)
    return _config


def get_config() -> ConfigReader:
    """Return the process-wide configuration, creating it on first use."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = ConfigReader()
    return _config


def get_property(key: KeyLike, default: Optional[str] = None) -> Optional[str]:
    return get_config().get(key, default)
