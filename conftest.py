"""
Shared fixtures for the robo_web_test_kit test suite.

Real browsers are replaced by FakeDriver. Plugin-level behaviour runs in
isolated pytester projects (tests/test_plugin.py).
"""

import logging

import pytest

from robo_web_test_kit import config as robo_config
from robo_web_test_kit.config import ConfigKey
from robo_web_test_kit.driver.session import SessionRegistry
from robo_web_test_kit.reports.test_manager import TestManager

pytest_plugins = ("pytester",)

logger = logging.getLogger(__name__)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16

DEFAULT_PROPERTIES = {
    "browser": "chrome",
    "headless": "false",
    "reportTitle": "Demo Suite",
}


class FakeDriver:
    """Stands in for a selenium WebDriver: records navigation and quits."""

    def __init__(self, family=None, options=None, screenshot=PNG_BYTES):
        self.family = family
        self.options = options
        self.screenshot = screenshot
        self.visited = []
        self.quit_count = 0
        self.title = "Fake Page"

    def get(self, url):
        self.visited.append(url)

    def get_screenshot_as_png(self):
        if isinstance(self.screenshot, Exception):
            raise self.screenshot
        return self.screenshot

    def quit(self):
        self.quit_count += 1


# ============================================================================
# Environment isolation
# ============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep APP_ENV / ROBO_* variables of the host out of the tests."""
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("ROBO_CONFIG_PATH", raising=False)
    for key in ConfigKey:
        monkeypatch.delenv(key.env_name, raising=False)


@pytest.fixture
def project_dir(tmp_path, monkeypatch):
    """Temporary project root used as the working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_config(project_dir):
    """Write tests/resources/config.properties; returns its path."""

    def _write(values=None, **overrides):
        properties = dict(DEFAULT_PROPERTIES if values is None else values)
        properties.update(overrides)
        path = project_dir / "tests" / "resources" / "config.properties"
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = ["# generated for tests"] + [f"{key}={value}" for key, value in properties.items()]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def robo_reader(write_config):
    """Process-wide ConfigReader bound to a default config file."""
    reader = robo_config.configure(write_config())
    yield reader
    robo_config.configure(None)


# ============================================================================
# Browser sessions
# ============================================================================


@pytest.fixture
def fake_factory():
    """Driver factory creating FakeDrivers; ``factory.created`` lists them."""
    created = []

    def factory(family, options, config):
        driver = FakeDriver(family, options)
        created.append(driver)
        return driver

    factory.created = created
    return factory


@pytest.fixture
def registry(robo_reader, fake_factory):
    sessions = SessionRegistry(config=robo_reader, driver_factory=fake_factory)
    yield sessions
    sessions.dispose()


@pytest.fixture
def tests_registry():
    return TestManager()
