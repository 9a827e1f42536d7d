import logging

import pytest

from robo_web_test_kit import config as robo_config
from robo_web_test_kit.config import ConfigKey, ConfigReader
from robo_web_test_kit.errors import ConfigurationMissing
from robo_web_test_kit.utils import get_env


def test_reads_values_from_properties_file(write_config):
    path = write_config(threadCount="4", gridURL="http://grid:4444/wd/hub")
    reader = ConfigReader(path)

    assert reader.get(ConfigKey.BROWSER) == "chrome"
    assert reader.get("reportTitle") == "Demo Suite"
    assert reader.get(ConfigKey.GRIDURL) == "http://grid:4444/wd/hub"
    assert reader.get_int(ConfigKey.THREADCOUNT) == 4
    assert reader.get_bool(ConfigKey.HEADLESS) is False


def test_missing_key_returns_default(write_config):
    reader = ConfigReader(write_config())

    assert reader.get(ConfigKey.BASEURL) is None
    assert reader.get(ConfigKey.BASEURL, "http://localhost") == "http://localhost"
    assert reader.get_int(ConfigKey.TIMEOUT, 15) == 15
    assert reader.get_bool(ConfigKey.PARALLEL) is False


def test_blank_value_counts_as_missing(write_config):
    reader = ConfigReader(write_config(baseURL=""))

    assert reader.get(ConfigKey.BASEURL, "fallback") == "fallback"
    with pytest.raises(ConfigurationMissing):
        reader.require(ConfigKey.BASEURL)


def test_keys_are_case_sensitive(write_config):
    reader = ConfigReader(write_config())

    assert reader.get("Browser") is None
    assert reader.get("browser") == "chrome"


@pytest.mark.parametrize("raw", ["true", "TRUE", "yes", "y", "1"])
def test_truthy_booleans(write_config, raw):
    reader = ConfigReader(write_config(headless=raw))
    assert reader.get_bool(ConfigKey.HEADLESS) is True


def test_invalid_integer_falls_back_with_warning(write_config, caplog):
    reader = ConfigReader(write_config(threadCount="many"))

    with caplog.at_level(logging.WARNING):
        assert reader.get_int(ConfigKey.THREADCOUNT, 1) == 1
    assert "not an integer" in caplog.text


def test_missing_file_raises(project_dir):
    reader = ConfigReader(project_dir / "nope.properties")

    with pytest.raises(ConfigurationMissing) as exc_info:
        reader.get(ConfigKey.BROWSER)
    assert "nope.properties" in str(exc_info.value)


def test_missing_required_key_raises(write_config):
    reader = ConfigReader(write_config({"headless": "true"}))

    with pytest.raises(ConfigurationMissing) as exc_info:
        reader.get(ConfigKey.HEADLESS)
    assert exc_info.value.details["missing"] == ["browser"]


def test_values_are_loaded_once(write_config):
    path = write_config()
    reader = ConfigReader(path)
    first = reader.values

    path.write_text("browser=firefox\n", encoding="utf-8")

    assert reader.values is first
    assert reader.get(ConfigKey.BROWSER) == "chrome"


def test_environment_variable_overrides_file(write_config, monkeypatch):
    monkeypatch.setenv(ConfigKey.HEADLESS.env_name, "true")
    reader = ConfigReader(write_config())

    assert ConfigKey.HEADLESS.env_name == "ROBO_HEADLESS"
    assert reader.get_bool(ConfigKey.HEADLESS) is True


def test_blank_environment_variables_are_ignored(write_config, monkeypatch):
    monkeypatch.setenv(ConfigKey.BROWSER.env_name, "   ")
    monkeypatch.setenv(ConfigKey.REPORTTITLE.env_name, "  Nightly  ")
    monkeypatch.setenv("APP_ENV", " ")

    reader = ConfigReader(write_config())

    assert reader.get(ConfigKey.BROWSER) == "chrome"
    assert reader.get(ConfigKey.REPORTTITLE) == "Nightly"


@pytest.mark.parametrize("raw, expected", [(None, "fallback"), ("", "fallback"), ("  qa ", "qa")])
def test_get_env(monkeypatch, raw, expected):
    if raw is None:
        monkeypatch.delenv("ROBO_SAMPLE_KEY", raising=False)
    else:
        monkeypatch.setenv("ROBO_SAMPLE_KEY", raw)

    assert get_env("ROBO_SAMPLE_KEY", "fallback") == expected


def test_app_env_overlay(write_config, monkeypatch):
    path = write_config()
    path.with_name("config.qa.properties").write_text(
        "browser=firefox\nbaseURL=https://qa.example.com\n", encoding="utf-8"
    )
    monkeypatch.setenv("APP_ENV", "QA")

    reader = ConfigReader(path)

    assert reader.get(ConfigKey.BROWSER) == "firefox"
    assert reader.get(ConfigKey.BASEURL) == "https://qa.example.com"
    assert reader.get(ConfigKey.REPORTTITLE) == "Demo Suite"


def test_config_path_env_override(write_config, monkeypatch, tmp_path):
    other = tmp_path / "elsewhere.properties"
    other.write_text("browser=edge\n", encoding="utf-8")
    monkeypatch.setenv("ROBO_CONFIG_PATH", str(other))

    assert ConfigReader().get(ConfigKey.BROWSER) == "edge"


def test_configure_replaces_process_config(write_config):
    path = write_config(browser="safari")

    reader = robo_config.configure(path)
    try:
        assert robo_config.get_config() is reader
        assert robo_config.get_property(ConfigKey.BROWSER) == "safari"
    finally:
        robo_config.configure(None)


def test_as_dict_is_a_copy(write_config):
    reader = ConfigReader(write_config())

    values = reader.as_dict()
    values["browser"] = "changed"

    assert reader.get(ConfigKey.BROWSER) == "chrome"
