from unittest.mock import MagicMock

import pytest
from selenium.common.exceptions import NoSuchElementException
from selenium.webdriver.common.by import By

from robo_web_test_kit import config as robo_config
from robo_web_test_kit.driver.session import SessionRegistry
from robo_web_test_kit.errors import ElementNotReady, SessionNotBound
from robo_web_test_kit.utils import driver_utils, waits


@pytest.fixture
def mock_sessions(robo_reader, monkeypatch):
    """Registry whose sessions wrap a MagicMock driver, patched into driver_utils."""
    sessions = SessionRegistry(
        config=robo_reader, driver_factory=lambda family, options, config: MagicMock()
    )
    monkeypatch.setattr(driver_utils, "session_registry", sessions)
    yield sessions
    sessions.dispose()


# ---------------------- waits ----------------------


def test_default_timeout_prefers_implicit_wait(write_config):
    robo_config.configure(write_config(implicitWait="7", timeout="9"))
    try:
        assert waits.default_timeout() == 7
    finally:
        robo_config.configure(None)


def test_default_timeout_falls_back_to_timeout(write_config):
    robo_config.configure(write_config(timeout="9"))
    try:
        assert waits.default_timeout() == 9
    finally:
        robo_config.configure(None)


def test_default_timeout_constant(robo_reader):
    assert waits.default_timeout() == 15


def test_fluent_wait_returns_condition_value(robo_reader):
    calls = []

    def condition(driver):
        calls.append(driver)
        if len(calls) < 3:
            raise NoSuchElementException("not yet")
        return "found"

    assert waits.fluent_wait("drv", condition, timeout=2, poll=0.01) == "found"
    assert calls == ["drv", "drv", "drv"]


def test_fluent_wait_timeout_raises_element_not_ready(robo_reader):
    with pytest.raises(ElementNotReady) as exc_info:
        waits.fluent_wait("drv", lambda driver: False, timeout=0.1, poll=0.02, description="banner")

    assert "banner" in str(exc_info.value)
    assert exc_info.value.details["timeout"] == 0.1


def test_wait_for_title_contains(robo_reader):
    driver = MagicMock()
    driver.title = "Dashboard - Robo"

    assert waits.wait_for_title_contains(driver, "Dashboard", timeout=1) is True


def test_wait_for_visibility(robo_reader):
    element = MagicMock()
    element.is_displayed.return_value = True
    driver = MagicMock()
    driver.find_element.return_value = element

    assert waits.wait_for_visibility(driver, (By.ID, "banner"), timeout=1) is element
    driver.find_element.assert_called_with(By.ID, "banner")


# ---------------------- driver_utils ----------------------


def test_actions_require_session(robo_reader, monkeypatch):
    monkeypatch.setattr(driver_utils, "session_registry", SessionRegistry(config=robo_reader))

    with pytest.raises(SessionNotBound):
        driver_utils.click((By.ID, "loginBtn"))


def test_click_and_type_with_locator(mock_sessions):
    driver = mock_sessions.init().driver

    driver_utils.click((By.ID, "loginBtn"))
    driver_utils.type_text((By.NAME, "username"), "admin")

    driver.find_element.assert_any_call(By.ID, "loginBtn")
    element = driver.find_element.return_value
    element.click.assert_called_once()
    element.clear.assert_called_once()
    element.send_keys.assert_called_once_with("admin")


def test_js_click_uses_script(mock_sessions):
    driver = mock_sessions.init().driver

    driver_utils.js_click((By.ID, "hidden"))

    driver.execute_script.assert_called_once_with(
        "arguments[0].click();", driver.find_element.return_value
    )


def test_checkbox_selection_is_idempotent(mock_sessions):
    driver = mock_sessions.init().driver
    checkbox = driver.find_element.return_value
    checkbox.is_selected.return_value = True

    driver_utils.select_checkbox((By.ID, "terms"))
    checkbox.click.assert_not_called()

    driver_utils.deselect_checkbox((By.ID, "terms"))
    checkbox.click.assert_called_once()


def test_click_first_visible(mock_sessions):
    driver = mock_sessions.init().driver
    hidden, visible = MagicMock(), MagicMock()
    hidden.is_displayed.return_value = False
    visible.is_displayed.return_value = True
    driver.find_elements.return_value = [hidden, visible]

    assert driver_utils.click_first_visible((By.CSS_SELECTOR, ".result")) is True
    hidden.click.assert_not_called()
    visible.click.assert_called_once()

    driver.find_elements.return_value = [hidden]
    assert driver_utils.click_first_visible((By.CSS_SELECTOR, ".result")) is False


def test_switch_to_window_by_title(mock_sessions):
    driver = mock_sessions.init().driver
    titles = {"h1": "Home", "h2": "Invoice"}
    current = {}
    driver.window_handles = ["h1", "h2"]
    driver.switch_to.window.side_effect = lambda handle: current.update(handle=handle)
    type(driver).title = property(lambda self: titles[current["handle"]])

    assert driver_utils.switch_to_window("invoice") is True
    assert current["handle"] == "h2"
    assert driver_utils.switch_to_window("Missing") is False


def test_alert_helpers(mock_sessions):
    driver = mock_sessions.init().driver
    driver.switch_to.alert.text = "Are you sure?"

    assert driver_utils.get_alert_text() == "Are you sure?"
    driver_utils.accept_alert()
    driver.switch_to.alert.accept.assert_called_once()
