"""
Reusable element actions on the calling thread's driver.

Every helper accepts either a locator tuple such as ``(By.ID, "loginBtn")``
or an already located WebElement.

    from selenium.webdriver.common.by import By
    from robo_web_test_kit.utils import driver_utils

    driver_utils.click((By.ID, "loginBtn"))
    driver_utils.type_text((By.NAME, "username"), "admin")
    driver_utils.select_by_visible_text((By.ID, "country"), "India")
"""

from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support.ui import Select

from ..driver.session import session_registry
from ..errors import SessionNotBound


def get_driver():
    driver = session_registry.driver
    if driver is None:
        raise SessionNotBound(
            "No browser session bound to this thread; use the 'driver' fixture "
            "or session_registry.init() first"
        )
    return driver


def _element(target) -> WebElement:
    if isinstance(target, WebElement):
        return target
    return get_driver().find_element(*target)


def _actions() -> ActionChains:
    return ActionChains(get_driver())


# ---------------------- BASIC ELEMENT ACTIONS ----------------------


def click(target):
    _element(target).click()


def type_text(target, text: str):
    element = _element(target)
    element.clear()
    element.send_keys(text)


def get_text(target) -> str:
    return _element(target).text


def get_attribute(target, attribute: str):
    return _element(target).get_attribute(attribute)


def is_displayed(target) -> bool:
    return _element(target).is_displayed()


# ---------------------- DROPDOWN ACTIONS ----------------------


def select_by_visible_text(target, text: str):
    Select(_element(target)).select_by_visible_text(text)


def select_by_index(target, index: int):
    Select(_element(target)).select_by_index(index)


def select_by_value(target, value: str):
    Select(_element(target)).select_by_value(value)


# ---------------------- ACTIONS & JAVASCRIPT ----------------------


def hover_over(target):
    _actions().move_to_element(_element(target)).perform()


def drag_and_drop(source, target):
    _actions().drag_and_drop(_element(source), _element(target)).perform()


def scroll_to_element(target):
    get_driver().execute_script("arguments[0].scrollIntoView(true);", _element(target))


def scroll_by(x: int, y: int):
    get_driver().execute_script("window.scrollBy(arguments[0], arguments[1]);", x, y)


def js_click(target):
    get_driver().execute_script("arguments[0].click();", _element(target))


def js_type(target, text: str):
    get_driver().execute_script("arguments[0].value = arguments[1];", _element(target), text)


# ---------------------- ALERTS ----------------------


def accept_alert():
    get_driver().switch_to.alert.accept()


def dismiss_alert():
    get_driver().switch_to.alert.dismiss()


def get_alert_text() -> str:
    return get_driver().switch_to.alert.text


def send_keys_to_alert(text: str):
    get_driver().switch_to.alert.send_keys(text)


# ---------------------- WINDOW & TAB HANDLING ----------------------


def switch_to_window(window_title: str) -> bool:
    """Switch to the first window whose title matches (case-insensitive)."""
    driver = get_driver()
    for handle in driver.window_handles:
        driver.switch_to.window(handle)
        if driver.title.lower() == window_title.lower():
            return True
    return False


def switch_to_parent_window():
    driver = get_driver()
    driver.switch_to.window(driver.window_handles[0])


# ---------------------- CHECKBOX & RADIO ----------------------


def select_checkbox(target):
    element = _element(target)
    if not element.is_selected():
        element.click()


def deselect_checkbox(target):
    element = _element(target)
    if element.is_selected():
        element.click()


# ---------------------- MULTIPLE ELEMENTS ----------------------


def click_first_visible(target) -> bool:
    """Click the first displayed element of a list or locator. Returns False if none."""
    if isinstance(target, (list, tuple)) and target and isinstance(target[0], WebElement):
        elements = target
    else:
        elements = get_driver().find_elements(*target)
    for element in elements:
        if element.is_displayed():
            element.click()
            return True
    return False
