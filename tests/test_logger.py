import base64
import logging
import re
from datetime import datetime

import pytest
from selenium.common.exceptions import WebDriverException

from robo_web_test_kit.errors import TestNodeNotBound
from robo_web_test_kit.reports.logger import SCREENSHOT_SKIPPED_SUFFIX, ReportLogger
from robo_web_test_kit.reports.spark import ExtentReports, Status
from robo_web_test_kit.utils import screenshot


@pytest.fixture
def node(tests_registry):
    test = ExtentReports().create_test("validLogin")
    tests_registry.set_test(test)
    yield test
    tests_registry.unload()


@pytest.fixture
def report_logger(tests_registry, registry, tmp_path):
    return ReportLogger(tests_registry, registry, screenshots_dir=tmp_path / "shots")


def _statuses(node):
    return [entry.status for entry in node.entries]


def test_entries_keep_call_order(report_logger, node):
    report_logger.info("open page")
    report_logger.pass_("logged in")
    report_logger.warning("slow response")
    report_logger.skip("optional step")
    report_logger.fail("logout failed")

    assert _statuses(node) == [Status.INFO, Status.PASS, Status.WARNING, Status.SKIP, Status.FAIL]
    assert [entry.message for entry in node.entries][0] == "open page"


def test_logging_without_node_raises(report_logger):
    with pytest.raises(TestNodeNotBound):
        report_logger.info("nobody listening")


def test_screenshot_without_node_raises(report_logger):
    with pytest.raises(TestNodeNotBound):
        report_logger.pass_with_screenshot("nobody listening")


def test_entries_mirror_to_standard_logging(report_logger, node, caplog):
    with caplog.at_level(logging.INFO, logger="robo_web_test_kit.reports.logger"):
        report_logger.info("open page")
        report_logger.fail("broken")

    messages = [(record.levelno, record.getMessage()) for record in caplog.records]
    assert (logging.INFO, "[INFO] validLogin: open page") in messages
    assert (logging.ERROR, "[FAIL] validLogin: broken") in messages


def test_screenshot_skipped_without_session(report_logger, node):
    report_logger.info_with_screenshot("Home page")

    entry = node.entries[-1]
    assert entry.status is Status.INFO
    assert entry.message == "Home page" + SCREENSHOT_SKIPPED_SUFFIX
    assert entry.media is None


def test_screenshot_attached_with_session(report_logger, registry, node, tmp_path):
    registry.init()

    report_logger.pass_with_screenshot("Login ok")

    entry = node.entries[-1]
    files = list((tmp_path / "shots").glob("Login_ok_*.png"))
    assert entry.status is Status.PASS
    assert entry.message == "Login ok"
    assert len(files) == 1
    assert base64.b64decode(entry.media.base64) == registry.driver.screenshot
    assert entry.media.title == files[0].name


def test_screenshot_name_overrides_message(report_logger, registry, node, tmp_path):
    registry.init()

    report_logger.fail_with_screenshot("Test Failed: searchMissing", name="searchMissing")

    assert list((tmp_path / "shots").glob("searchMissing_*.png"))


def test_capture_failure_becomes_warning(report_logger, registry, node):
    registry.init()
    registry.driver.screenshot = WebDriverException("tab crashed")

    report_logger.fail_with_screenshot("Checkout")

    assert _statuses(node) == [Status.WARNING]
    assert node.entries[0].message.startswith("Failed to attach screenshot: ")
    assert "tab crashed" in node.entries[0].message


def test_empty_capture_becomes_warning(report_logger, registry, node):
    registry.init()
    registry.driver.screenshot = b""

    report_logger.info_with_screenshot("Checkout")

    assert _statuses(node) == [Status.WARNING]
    assert "empty screenshot" in node.entries[0].message


# ---------------------- screenshot helpers ----------------------


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Login ok", "Login_ok"),
        ("a/b\\c:d", "a_b_c_d"),
        ("Test Failed: x\n y", "Test_Failed__x__y"),
        ("plain123", "plain123"),
    ],
)
def test_sanitize(name, expected):
    assert screenshot.sanitize(name) == expected
    assert screenshot.sanitize(expected) == expected


def test_screenshot_path_format(tmp_path):
    path = screenshot.screenshot_path("Home page", tmp_path, now=datetime(2025, 10, 26, 19, 45, 22, 123456))

    assert path == tmp_path / "Home_page_20251026_194522_123456.png"


def test_screenshot_path_defaults(project_dir):
    path = screenshot.screenshot_path("", now=datetime(2025, 1, 2, 3, 4, 5))

    assert path.parent == project_dir / "screenshots"
    assert re.fullmatch(r"screenshot_\d{8}_\d{6}_\d{6}\.png", path.name)


def test_long_names_are_truncated(tmp_path):
    path = screenshot.screenshot_path("x" * 500, tmp_path)

    assert path.name.startswith("x" * screenshot.MAX_FRAGMENT_LENGTH + "_")
    assert not path.name.startswith("x" * (screenshot.MAX_FRAGMENT_LENGTH + 1))
