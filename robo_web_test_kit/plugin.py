"""
Robo Web Test Kit - Pytest Plugin
Drives browser sessions and writes one Spark HTML report per test group.

PYTEST HOOK EXECUTION ORDER (Session Lifecycle):
=====================================================

PHASE 1: SESSION INITIALIZATION
1. pytest_addoption              - Register command-line options
2. pytest_addhooks               - Register robo_* hookspecs
3. pytest_load_initial_conftests - Map parallel=true to pytest-xdist -n
4. pytest_configure              - Load .env + config.properties, create listener
5. pytest_sessionstart           - Validate config, create the suite folder (suite-start)
6. pytest_report_header          - Add kit/browser settings to the header

PHASE 2: TEST COLLECTION
7. pytest_generate_tests         - Parametrize 'row' from @pytest.mark.datafile
8. pytest_collection_modifyitems - Keep each group's tests contiguous

PHASE 3: TEST EXECUTION (per test - repeated for each test)
9. pytest_runtest_protocol       - group-start/-end, test-start, teardown
10. pytest_runtest_makereport    - pass / fail / skip entries

PHASE 4: XDIST WORKER COORDINATION (parallel execution only)
11. pytest_configure_node        - Hand the suite folder to workers (master only)
12. pytest_testnodedown          - Merge the group reports recorded by a worker (master only)

PHASE 5: SESSION FINALIZATION
13. pytest_sessionfinish         - Flush any open group, write merged reports (suite-end)
14. pytest_terminal_summary      - List the written group reports

CUSTOM HOOKS (see hookspec.py):
========================================
- robo_group_name                - Choose the report group of a test
- robo_report_flushed            - Notified after each group report is written
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
import pytest
from selenium.webdriver.support.ui import WebDriverWait

from . import config as robo_config_module
from . import constants, hookspec
from .base.api import BaseAPI
from .config import ConfigKey, ConfigReader
from .driver.session import session_registry
from .errors import ConfigurationMissing, DataIngestionFailure
from .listener import LifecycleListener
from .reports.report_manager import ReportManager
from .utils import extract_test_description, format_summary_lines, load_test_data
from .utils.RoboHelper import get_version
from .utils.waits import default_timeout


logger = logging.getLogger(__name__)
logger.propagate = True

WORKER_SUITE_FOLDER_KEY = "robo_suite_folder"
WORKER_REPORTS_KEY = "robo_group_reports"


# ============================================================================
# Pytest Hooks (ordered by execution sequence)
# ============================================================================

# ============================================================================
# HOOK 1: pytest_addoption
# Execution: Very first - before plugins are loaded
# Purpose: Register custom command-line options for the pytest command
# ============================================================================


def pytest_addoption(parser):
    """
    Register command-line options for the robo-web-test-kit plugin.

    Options:
    - --robo-config: Path of config.properties (default: tests/resources/config.properties)
    - --robo-reports-root: Reports root; the suite folder is <root><timestamp>
    - --robo-browser: Browser family, overrides the 'browser' config key
    """
    group = parser.getgroup("robo-web-test-kit", "Robo Web Test Kit Options")
    group.addoption(
        "--robo-config",
        action="store",
        dest="robo_config_path",
        default=None,
        help="Path to config.properties (default: tests/resources/config.properties)",
    )
    group.addoption(
        "--robo-reports-root",
        action="store",
        dest="robo_reports_root",
        default=None,
        help="Reports root; each run writes to <root><YYYYMMDD_HHMMSS> (default: ./Reports)",
    )
    group.addoption(
        "--robo-browser",
        action="store",
        dest="robo_browser",
        default=None,
        help="Browser family: chrome, firefox, edge or safari (overrides config)",
    )


# ============================================================================
# HOOK 2: pytest_addhooks
# Execution: When the plugin is registered
# Purpose: Make robo_* hooks available to conftest.py implementations
# ============================================================================


def pytest_addhooks(pluginmanager):
    pluginmanager.add_hookspecs(hookspec)


# ============================================================================
# HOOK 3: pytest_load_initial_conftests
# Execution: Before command-line parsing completes
# Purpose: Translate parallel=true / threadCount=N into pytest-xdist's -n N
# Runs on: Master process (workers already carry their own arguments)
# ============================================================================


def _config_path_from_args(args):
    for index, arg in enumerate(args):
        if arg == "--robo-config" and index + 1 < len(args):
            return args[index + 1]
        if arg.startswith("--robo-config="):
            return arg.split("=", 1)[1]
    return None


def _has_numprocesses(args) -> bool:
    return any(
        arg in ("-n", "--numprocesses")
        or arg.startswith("--numprocesses=")
        or (arg.startswith("-n") and arg[2:].strip("=").isalnum())
        for arg in args
    )


def pytest_load_initial_conftests(early_config, parser, args):
    """
    Add ``-n <threadCount>`` when the config asks for parallel execution.

    Skipped when pytest-xdist is not installed, when -n was given explicitly,
    and inside xdist workers.
    """
    if os.getenv("PYTEST_XDIST_WORKER"):
        return
    if not early_config.pluginmanager.hasplugin("xdist"):
        return
    if _has_numprocesses(args):
        return

    reader = ConfigReader(_config_path_from_args(args))
    try:
        parallel = reader.get_bool(ConfigKey.PARALLEL, False)
        thread_count = reader.get_int(ConfigKey.THREADCOUNT, 1)
    except ConfigurationMissing:
        # Reported properly at session start
        return

    if parallel and thread_count and thread_count > 1:
        logger.info(f"parallel=true: running with pytest-xdist -n {thread_count}")
        args[:] = ["-n", str(thread_count)] + list(args)


# ============================================================================
# HOOK 4: pytest_configure
# Execution: After command-line parsing and all plugins loaded
# Purpose: Load configuration, register markers, create the lifecycle listener
# Runs on: Both master and worker processes
# ============================================================================


def pytest_configure(config):
    """
    Initialize robo-web-test-kit plugin state.

    Responsibilities:
    1. Load environment variables from .env
    2. Bind the process-wide configuration to config.properties
    3. Register the group / datafile / description markers
    4. Create the lifecycle listener (config._robo_listener); in xdist workers
       it keeps finished groups in memory for the master to merge
    """
    load_dotenv()

    config.addinivalue_line(
        "markers", "group(name): report group of the test (one HTML report per group)"
    )
    config.addinivalue_line(
        "markers",
        "datafile(file, sheet=None): parametrize 'row' from a CSV/Excel/JSON file "
        "in tests/resources/testdata",
    )
    config.addinivalue_line(
        "markers", "description(text): description shown on the test's report node"
    )

    reader = robo_config_module.configure(config.getoption("robo_config_path"))
    session_registry.configure(reader)

    reports = ReportManager(
        reports_root=config.getoption("robo_reports_root"), config=reader
    )
    config._robo_listener = LifecycleListener(
        reports=reports,
        sessions=session_registry,
        deferred=hasattr(config, "workerinput"),
    )


def _listener(config) -> LifecycleListener:
    return config._robo_listener


# ============================================================================
# HOOK 5: pytest_sessionstart
# Execution: After session object has been created and before collection starts
# Purpose: Fail fast on bad configuration and create the suite report folder
# Runs on: Both master and worker processes
# ============================================================================


@pytest.hookimpl(tryfirst=True)
def pytest_sessionstart(session):
    """
    Suite start.

    The master creates ``Reports<YYYYMMDD_HHMMSS>``; xdist workers adopt the
    folder handed over in ``workerinput`` so all groups land in one place.
    """
    config = session.config
    try:
        robo_config_module.get_config().values
    except ConfigurationMissing as exc:
        raise pytest.UsageError(str(exc)) from exc

    suite_folder = None
    if hasattr(config, "workerinput"):
        suite_folder = config.workerinput.get(WORKER_SUITE_FOLDER_KEY)
    _listener(config).on_suite_start(suite_folder)


# ============================================================================
# HOOK 6: pytest_report_header
# Execution: Early in session (after pytest_sessionstart)
# Purpose: Add custom header text to test report output
# Runs on: Master process
# ============================================================================


def pytest_report_header(config):
    """
    Add kit version and browser settings to the pytest console header.
    """
    if hasattr(config, "workerinput"):
        return

    reader = robo_config_module.get_config()
    browser = config.getoption("robo_browser") or reader.get(ConfigKey.BROWSER)
    headless = reader.get_bool(ConfigKey.HEADLESS, False)
    execution = reader.get(ConfigKey.EXECUTION, "local")
    if getattr(config.option, "numprocesses", None):
        parallel_status = f"Enabled (pytest-xdist, dist={config.option.dist})"
    else:
        parallel_status = "Disabled (Serial execution)"

    header_lines = [
        "",
        "=" * 80,
        f"Robo Web Test Kit v{get_version()}",
        "=" * 80,
        f"Report:         {reader.get(ConfigKey.REPORTNAME, constants.DEFAULT_REPORT_TITLE)}",
        f"Browser:        {browser}",
        f"Headless:       {headless}",
        f"Execution:      {execution}",
        f"Parallel Mode:  {parallel_status}",
        f"Report Folder:  {_listener(config).reports.suite_folder}",
        "=" * 80,
        "",
    ]

    return header_lines


# ============================================================================
# HOOK 7: pytest_generate_tests
# Execution: For each test function during collection
# Purpose: Parametrize tests with CSV/Excel/JSON data rows
# Runs on: Both master and worker processes
# ============================================================================


def pytest_generate_tests(metafunc):
    """
    Parametrize tests with data from CSV/Excel/JSON files.

    Triggered when:
    - Test has @pytest.mark.datafile("filename.csv") marker
    - Test declares 'row' as a fixture/parameter

    Relative file names resolve against tests/resources/testdata.
    Excel workbooks accept a sheet: @pytest.mark.datafile("Data.xlsx", sheet="Login").
    """
    marker = metafunc.definition.get_closest_marker("datafile")
    if not marker or not marker.args:
        return

    if "row" not in metafunc.fixturenames:
        return

    data_file = Path(marker.args[0])
    data_path = data_file if data_file.is_absolute() else constants.testdata_folder() / data_file

    try:
        rows = load_test_data(data_path, sheet=marker.kwargs.get("sheet"))
    except DataIngestionFailure as exc:
        logger.error(f"Failed to load data file '{data_file}' for {metafunc.definition.nodeid}")
        pytest.fail(exc.message, pytrace=False)

    metafunc.parametrize("row", rows)


# ============================================================================
# HOOK 8: pytest_collection_modifyitems
# Execution: After test collection
# Purpose: Order items so each report group runs as one contiguous block
# Runs on: Both master and worker processes
# ============================================================================


def get_group_name(item) -> str:
    """
    Report group of ``item``: group marker, then robo_group_name hook, then module stem.
    """
    cached = getattr(item, "_robo_group", None)
    if cached is not None:
        return cached

    marker = item.get_closest_marker("group")
    if marker is not None and marker.args:
        group_name = str(marker.args[0])
    else:
        group_name = item.config.hook.robo_group_name(item=item)
        if not group_name:
            group_name = Path(item.path).stem

    item._robo_group = group_name
    return group_name


def get_test_description(item):
    marker = item.get_closest_marker("description")
    if marker is not None and marker.args:
        return str(marker.args[0])
    return extract_test_description(item) or None


def pytest_collection_modifyitems(session, config, items):
    """
    Stable-sort items by the first appearance of their group.

    A group that came back later would otherwise start a second report and
    overwrite the first one's file.
    """
    first_seen = {}
    for item in items:
        first_seen.setdefault(get_group_name(item), len(first_seen))
    items[:] = sorted(items, key=lambda item: first_seen[get_group_name(item)])


# ============================================================================
# HOOK 9: pytest_runtest_protocol
# Execution: Around the whole setup/call/teardown of one test
# Purpose: group-start, test-method-start, teardown, group-end
# Runs on: The process (and thread) executing the test
# ============================================================================


def _finish_group(config):
    listener = _listener(config)
    group_name = listener.current_group()
    report_path = listener.on_group_finish()
    if report_path is not None:
        config.hook.robo_report_flushed(
            config=config, group_name=group_name, report_path=report_path
        )
    return report_path


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_protocol(item, nextitem):
    """
    Bind the group report and the test node around one test.

    Sequence:
    1. group changed -> flush the previous group, start the new one
    2. create the test node, log "Test Started"
    3. run setup/call/teardown (verdicts are logged by makereport)
    4. dispose the browser session, unbind the node
    5. next item in another group (or none) -> flush this group
    """
    config = item.config
    listener = _listener(config)
    group_name = get_group_name(item)

    current = listener.current_group()
    if current != group_name:
        if current is not None:
            _finish_group(config)
        listener.on_group_start(group_name)

    listener.on_test_start(item.name, get_test_description(item), group_name=group_name)

    yield

    listener.on_test_teardown()

    if nextitem is None or get_group_name(nextitem) != group_name:
        _finish_group(config)


# ============================================================================
# HOOK 10: pytest_runtest_makereport
# Execution: For each test phase (setup, call, teardown) after phase completes
# Purpose: Log the verdict on the current test node
# Runs on: The process (and thread) executing the test
# ============================================================================


def _error_of(call, report):
    if call.excinfo is not None:
        return call.excinfo.value
    return report.longreprtext or report.outcome


@pytest.hookimpl(hookwrapper=True, tryfirst=True)
def pytest_runtest_makereport(item, call):
    """
    Map phase outcomes to node entries.

    - setup failed / skipped      -> Test Failed / Test Skipped
    - call passed / failed / skip -> Test Passed / Test Failed / Test Skipped
    - xfail                       -> Test Skipped, xpass -> Test Passed
    - teardown failed             -> Test Failed
    """
    outcome = yield
    report = outcome.get_result()
    listener = _listener(item.config)
    name = item.name

    if report.when == "setup":
        if report.failed:
            listener.on_test_failure(name, _error_of(call, report))
        elif report.skipped:
            listener.on_test_skipped(name, _error_of(call, report))
        return

    if report.when == "call":
        if hasattr(report, "wasxfail"):
            if report.skipped:
                listener.on_test_skipped(name, f"xfail: {report.wasxfail}")
            else:
                listener.on_test_success(name)
        elif report.passed:
            listener.on_test_success(name)
        elif report.failed:
            listener.on_test_failure(name, _error_of(call, report))
        elif report.skipped:
            listener.on_test_skipped(name, _error_of(call, report))
        return

    if report.when == "teardown" and report.failed:
        listener.on_test_failure(name, _error_of(call, report))


# ============================================================================
# HOOK 11: pytest_configure_node (xdist only)
# Execution: When xdist worker node is being configured
# Purpose: Hand the suite folder to the worker
# Runs on: Master process, once per worker
# ============================================================================


@pytest.hookimpl(optionalhook=True)
def pytest_configure_node(node):
    suite_folder = _listener(node.config).reports.suite_folder
    if suite_folder is not None:
        node.workerinput[WORKER_SUITE_FOLDER_KEY] = str(suite_folder)


# ============================================================================
# HOOK 12: pytest_testnodedown (xdist only)
# Execution: When xdist worker process terminates
# Purpose: Merge the group reports recorded by the worker; a group whose tests
#          ran on several workers ends up as one report
# Runs on: Master process only (for each completed worker)
# ============================================================================


@pytest.hookimpl(optionalhook=True)
def pytest_testnodedown(node, error):
    worker_id = node.workerinput.get("workerid", "unknown")
    if error:
        logger.warning(f"Worker {worker_id} encountered error: {error}")

    workeroutput = getattr(node, "workeroutput", None) or {}
    _listener(node.config).on_worker_reports(workeroutput.get(WORKER_REPORTS_KEY, []))


# ============================================================================
# HOOK 13: pytest_sessionfinish
# Execution: After all tests have finished, before terminal summary
# Purpose: Flush a group left open by an interrupted run (suite-end); workers
#          ship their groups to the master, the master writes the merged files
# Runs on: Both master and worker processes
# ============================================================================


def pytest_sessionfinish(session, exitstatus):
    config = session.config
    listener = getattr(config, "_robo_listener", None)
    if listener is None:
        return

    if listener.current_group() is not None:
        _finish_group(config)

    if hasattr(config, "workeroutput"):
        config.workeroutput[WORKER_REPORTS_KEY] = [
            extent.to_dict() for extent in listener.deferred_reports
        ]
    else:
        for group_name, report_path in listener.flush_merged_reports():
            config.hook.robo_report_flushed(
                config=config, group_name=group_name, report_path=report_path
            )

    listener.on_suite_finish()


# ============================================================================
# HOOK 14: pytest_terminal_summary
# Execution: After session finalization
# Purpose: Show where the group reports were written
# Runs on: Master process only (not in xdist workers)
# ============================================================================


def pytest_terminal_summary(terminalreporter, exitstatus, config):
    if hasattr(config, "workerinput"):
        return

    listener = getattr(config, "_robo_listener", None)
    if listener is None or listener.reports.suite_folder is None:
        return

    terminalreporter.ensure_newline()
    terminalreporter.section("Robo Web Test Kit Reports", sep="=")
    for line in format_summary_lines(listener.reports.suite_folder, listener.flushed_reports):
        terminalreporter.write_line(line)
    terminalreporter.ensure_newline()


# ============================================================================
# Pytest Fixtures (provided by plugin for all consuming projects)
# ============================================================================


@pytest.fixture(scope="session")
def robo_config():
    """The process-wide ConfigReader bound to config.properties."""
    return robo_config_module.get_config()


@pytest.fixture(scope="session")
def robo_driver_factory():
    """
    Override point for how browser sessions are started.

    Return a callable ``factory(family, options, config) -> WebDriver`` from a
    conftest.py fixture of the same name to replace the default (local
    browser, or selenium Remote when execution=grid). None keeps the default.
    """
    return None


@pytest.fixture(scope="function")
def row(request):
    """
    Fixture to provide parametrized test data row.

    Usage:
    ======
    @pytest.mark.datafile("LoginData.csv")
    def test_user_login(row, driver, wait):
        username = row['Username']

    Each row is a dict keyed by column header; empty cells are empty strings.
    """
    return request.param


@pytest.fixture(scope="function")
def driver(request, robo_driver_factory):
    """
    Browser session bound to the test's thread.

    The browser family comes from --robo-browser or the 'browser' key;
    headless from the 'headless' key. Chromium-based browsers get a
    temporary profile directory that is removed when the session quits.
    The session is disposed at teardown.

    Usage:
    ======
    def test_login(driver, wait):
        driver.get("https://example.com/login")
        wait.until(EC.presence_of_element_located((By.ID, "username")))
    """
    session = session_registry.init(
        browser=request.config.getoption("robo_browser"),
        factory=robo_driver_factory,
    )
    request.addfinalizer(session_registry.dispose)
    return session.driver


@pytest.fixture()
def wait(driver):
    """
    WebDriverWait with the configured timeout (implicitWait, then timeout, then 15s).
    """
    return WebDriverWait(driver, default_timeout())


@pytest.fixture()
def report(request):
    """The ReportLogger writing to the current test's report node."""
    return _listener(request.config).log


@pytest.fixture()
def api(robo_config):
    """BaseAPI client rooted at apiBaseUrl; closed after the test."""
    client = BaseAPI(config=robo_config)
    yield client
    client.close()
