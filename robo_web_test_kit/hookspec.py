"""
Hook specifications for robo_web_test_kit plugin.
These hooks allow source projects to customize report grouping and to
react to written reports.
"""

import pytest


@pytest.hookspec(firstresult=True)
def robo_group_name(item):
    """
    Hook specification for source projects to choose the report group of a test.

    Each group gets its own report file: <suiteFolder>/<group>_ExtentReport.html.
    A ``@pytest.mark.group("name")`` marker on the test wins over this hook;
    when neither gives a name the test module's stem is used.

    Args:
        item: pytest test item

    Returns:
        Group name string, or None to fall through to the default.

    Example in source project's conftest.py:
        @pytest.hookimpl
        def robo_group_name(item):
            if "smoke" in item.keywords:
                return "Smoke"
            return None
    """


@pytest.hookspec
def robo_report_flushed(config, group_name, report_path):
    """
    Hook specification for source projects to receive a written group report.

    Called once per group, right after its HTML report is flushed to disk.
    Under pytest-xdist it runs in the worker that executed the group.

    Args:
        config: Pytest config object with access to options and settings
        group_name: Name of the group the report belongs to
        report_path: Path of the written HTML report

    Returns:
        None. This is a notification hook, return values are ignored.

    Example in source project's conftest.py:
        @pytest.hookimpl
        def robo_report_flushed(config, group_name, report_path):
            '''Upload each report as soon as it is written.'''
            upload_to_bucket(report_path)
    """
