import os
from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATE_DIR_NAME = "spark_report"
TEMPLATE_FILE_NAME = "spark_template.html"


def get_html_template():
    """
    Returns the Jinja2 template object for the spark report.
    Checks for a source template in the project working directory first, then falls back to the package template.
    """
    source_template_dir = Path.cwd() / "templates" / TEMPLATE_DIR_NAME
    source_template_file = source_template_dir / TEMPLATE_FILE_NAME

    if source_template_file.exists():
        template_dir = str(source_template_dir)
    else:
        # Fall back to package template inside robo_web_test_kit directory
        package_root = os.path.abspath(
            os.path.join(os.path.dirname(__file__), "..", "..")
        )
        template_dir = os.path.join(package_root, "templates", TEMPLATE_DIR_NAME)

    env = Environment(
        loader=FileSystemLoader(template_dir),
        autoescape=select_autoescape(["html"]),
    )
    template = env.get_template(TEMPLATE_FILE_NAME)
    template.globals["format_duration"] = format_duration
    return template


def format_duration(start, end):
    """
    Format the span between two datetimes as HH:MM:SS.
    """
    if not isinstance(start, datetime) or not isinstance(end, datetime):
        return "-"
    total_seconds = max(0, int((end - start).total_seconds()))
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours:02}:{minutes:02}:{seconds:02}"


def render_spark_report(
    document_title,
    report_name,
    theme,
    system_info,
    tests,
    counts,
    created_at,
    generated_at,
):
    """
    Render the spark report HTML for one report instance.
    """
    template = get_html_template()
    return template.render(
        document_title=document_title,
        report_name=report_name,
        theme=theme,
        system_info=system_info,
        tests=tests,
        counts=counts,
        total=len(tests),
        created_at=created_at,
        generated_at=generated_at,
        generated_date=generated_at.strftime("%m-%d-%Y"),
        generated_time=generated_at.strftime("%I:%M:%S %p"),
    )
