# Helpers shared by the plugin: env lookup, data files, test metadata
import logging
import os
import zipfile
from importlib import metadata
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from ..errors import DataIngestionFailure


logger = logging.getLogger(__name__)
logger.propagate = True

DISTRIBUTION_NAME = "robo-web-test-kit"


def get_env(key: str, default: Any = "") -> Any:
    value = os.getenv(key)
    if value is not None:
        value = value.strip()
        return value if value else default
    return default


def load_test_data(path: Path, sheet: Optional[str] = None) -> list[dict]:
    """Load test data rows from a CSV, Excel or JSON file using pandas.

    Supports multiple file formats and encodings:
    - CSV files with utf-8-sig, latin-1, or utf-8 encoding
    - Excel workbooks (.xlsx), optionally a named sheet
    - JSON files holding an array of objects

    Returns a list of dict rows suitable for pytest parametrization.
    Raises DataIngestionFailure when the file is missing or unreadable.
    """
    path = Path(path)

    if not path.exists():
        raise DataIngestionFailure(f"Data file not found: {path}", {"path": str(path)})

    try:
        if zipfile.is_zipfile(path):
            df = pd.read_excel(
                path,
                sheet_name=sheet if sheet is not None else 0,
                engine="openpyxl",
                dtype=str,
                keep_default_na=False,
            )
        elif path.suffix.lower() == ".json":
            df = pd.read_json(path, orient="records", dtype=False)
        else:
            df = None
            for enc in ("utf-8-sig", "latin-1", "utf-8"):
                try:
                    df = pd.read_csv(
                        path, encoding=enc, dtype=str, keep_default_na=False
                    )
                    break
                except UnicodeDecodeError:
                    df = None
            if df is None:
                raise DataIngestionFailure(
                    f"Could not load CSV file {path} with any supported encoding",
                    {"path": str(path)},
                )
    except DataIngestionFailure:
        raise
    except (ValueError, OSError, pd.errors.ParserError) as exc:
        raise DataIngestionFailure(
            f"Error loading data file {path}: {exc}", {"path": str(path)}
        ) from exc

    if df.columns.empty:
        raise DataIngestionFailure(
            f"No header row found in data file {path}", {"path": str(path)}
        )

    df = df.fillna("")
    # Fully blank rows carry no test case
    df = df[~(df.astype(str) == "").all(axis=1)]
    return df.to_dict(orient="records")


def extract_test_description(item) -> str:
    """First line of the test function docstring, or an empty string."""
    function = getattr(item, "function", None)
    docstring = getattr(function, "__doc__", None)
    if not docstring:
        return ""
    return docstring.strip().splitlines()[0].strip()


def format_summary_lines(suite_folder, flushed_reports) -> list[str]:
    """Lines for the terminal summary: suite folder and one line per group report."""
    lines = [f"Report folder: {suite_folder}"]
    for group_name, report_path, counts in flushed_reports:
        lines.append(
            "{:<30} PASS {:>3}  FAIL {:>3}  SKIP {:>3}  -> {}".format(
                group_name,
                counts.get("PASS", 0),
                counts.get("FAIL", 0),
                counts.get("SKIP", 0),
                report_path,
            )
        )
    return lines


def get_version() -> str:
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"
