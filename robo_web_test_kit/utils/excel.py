"""
Excel (.xlsx) reader for data-driven tests.

    with ExcelReader(testdata_folder() / "LoginData.xlsx", "Sheet1") as excel:
        rows = excel.get_data_as_list_of_maps()
        username = rows[0]["Username"]

The first row is the header row; each following non-empty row becomes an
ordered ``{header: value}`` dict with all values as strings.
"""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Union
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..errors import DataIngestionFailure

logger = logging.getLogger(__name__)


def format_cell_value(value) -> str:
    """String form of a cell value, close to what the spreadsheet displays."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


class ExcelReader:
    def __init__(self, file_path: Union[str, Path], sheet_name: Optional[str] = None):
        self.file_path = Path(file_path)
        try:
            self.workbook = load_workbook(self.file_path, data_only=True)
        except (OSError, BadZipFile, InvalidFileException, KeyError) as exc:
            raise DataIngestionFailure(
                f"Unable to load Excel file {self.file_path}: {exc}",
                {"path": str(self.file_path)},
            ) from exc

        if sheet_name is None:
            self.sheet = self.workbook.active
        elif sheet_name in self.workbook.sheetnames:
            self.sheet = self.workbook[sheet_name]
        else:
            self.workbook.close()
            raise DataIngestionFailure(
                f"Sheet '{sheet_name}' not found in {self.file_path}",
                {"path": str(self.file_path), "sheet": sheet_name},
            )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _headers(self) -> list[str]:
        header_row = next(self.sheet.iter_rows(min_row=1, max_row=1, values_only=True), None)
        headers = [format_cell_value(value) for value in (header_row or ())]
        # Trailing empty header cells carry no column
        while headers and headers[-1] == "":
            headers.pop()
        if not headers:
            raise DataIngestionFailure(
                f"No header row found in sheet: {self.sheet.title}",
                {"path": str(self.file_path), "sheet": self.sheet.title},
            )
        return headers

    def get_data_as_list_of_maps(self) -> list[dict[str, str]]:
        headers = self._headers()
        all_data = []
        for row in self.sheet.iter_rows(min_row=2, values_only=True):
            if row is None or all(value is None for value in row):
                continue
            values = list(row) + [None] * (len(headers) - len(row))
            all_data.append(
                {header: format_cell_value(values[i]) for i, header in enumerate(headers)}
            )
        logger.debug(f"Read {len(all_data)} row(s) from {self.file_path.name}:{self.sheet.title}")
        return all_data

    def get_cell_data(self, row_num: int, column_name: str) -> Optional[str]:
        """
        Value at data row ``row_num`` (1 = first row below the header) under
        ``column_name`` (case-insensitive). None if the column does not exist.
        """
        for index, header in enumerate(self._headers(), start=1):
            if header.lower() == column_name.lower():
                return format_cell_value(self.sheet.cell(row=row_num + 1, column=index).value)
        return None

    def close(self):
        self.workbook.close()
