"""
JSON test-data helpers.

Relative file names are resolved against ``tests/resources/testdata``.
"""

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Union

from .. import constants
from ..errors import DataIngestionFailure


def resolve_data_path(file_path: Union[str, Path]) -> Path:
    path = Path(file_path)
    if path.is_absolute():
        return path
    return constants.testdata_folder() / path


def from_json(file_path: Union[str, Path], model: Optional[Callable[..., Any]] = None):
    """
    Parse a JSON data file.

    With ``model``, a JSON object is passed as keyword arguments
    (``model(**obj)``) and a JSON array is mapped element-wise.
    """
    path = resolve_data_path(file_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise DataIngestionFailure(
            f"Failed to parse JSON file: {path}: {exc}", {"path": str(path)}
        ) from exc

    if model is None:
        return data
    try:
        if isinstance(data, list):
            return [model(**item) for item in data]
        return model(**data)
    except TypeError as exc:
        raise DataIngestionFailure(
            f"JSON file {path} does not match {getattr(model, '__name__', model)}: {exc}",
            {"path": str(path)},
        ) from exc


def to_json(obj, indent: Optional[int] = None) -> str:
    return json.dumps(obj, indent=indent, default=_default)


def _default(obj):
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if hasattr(obj, "__dict__"):
        return vars(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
