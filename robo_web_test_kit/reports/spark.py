"""
Spark-style HTML reporter.

An ExtentReports instance owns one SparkReporter (output file and display
configuration) and the ExtentTest nodes created under it. Writes into one
instance are serialized by its lock, so test nodes of the same report can
be logged from several threads. ``flush`` renders the whole report with
the Jinja2 spark template and may be called any number of times.

``to_dict`` and ``merge`` move a report between processes as plain data.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..utils.reports.HtmlReportUtils import render_spark_report


class Status(str, Enum):
    INFO = "INFO"
    PASS = "PASS"
    FAIL = "FAIL"
    WARNING = "WARN"
    SKIP = "SKIP"


# Highest first
STATUS_HIERARCHY = (Status.FAIL, Status.WARNING, Status.SKIP, Status.PASS, Status.INFO)


def worst_status(statuses) -> Status:
    found = set(statuses)
    for status in STATUS_HIERARCHY:
        if status in found:
            return status
    return Status.PASS


class Theme(str, Enum):
    STANDARD = "standard"
    DARK = "dark"


@dataclass(frozen=True)
class MediaEntity:
    base64: str
    title: Optional[str] = None
    mime_type: str = "image/png"

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"

    def to_dict(self) -> dict:
        return {"base64": self.base64, "title": self.title, "mime_type": self.mime_type}


class MediaEntityBuilder:
    @staticmethod
    def create_screen_capture_from_base64_string(
        base64_string: str, title: Optional[str] = None
    ) -> MediaEntity:
        if base64_string.startswith("data:"):
            base64_string = base64_string.split(",", 1)[1]
        return MediaEntity(base64=base64_string, title=title)


@dataclass
class LogEntry:
    status: Status
    message: str
    media: Optional[MediaEntity] = None
    timestamp: datetime = field(default_factory=datetime.now)
    thread_name: str = field(default_factory=lambda: threading.current_thread().name)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "message": self.message,
            "media": self.media.to_dict() if self.media is not None else None,
            "timestamp": self.timestamp.isoformat(),
            "thread_name": self.thread_name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LogEntry":
        media = data.get("media")
        return cls(
            status=Status(data["status"]),
            message=data["message"],
            media=MediaEntity(**media) if media else None,
            timestamp=datetime.fromisoformat(data["timestamp"]),
            thread_name=data.get("thread_name", ""),
        )


@dataclass
class SparkReporterConfig:
    document_title: str = "Automation Report"
    report_name: str = "Execution Report"
    theme: Theme = Theme.STANDARD
    encoding: str = "utf-8"


class SparkReporter:
    def __init__(self, output_path: Union[str, Path]):
        self.output_path = Path(output_path)
        self._config = SparkReporterConfig()

    def config(self) -> SparkReporterConfig:
        return self._config


class ExtentTest:
    """One test method's node inside a report."""

    __test__ = False

    def __init__(self, report: "ExtentReports", name: str, description: Optional[str] = None):
        self._report = report
        self.name = name
        self.description = description or ""
        self.start_time = datetime.now()
        self.end_time: Optional[datetime] = None
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> list[LogEntry]:
        with self._report.lock:
            return list(self._entries)

    @property
    def status(self) -> Status:
        return worst_status(entry.status for entry in self.entries)

    def log(self, status: Status, message: str, media: Optional[MediaEntity] = None) -> "ExtentTest":
        entry = LogEntry(status=Status(status), message=str(message), media=media)
        with self._report.lock:
            self._entries.append(entry)
            self.end_time = entry.timestamp
        return self

    def info(self, message: str, media: Optional[MediaEntity] = None) -> "ExtentTest":
        return self.log(Status.INFO, message, media)

    def pass_(self, message: str, media: Optional[MediaEntity] = None) -> "ExtentTest":
        return self.log(Status.PASS, message, media)

    def fail(self, message: str, media: Optional[MediaEntity] = None) -> "ExtentTest":
        return self.log(Status.FAIL, message, media)

    def warning(self, message: str, media: Optional[MediaEntity] = None) -> "ExtentTest":
        return self.log(Status.WARNING, message, media)

    def skip(self, message: str, media: Optional[MediaEntity] = None) -> "ExtentTest":
        return self.log(Status.SKIP, message, media)

    def to_dict(self) -> dict:
        with self._report.lock:
            return {
                "name": self.name,
                "description": self.description,
                "start_time": self.start_time.isoformat(),
                "end_time": self.end_time.isoformat() if self.end_time else None,
                "entries": [entry.to_dict() for entry in self._entries],
            }

    @classmethod
    def from_dict(cls, report: "ExtentReports", data: dict) -> "ExtentTest":
        node = cls(report, data["name"], data.get("description"))
        node.start_time = datetime.fromisoformat(data["start_time"])
        if data.get("end_time"):
            node.end_time = datetime.fromisoformat(data["end_time"])
        node._entries = [LogEntry.from_dict(entry) for entry in data.get("entries", [])]
        return node

    def __repr__(self):
        return f"ExtentTest(name={self.name!r}, entries={len(self._entries)})"


class ExtentReports:
    """A report document: reporter configuration, system info and test nodes."""

    def __init__(self):
        self.lock = threading.RLock()
        self.reporter: Optional[SparkReporter] = None
        self.group_name: Optional[str] = None
        self.system_info: dict[str, str] = {}
        self._tests: list[ExtentTest] = []
        self.created_at = datetime.now()
        self.flush_count = 0

    def attach_reporter(self, reporter: SparkReporter):
        self.reporter = reporter

    def set_system_info(self, key: str, value):
        with self.lock:
            self.system_info[key] = "" if value is None else str(value)

    def create_test(self, name: str, description: Optional[str] = None) -> ExtentTest:
        node = ExtentTest(self, name, description)
        with self.lock:
            self._tests.append(node)
        return node

    @property
    def tests(self) -> list[ExtentTest]:
        with self.lock:
            return list(self._tests)

    @property
    def output_path(self) -> Optional[Path]:
        return self.reporter.output_path if self.reporter else None

    def status_counts(self) -> dict[str, int]:
        counts = {status.value: 0 for status in (Status.PASS, Status.FAIL, Status.SKIP, Status.WARNING)}
        for test in self.tests:
            status = test.status
            if status.value in counts:
                counts[status.value] += 1
        return counts

    def to_dict(self) -> dict:
        """Plain-data copy of the report, small enough to ship between processes."""
        with self.lock:
            return {
                "group_name": self.group_name,
                "system_info": dict(self.system_info),
                "created_at": self.created_at.isoformat(),
                "tests": [test.to_dict() for test in self._tests],
            }

    def merge(self, data: dict):
        """
        Add the test nodes of another report of the same group.

        Nodes stay ordered by start time, so parts recorded by several
        processes read as one run.
        """
        with self.lock:
            for key, value in data.get("system_info", {}).items():
                self.system_info.setdefault(key, value)
            self.created_at = min(self.created_at, datetime.fromisoformat(data["created_at"]))
            self._tests.extend(ExtentTest.from_dict(self, test) for test in data.get("tests", []))
            self._tests.sort(key=lambda test: test.start_time)

    def flush(self) -> Optional[Path]:
        if self.reporter is None:
            return None
        with self.lock:
            config = self.reporter.config()
            html_content = render_spark_report(
                document_title=config.document_title,
                report_name=config.report_name,
                theme=config.theme.value,
                system_info=dict(self.system_info),
                tests=list(self._tests),
                counts=self.status_counts(),
                created_at=self.created_at,
                generated_at=datetime.now(),
            )
            output_path = self.reporter.output_path
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(html_content, encoding=config.encoding)
            self.flush_count += 1
        return output_path
