"""
Report data models for test results.

This module defines the data structures that make up a report:
groups (containers), tests, fixtures and steps, plus the labels,
parameters, links and attachments hung off them.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────

class Status(str, Enum):
    """Outcome of an executable item."""
    PASSED = "passed"
    FAILED = "failed"
    BROKEN = "broken"
    SKIPPED = "skipped"


class Stage(str, Enum):
    """Lifecycle phase of an executable item."""
    SCHEDULED = "scheduled"
    RUNNING = "running"
    FINISHED = "finished"
    PENDING = "pending"
    INTERRUPTED = "interrupted"


class LabelName(str, Enum):
    """Well-known label names used to organize a report."""
    PARENT_SUITE = "parentSuite"
    SUITE = "suite"
    SUB_SUITE = "subSuite"
    PACKAGE = "package"
    THREAD = "thread"
    HOST = "host"
    FEATURE = "feature"
    STORY = "story"
    EPIC = "epic"
    SEVERITY = "severity"
    OWNER = "owner"
    TAG = "tag"


class LinkType(str, Enum):
    """Kinds of external links attached to a test."""
    ISSUE = "issue"
    TMS = "tms"


class ContentType(str, Enum):
    """Media types accepted for attachments."""
    TEXT = "text/plain"
    XML = "application/xml"
    HTML = "text/html"
    CSV = "text/csv"
    TSV = "text/tab-separated-values"
    CSS = "text/css"
    URI = "text/uri-list"
    SVG = "image/svg+xml"
    PNG = "image/png"
    JPEG = "image/jpeg"
    JSON = "application/json"
    WEBM = "video/webm"

    @property
    def extension(self) -> str:
        """File extension used when the attachment is persisted."""
        return _EXTENSIONS[self]


_EXTENSIONS = {
    ContentType.TEXT: "txt",
    ContentType.XML: "xml",
    ContentType.HTML: "html",
    ContentType.CSV: "csv",
    ContentType.TSV: "tsv",
    ContentType.CSS: "css",
    ContentType.URI: "uri",
    ContentType.SVG: "svg",
    ContentType.PNG: "png",
    ContentType.JPEG: "jpg",
    ContentType.JSON: "json",
    ContentType.WEBM: "webm",
}


# ─────────────────────────────────────────────────────────────────────────────
# Leaf records
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class StatusDetails:
    """Failure or skip explanation for an executable item."""
    message: str | None = None
    trace: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.message is not None:
            result["message"] = self.message
        if self.trace is not None:
            result["trace"] = self.trace
        return result


@dataclass
class Label:
    name: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass
class Parameter:
    name: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass
class Link:
    url: str
    name: str | None = None
    type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "name": self.name, "type": self.type}


@dataclass
class Attachment:
    """Reference to attachment content persisted by a writer."""
    name: str
    type: str
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type, "source": self.source}


# ─────────────────────────────────────────────────────────────────────────────
# Executable results
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class ExecutableResult:
    """
    Shared shape of tests, fixtures and steps.

    Every item starts without a status, with empty details and in the
    scheduled stage. ``start`` and ``stop`` are stamped once each.
    """
    name: str | None = None
    status: Status | None = None
    status_details: StatusDetails = field(default_factory=StatusDetails)
    stage: Stage = Stage.SCHEDULED
    description: str | None = None
    steps: list[StepResult] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
    parameters: list[Parameter] = field(default_factory=list)
    start: datetime | None = None
    stop: datetime | None = None

    def mark_started(self) -> None:
        """Stamp the start time if it has not been set yet."""
        if self.start is None:
            self.start = datetime.now(timezone.utc)

    def mark_stopped(self) -> None:
        """Stamp the stop time if it has not been set yet."""
        if self.stop is None:
            self.stop = datetime.now(timezone.utc)

    @property
    def duration_ms(self) -> float | None:
        if self.start is None or self.stop is None:
            return None
        return (self.stop - self.start).total_seconds() * 1000

    def add_parameter(self, name: str, value: str) -> None:
        self.parameters.append(Parameter(name, value))

    def add_attachment(self, name: str, content_type: str, source: str) -> None:
        self.attachments.append(Attachment(name, _text(content_type), source))

    def add_step(self, step: StepResult) -> None:
        self.steps.append(step)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "name": self.name,
            "status": self.status.value if self.status else None,
            "statusDetails": self.status_details.to_dict(),
            "stage": self.stage.value,
            "description": self.description,
            "steps": [step.to_dict() for step in self.steps],
            "attachments": [a.to_dict() for a in self.attachments],
            "parameters": [p.to_dict() for p in self.parameters],
            "start": _millis(self.start),
            "stop": _millis(self.stop),
        }


@dataclass
class StepResult(ExecutableResult):
    """A named sub-unit of execution inside a test, fixture or step."""
    pass


@dataclass
class FixtureResult(ExecutableResult):
    """Setup or teardown code attached to a group."""
    pass


@dataclass
class TestResult(ExecutableResult):
    """Record of one spec execution."""
    __test__ = False

    uuid: str = field(default_factory=lambda: str(uuid.uuid4()))
    history_id: str | None = None
    full_name: str | None = None
    labels: list[Label] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)

    def add_label(self, name: str, value: str) -> None:
        self.labels.append(Label(_text(name), str(value)))

    def add_link(self, url: str, name: str | None = None, link_type: str | None = None) -> None:
        self.links.append(Link(url, name, _text(link_type) if link_type else None))

    def labels_named(self, name: str) -> list[str]:
        """Values of every label with the given name, in insertion order."""
        return [label.value for label in self.labels if label.name == _text(name)]

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result.update({
            "uuid": self.uuid,
            "historyId": self.history_id,
            "fullName": self.full_name,
            "labels": [label.to_dict() for label in self.labels],
            "links": [link.to_dict() for link in self.links],
        })
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)


# ─────────────────────────────────────────────────────────────────────────────
# Containers
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class GroupResult:
    """
    A named container of tests, sub-groups and fixtures.

    Children are referenced by uuid; fixtures are stored inline.
    """
    uuid: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str | None = None
    children: list[str] = field(default_factory=list)
    befores: list[FixtureResult] = field(default_factory=list)
    afters: list[FixtureResult] = field(default_factory=list)
    start: datetime | None = None
    stop: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "uuid": self.uuid,
            "name": self.name,
            "children": list(self.children),
            "befores": [f.to_dict() for f in self.befores],
            "afters": [f.to_dict() for f in self.afters],
            "start": _millis(self.start),
            "stop": _millis(self.stop),
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)


def _millis(value: datetime | None) -> int | None:
    """Epoch milliseconds, the timestamp format of persisted results."""
    if value is None:
        return None
    return int(value.timestamp() * 1000)


def _text(value: Any) -> str:
    """Plain string for enum members and strings alike."""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)
