"""
Runtime root and group/test handles.

The runtime owns the writer and is the parent of every top-level group.
Groups hand out tests, sub-groups and fixtures, and write themselves
out when they end.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from ..errors import GroupClosedError, ItemFinalizedError
from ..results import (
    ContentType,
    ExecutableItem,
    Fixture,
    FixtureResult,
    GroupResult,
    TestResult,
)
from .base import BaseWriter


class Runtime:
    """
    Root of a report.

    Example:
        runtime = Runtime(InMemoryWriter())
        group = runtime.start_group("checkout")
        test = group.start_test("pays with card")
        test.end_test()
        group.end_group()
    """

    def __init__(self, writer: BaseWriter):
        self.writer = writer
        self.children: list[str] = []

    def start_group(self, name: str) -> Group:
        """Open a top-level group."""
        group = Group(self, name)
        self.children.append(group.uuid)
        return group

    def write_attachment(self, content: bytes | str, content_type: ContentType | str) -> str:
        """
        Persist attachment content and return its file name.

        Args:
            content: Raw bytes or text
            content_type: Media type; known types pick the file extension

        Returns:
            File name the attachment should be referenced by
        """
        try:
            extension = ContentType(content_type).extension
        except ValueError:
            extension = "attach"
        file_name = f"{uuid.uuid4()}-attachment.{extension}"
        self.writer.write_attachment(file_name, content)
        return file_name

    def write_result(self, result: TestResult) -> None:
        self.writer.write_result(result)

    def write_group(self, group: GroupResult) -> None:
        self.writer.write_group(group)


class Group:
    """Open container handle; sealed by ``end_group``."""

    def __init__(self, runtime: Runtime, name: str):
        self._runtime = runtime
        self._result = GroupResult(name=name)
        self._result.start = datetime.now(timezone.utc)
        self._closed = False

    @property
    def uuid(self) -> str:
        return self._result.uuid

    @property
    def name(self) -> str | None:
        return self._result.name

    @property
    def result(self) -> GroupResult:
        return self._result

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise GroupClosedError(f"Group '{self.name}' has already ended")

    def start_group(self, name: str) -> Group:
        """Open a child group."""
        self._check_open()
        group = Group(self._runtime, name)
        self._result.children.append(group.uuid)
        return group

    def start_test(self, name: str) -> TestItem:
        """Start a test inside this group."""
        self._check_open()
        test = TestItem(self._runtime, name)
        self._result.children.append(test.uuid)
        return test

    def add_before(self, name: str | None = None) -> Fixture:
        """Add a setup fixture."""
        self._check_open()
        result = FixtureResult(name=name)
        self._result.befores.append(result)
        return Fixture(result)

    def add_after(self, name: str | None = None) -> Fixture:
        """Add a teardown fixture."""
        self._check_open()
        result = FixtureResult(name=name)
        self._result.afters.append(result)
        return Fixture(result)

    def end_group(self) -> None:
        """Seal the group and write it out."""
        if self._closed:
            raise ItemFinalizedError(f"Group '{self.name}' has already ended")
        self._closed = True
        self._result.stop = datetime.now(timezone.utc)
        self._runtime.write_group(self._result)


class TestItem(ExecutableItem):
    """A running test; written out by ``end_test``."""
    __test__ = False

    def __init__(self, runtime: Runtime, name: str):
        super().__init__(TestResult(name=name))
        self._runtime = runtime
        self._result.mark_started()

    @property
    def result(self) -> TestResult:
        return self._result

    @property
    def uuid(self) -> str:
        return self._result.uuid

    @property
    def full_name(self) -> str | None:
        return self._result.full_name

    @full_name.setter
    def full_name(self, full_name: str) -> None:
        self._result.full_name = full_name

    @property
    def history_id(self) -> str | None:
        return self._result.history_id

    @history_id.setter
    def history_id(self, history_id: str) -> None:
        self._result.history_id = history_id

    def add_label(self, name: str, value: str) -> None:
        self._result.add_label(name, value)

    def add_link(self, url: str, name: str | None = None, link_type: str | None = None) -> None:
        self._result.add_link(url, name, link_type)

    def end_test(self) -> None:
        """Stamp the stop time and write the test out."""
        if self.ended:
            raise ItemFinalizedError(f"Test '{self.name}' has already ended")
        self._result.mark_stopped()
        self._runtime.write_result(self._result)
