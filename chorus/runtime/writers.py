"""
Result writers: in-memory and JSON files on disk.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .base import BaseWriter

if TYPE_CHECKING:
    from ..results import GroupResult, TestResult

logger = logging.getLogger(__name__)


class InMemoryWriter(BaseWriter):
    """
    Keeps everything written in memory.

    Used by tests and by callers that post-process results themselves.
    """

    def __init__(self):
        self.tests: list[TestResult] = []
        self.groups: list[GroupResult] = []
        self.attachments: dict[str, bytes | str] = {}

    def write_result(self, result: TestResult) -> None:
        self.tests.append(result)

    def write_group(self, group: GroupResult) -> None:
        self.groups.append(group)

    def write_attachment(self, name: str, content: bytes | str) -> None:
        self.attachments[name] = content

    def get_test(self, name: str) -> TestResult | None:
        """Get a written test by name."""
        for test in self.tests:
            if test.name == name:
                return test
        return None

    def get_group(self, name: str) -> GroupResult | None:
        """Get the first written group with the given name."""
        for group in self.groups:
            if group.name == name:
                return group
        return None

    def get_group_by_uuid(self, uuid: str) -> GroupResult | None:
        for group in self.groups:
            if group.uuid == uuid:
                return group
        return None


class FileSystemWriter(BaseWriter):
    """
    Writes results as JSON files into a directory.

    Tests go to ``<uuid>-result.json``, groups to
    ``<uuid>-container.json``, attachments under their own file name.
    """

    def __init__(self, results_dir: str | Path):
        self.results_dir = Path(results_dir)

    def _prepare(self) -> Path:
        self.results_dir.mkdir(parents=True, exist_ok=True)
        return self.results_dir

    def write_result(self, result: TestResult) -> None:
        path = self._prepare() / f"{result.uuid}-result.json"
        path.write_text(result.to_json())
        logger.debug(f"Wrote test result: {path}")

    def write_group(self, group: GroupResult) -> None:
        path = self._prepare() / f"{group.uuid}-container.json"
        path.write_text(group.to_json())
        logger.debug(f"Wrote group: {path}")

    def write_attachment(self, name: str, content: bytes | str) -> None:
        path = self._prepare() / name
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_bytes(content)
        logger.debug(f"Wrote attachment: {path}")


def read_results(results_dir: str | Path) -> list[dict[str, Any]]:
    """
    Load every test result a FileSystemWriter wrote into a directory.

    Files that are not valid JSON are skipped with a warning.
    """
    results = []
    for path in sorted(Path(results_dir).glob("*-result.json")):
        try:
            results.append(json.loads(path.read_text()))
        except json.JSONDecodeError as e:
            logger.warning(f"Skipping unreadable result {path}: {e}")
    return results
