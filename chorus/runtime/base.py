"""
Base writer interface for persisting results.

This module defines the abstract base class that all result writers
must follow.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..results import GroupResult, TestResult


class BaseWriter(ABC):
    """
    Abstract base class for result writers.

    Writers receive finished tests and groups, and the raw content of
    attachments under the file name the runtime chose for them.
    """

    @abstractmethod
    def write_result(self, result: TestResult) -> None:
        """Persist a finished test."""
        pass

    @abstractmethod
    def write_group(self, group: GroupResult) -> None:
        """Persist a finished group."""
        pass

    @abstractmethod
    def write_attachment(self, name: str, content: bytes | str) -> None:
        """
        Persist attachment content.

        Args:
            name: File name the attachment is referenced by
            content: Raw bytes, or text to be stored as UTF-8
        """
        pass
