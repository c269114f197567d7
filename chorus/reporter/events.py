"""
Descriptors delivered by the host test engine.

The host calls the reporter with these records at each lifecycle
event. They mirror what describe/it style engines report: names, a
terminal status, an optional pending reason and the failed
expectations of a spec.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from enum import Enum


class SpecStatus(str, Enum):
    """Terminal status of a spec as reported by the host."""
    PASSED = "passed"
    FAILED = "failed"
    BROKEN = "broken"
    PENDING = "pending"
    DISABLED = "disabled"
    EXCLUDED = "excluded"
    TODO = "todo"

    @property
    def is_skipped(self) -> bool:
        return self in _SKIPPED


_SKIPPED = {SpecStatus.PENDING, SpecStatus.DISABLED, SpecStatus.EXCLUDED, SpecStatus.TODO}


@dataclass
class Expectation:
    """
    One failed expectation of a spec.

    ``matcher_name`` is empty when the failure came from an exception
    rather than a matcher such as ``to_equal``.
    """
    matcher_name: str = ""
    message: str | None = None
    stack: str | None = None

    @classmethod
    def from_exception(cls, error: BaseException, matcher_name: str = "") -> Expectation:
        """Build an expectation record from a raised exception."""
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return cls(matcher_name=matcher_name, message=str(error), stack=stack)


@dataclass
class SuiteEvent:
    """A describe block entering or leaving."""
    description: str
    full_name: str = ""
    failed_expectations: list[Expectation] = field(default_factory=list)


@dataclass
class SpecEvent:
    """A spec entering (status unset) or leaving (status set)."""
    description: str
    full_name: str = ""
    status: SpecStatus | str | None = None
    pending_reason: str | None = None
    failed_expectations: list[Expectation] = field(default_factory=list)
    test_path: str | None = None


@dataclass
class RunInfo:
    total_specs_defined: int = 0


@dataclass
class RunDetails:
    overall_status: str = "passed"
    incomplete_reason: str | None = None
