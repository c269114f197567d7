"""
Instrumented execution of user code.

This module provides the wrapper that runs a unit of user code on
behalf of a test, fixture or step and derives the item's status, stage
and failure details from how the code completed. Synchronous and
awaitable bodies go through the same classification.
"""

from __future__ import annotations

import functools
import inspect
import logging
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from .models import (
    ExecutableResult,
    FixtureResult,
    Stage,
    Status,
    StatusDetails,
    StepResult,
)

logger = logging.getLogger(__name__)


class Rejection(Exception):
    """
    Raised in place of a failure signal that is not an exception.

    Carries the original value. It exposes no message, so the outcome
    is classified as broken.
    """

    def __init__(self, value: Any = None):
        super().__init__()
        self.value = value

    def __str__(self) -> str:
        return ""


# ─────────────────────────────────────────────────────────────────────────────
# Outcome classification
# ─────────────────────────────────────────────────────────────────────────────

class OutcomeKind(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    BROKEN = "broken"


@dataclass(frozen=True)
class Outcome:
    """Classified result of one execution."""
    kind: OutcomeKind
    status: Status
    stage: Stage
    message: str | None = None
    trace: str | None = None


def classify_outcome(
    error: BaseException | None = None,
    current_status: Status | None = None,
) -> Outcome:
    """
    Classify a completed execution.

    Args:
        error: The exception the body raised (or its awaitable raised),
            or None when it completed normally
        current_status: Status already set on the item; passed and
            broken outcomes keep it

    Returns:
        Outcome with the status, stage and details to apply
    """
    if error is None:
        return Outcome(
            kind=OutcomeKind.PASSED,
            status=current_status or Status.PASSED,
            stage=Stage.FINISHED,
        )

    details = failure_details(error)
    if details is not None:
        message, trace = details
        return Outcome(
            kind=OutcomeKind.FAILED,
            status=Status.FAILED,
            stage=Stage.FINISHED,
            message=message,
            trace=trace,
        )

    return Outcome(
        kind=OutcomeKind.BROKEN,
        status=current_status or Status.BROKEN,
        stage=Stage.INTERRUPTED,
    )


def failure_details(error: BaseException) -> tuple[str, str] | None:
    """
    Message and trace for an error, or None if it exposes neither.

    Only errors carrying both a non-empty message and a traceback can be
    reported meaningfully. Interrupts such as KeyboardInterrupt, SystemExit
    and task cancellation never are.
    """
    if isinstance(error, Rejection) or not isinstance(error, Exception):
        return None
    message = str(error)
    if not message or error.__traceback__ is None:
        return None
    trace = "".join(traceback.format_tb(error.__traceback__))
    return message, trace


# ─────────────────────────────────────────────────────────────────────────────
# Executable items
# ─────────────────────────────────────────────────────────────────────────────

class ExecutableItem:
    """
    Mutable view over an executable result.

    Provides the bookkeeping shared by tests, fixtures and steps, and
    ``wrap`` to run user code on the item's behalf.
    """

    def __init__(self, result: ExecutableResult):
        self._result = result

    @property
    def result(self) -> ExecutableResult:
        return self._result

    @property
    def name(self) -> str | None:
        return self._result.name

    @name.setter
    def name(self, name: str) -> None:
        self._result.name = name

    @property
    def status(self) -> Status | None:
        return self._result.status

    @status.setter
    def status(self, status: Status | None) -> None:
        self._result.status = status

    @property
    def stage(self) -> Stage:
        return self._result.stage

    @stage.setter
    def stage(self, stage: Stage) -> None:
        self._result.stage = stage

    @property
    def status_details(self) -> StatusDetails:
        return self._result.status_details

    @property
    def details_message(self) -> str | None:
        return self._result.status_details.message

    @details_message.setter
    def details_message(self, message: str | None) -> None:
        self._result.status_details.message = message

    @property
    def details_trace(self) -> str | None:
        return self._result.status_details.trace

    @details_trace.setter
    def details_trace(self, trace: str | None) -> None:
        self._result.status_details.trace = trace

    @property
    def description(self) -> str | None:
        return self._result.description

    @description.setter
    def description(self, description: str) -> None:
        self._result.description = description

    @property
    def ended(self) -> bool:
        return self._result.stop is not None

    def add_parameter(self, name: str, value: str) -> None:
        self._result.add_parameter(name, value)

    def add_attachment(self, name: str, content_type: str, source: str) -> None:
        self._result.add_attachment(name, content_type, source)

    def start_step(self, name: str) -> Step:
        """Open a child step under this item."""
        result = StepResult(name=name)
        self._result.add_step(result)
        return Step(result)

    def log_step(self, status: Status) -> None:
        """Give the item an explicit terminal status."""
        self.stage = Stage.FINISHED
        self.status = status

    def apply(self, outcome: Outcome) -> None:
        """Record a classified outcome on the item."""
        if self.ended:
            logger.debug(f"'{self.name}' already ended, ignoring late outcome {outcome.kind.value}")
            return
        self.status = outcome.status
        self.stage = outcome.stage
        if outcome.message is not None:
            self.details_message = outcome.message
        if outcome.trace is not None:
            self.details_trace = outcome.trace

    def wrap(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        """
        Instrument ``fn`` so that calling it records its outcome here.

        Calling the returned function marks the item running and runs
        ``fn`` once. Exceptions are recorded and re-raised. If ``fn``
        returns an awaitable, a coroutine is returned instead that
        records the outcome once the awaitable settles.
        """
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            self.stage = Stage.RUNNING
            try:
                result = fn(*args, **kwargs)
            except BaseException as error:
                self.apply(classify_outcome(error, self.status))
                raise

            if inspect.isawaitable(result):
                return self._settle(result)

            self.apply(classify_outcome(current_status=self.status))
            return result

        return wrapper

    async def _settle(self, awaitable: Awaitable[Any]) -> Any:
        try:
            value = await awaitable
        except BaseException as error:
            self.apply(classify_outcome(error, self.status))
            raise
        self.apply(classify_outcome(current_status=self.status))
        return value


class Step(ExecutableItem):
    """A step; timed from creation until ``end_step``."""

    def __init__(self, result: StepResult):
        super().__init__(result)
        result.mark_started()

    def end_step(self) -> None:
        if self.ended:
            logger.debug(f"Step '{self.name}' already ended")
            return
        self._result.mark_stopped()


class Fixture(ExecutableItem):
    """A setup or teardown execution; timed from creation until ``end_fixture``."""

    def __init__(self, result: FixtureResult):
        super().__init__(result)
        result.mark_started()

    def end_fixture(self) -> None:
        if self.ended:
            logger.debug(f"Fixture '{self.name}' already ended")
            return
        self._result.mark_stopped()
