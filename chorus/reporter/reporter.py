"""
Lifecycle reporter.

This module provides the SpecReporter class which consumes the host
engine's flat stream of run/suite/spec events and builds the nested
report: a group per describe block, a "Test wrapper" group per spec to
hold its before/after-each fixtures, and the test itself.
"""

from __future__ import annotations

import logging
import os
from contextvars import ContextVar, Token
from pathlib import PurePath
from typing import TYPE_CHECKING, Any

from ..errors import NoActiveGroupError, NoActiveTestError, OverlappingTestError
from ..results import (
    ContentType,
    ExecutableItem,
    Label,
    LabelName,
    Stage,
    Status,
    Step,
)
from ..runtime import Group, Runtime, TestItem
from .events import RunDetails, RunInfo, SpecEvent, SpecStatus, SuiteEvent
from .failures import failure_text
from .fixtures import FixtureInterceptor

if TYPE_CHECKING:
    from ..config import ReporterConfig
    from .interface import ReporterInterface

logger = logging.getLogger(__name__)

TEST_WRAPPER_NAME = "Test wrapper"
UNFINISHED_STEP_MESSAGE = "Test ended unexpectedly before step could complete."

_FINISHED_STATUSES = {
    SpecStatus.PASSED: Status.PASSED,
    SpecStatus.FAILED: Status.FAILED,
    SpecStatus.BROKEN: Status.BROKEN,
}

_SUITE_LABELS = (LabelName.PARENT_SUITE, LabelName.SUITE, LabelName.SUB_SUITE)


class SpecReporter:
    """
    Builds a report from host engine lifecycle events.

    The host must not deliver two events concurrently; the stacks below
    are only touched from event callbacks and the facade.

    Example:
        reporter = SpecReporter(ReporterConfig(writer=InMemoryWriter()), hooks=engine.hooks)
        engine.add_reporter(reporter)
        chorus = reporter.get_interface()
        ...
        reporter.close()
    """

    def __init__(self, config: ReporterConfig | None = None, hooks: Any = None):
        """
        Initialize the reporter.

        Args:
            config: Reporter settings (defaults to ReporterConfig())
            hooks: The host's fixture registration hookpoint; when given,
                fixture recording wrappers are installed on it
        """
        if config is None:
            from ..config import ReporterConfig
            config = ReporterConfig()

        self.config = config
        self.runtime = Runtime(config.create_writer())

        self._group_stack: list[Group] = []
        self._label_stack: list[list[Label]] = [[]]
        # Open steps paired with the fixture running when they were opened
        # (None for the test body).
        self._step_stack: list[tuple[Step, ExecutableItem | None]] = []
        self._running_test: TestItem | None = None
        self._is_suite = False
        self._file_group_open = False
        self._running_executable: ContextVar[ExecutableItem | None] = ContextVar(
            f"chorus_running_executable_{id(self)}", default=None
        )

        self._interceptor: FixtureInterceptor | None = None
        if hooks is not None:
            self._interceptor = FixtureInterceptor(self, hooks)
            self._interceptor.install()

    # ─────────────────────────────────────────────────────────────────────
    # Context
    # ─────────────────────────────────────────────────────────────────────

    @property
    def is_suite(self) -> bool:
        return self._is_suite

    @property
    def group_stack(self) -> tuple[Group, ...]:
        return tuple(self._group_stack)

    @property
    def step_stack(self) -> tuple[Step, ...]:
        return tuple(step for step, _ in self._step_stack)

    def get_current_group(self) -> Group | None:
        if not self._group_stack:
            return None
        return self._group_stack[-1]

    @property
    def current_group(self) -> Group:
        group = self.get_current_group()
        if group is None:
            raise NoActiveGroupError("No active group")
        return group

    @property
    def running_test(self) -> TestItem | None:
        return self._running_test

    @property
    def current_test(self) -> TestItem:
        if self._running_test is None:
            raise NoActiveTestError("No active test")
        return self._running_test

    @property
    def current_step(self) -> Step | None:
        """Innermost open step opened under the fixture running in this context."""
        owner = self.running_executable
        for step, step_owner in reversed(self._step_stack):
            if step_owner is owner:
                return step
        return None

    @property
    def running_executable(self) -> ExecutableItem | None:
        """Fixture currently running in this context, if any."""
        return self._running_executable.get()

    def enter_executable(self, item: ExecutableItem | None) -> Token:
        return self._running_executable.set(item)

    def exit_executable(self, token: Token) -> None:
        self._running_executable.reset(token)

    @property
    def current_executable(self) -> ExecutableItem:
        """Innermost open step, else the running fixture, else the running test."""
        return self.current_step or self.running_executable or self.current_test

    def get_interface(self) -> ReporterInterface:
        from .interface import ReporterInterface
        return ReporterInterface(self)

    def write_attachment(self, content: bytes | str, content_type: ContentType | str) -> str:
        return self.runtime.write_attachment(content, content_type)

    def add_label(self, name: str, value: str) -> None:
        """Buffer a label for every test started at this depth or deeper."""
        self._label_stack[-1].append(Label(name, value))

    def push_step(self, step: Step) -> None:
        self._step_stack.append((step, self.running_executable))

    def pop_step(self, step: Step | None = None) -> None:
        """
        Remove ``step`` (default: the current step) from the stack.

        Steps opened after it under the same fixture or test are removed
        with it; steps of other fixtures are left alone.
        """
        if step is None:
            step = self.current_step
        index = next((i for i, (open_step, _) in enumerate(self._step_stack) if open_step is step), None)
        if index is None:
            return

        owner = self._step_stack[index][1]
        kept = self._step_stack[:index]
        for entry in self._step_stack[index + 1:]:
            if entry[1] is owner:
                logger.error(f"Chorus reporter issue: step '{step.name}' ended before step '{entry[0].name}' it contains")
            else:
                kept.append(entry)
        self._step_stack = kept

    def close(self) -> None:
        """Restore the host's fixture registration functions."""
        if self._interceptor is not None:
            self._interceptor.uninstall()

    # ─────────────────────────────────────────────────────────────────────
    # Host events
    # ─────────────────────────────────────────────────────────────────────

    def run_started(self, info: RunInfo | None = None) -> None:
        worker = self.config.resolve_worker_id()
        if worker:
            logger.info(f"Worker #{worker} has started")
        else:
            logger.info("Run started")

    def suite_started(self, suite: SuiteEvent) -> None:
        self._is_suite = True
        self._open_group(suite.description)
        self._label_stack.append([])

    def spec_started(self, spec: SpecEvent) -> None:
        if self._running_test is not None:
            raise OverlappingTestError(
                f"Spec '{spec.description}' started before test '{self._running_test.name}' ended"
            )

        segments: list[str] = []
        if not self._is_suite:
            segments = self._path_segments(spec.test_path)
            if segments:
                self._open_group(segments[0])
                self._label_stack.append([])
                self._file_group_open = True

        wrapper = self._open_group(TEST_WRAPPER_NAME)
        test = wrapper.start_test(spec.description)
        test.full_name = spec.full_name or spec.description
        test.history_id = test.full_name
        test.stage = Stage.RUNNING
        self._running_test = test

        for labels in self._label_stack:
            for label in labels:
                test.add_label(label.name, label.value)

        if self._is_suite:
            self._add_suite_labels(test)
        else:
            self._add_path_labels(test, segments)

        worker = self.config.resolve_worker_id()
        if worker:
            test.add_label(LabelName.THREAD, worker)

    def spec_done(self, spec: SpecEvent) -> None:
        if self._running_test is None:
            raise NoActiveTestError(f"Spec '{spec.description}' ended while no test is running")

        test = self._running_test

        if self._step_stack:
            logger.error("Chorus reporter issue: step stack is not empty on spec_done")
            for step, _ in reversed(self._step_stack):
                step.status = Status.BROKEN
                step.stage = Stage.INTERRUPTED
                step.details_message = UNFINISHED_STEP_MESSAGE
                step.end_step()
            self._step_stack.clear()

        self._apply_spec_status(test, spec)

        expectation = self.config.failure_policy(spec.failed_expectations or [])
        if expectation is not None:
            message, trace = failure_text(expectation)
            if message is not None:
                test.details_message = message
            if trace is not None:
                test.details_trace = trace

        test.end_test()
        self._running_test = None

        self._close_group("test wrapper")

        if self._file_group_open:
            self._file_group_open = False
            self._close_group("file")
            self._pop_labels()

    def suite_done(self, suite: SuiteEvent) -> None:
        if not self._is_suite:
            logger.error("Chorus reporter issue: suite_done called without suite_started context")
        if self._running_test is not None:
            logger.error(f"Chorus reporter issue: test '{self._running_test.name}' was running on suite_done")

        if self._close_group("suite"):
            self._pop_labels()

    def run_done(self, details: RunDetails | None = None) -> None:
        if self._group_stack:
            names = ", ".join(str(group.name) for group in self._group_stack)
            logger.warning(f"Chorus reporter issue: groups still open at end of run: {names}")
        worker = self.config.resolve_worker_id()
        if worker:
            logger.info(f"Worker #{worker} has finished")
        else:
            logger.info("Run finished")

    # ─────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────

    def _open_group(self, name: str) -> Group:
        parent = self.get_current_group()
        group = (parent or self.runtime).start_group(name)
        self._group_stack.append(group)
        return group

    def _close_group(self, kind: str) -> bool:
        group = self.get_current_group()
        if group is None:
            logger.error(f"Chorus reporter issue: no open group to close for {kind}")
            return False
        group.end_group()
        self._group_stack.pop()
        return True

    def _pop_labels(self) -> None:
        if len(self._label_stack) > 1:
            self._label_stack.pop()

    def _path_segments(self, test_path: str | None) -> list[str]:
        if not test_path:
            return []
        path = PurePath(test_path)
        if self.config.project_dir:
            path = PurePath(os.path.relpath(test_path, self.config.project_dir))
        parts = path.parts
        if path.anchor:
            parts = parts[1:]
        return list(parts)

    def _add_suite_labels(self, test: TestItem) -> None:
        # The innermost open group is the spec's test wrapper.
        suites = self._group_stack[:-1]
        for label_name, group in zip(_SUITE_LABELS, suites):
            test.add_label(label_name, group.name)

    def _add_path_labels(self, test: TestItem, segments: list[str]) -> None:
        if len(segments) < 2:
            return
        test.add_label(LabelName.SUB_SUITE, segments[-1])
        test.add_label(LabelName.SUITE, segments[-2])
        parent = "/".join(segments[:-2])
        if parent:
            test.add_label(LabelName.PARENT_SUITE, parent)
        test.add_label(LabelName.PACKAGE, segments[0])

    def _apply_spec_status(self, test: TestItem, spec: SpecEvent) -> None:
        try:
            status = SpecStatus(spec.status)
        except ValueError:
            logger.error(f"Chorus reporter issue: unknown status {spec.status!r} for spec '{spec.description}'")
            test.status = Status.BROKEN
            test.stage = Stage.FINISHED
            return

        if status in _FINISHED_STATUSES:
            test.status = _FINISHED_STATUSES[status]
            test.stage = Stage.FINISHED
        elif status.is_skipped:
            test.status = Status.SKIPPED
            test.stage = Stage.PENDING
            test.details_message = spec.pending_reason or self.config.skip_reason
