"""
Facade for test code.

Test bodies use ReporterInterface to add steps, attachments, labels
and setup fixtures to whatever is running: the innermost open step,
else the running fixture, else the running test.
"""

from __future__ import annotations

import inspect
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Iterator

from ..results import (
    ContentType,
    ExecutableItem,
    LabelName,
    LinkType,
    Stage,
    Status,
    Step,
    classify_outcome,
)
from .fixtures import execute_fixture, fixture_name

if TYPE_CHECKING:
    from .reporter import SpecReporter


@dataclass
class AttachmentSpec:
    """Attachment passed to ``log_step``."""
    name: str
    content: bytes | str
    type: ContentType | str = ContentType.TEXT


class StepContext:
    """Handle passed to ``run_step`` bodies."""

    def __init__(self, reporter: SpecReporter, step: Step):
        self._reporter = reporter
        self._step = step

    @property
    def step(self) -> Step:
        return self._step

    def attach(self, name: str, content: bytes | str, content_type: ContentType | str = ContentType.TEXT) -> None:
        source = self._reporter.write_attachment(content, content_type)
        self._step.add_attachment(name, content_type, source)

    def parameter(self, name: str, value: Any) -> None:
        self._step.add_parameter(name, str(value))

    def log_step(self, status: Status) -> None:
        """Give this step an explicit status that completion keeps."""
        self._step.log_step(status)

    def start_step(self, name: str) -> StepContext:
        step = self._step.start_step(name)
        self._reporter.push_step(step)
        return StepContext(self._reporter, step)

    def run(self, body: Callable[[StepContext], Any]) -> Any:
        """Run ``body`` as this step and end the step once it settles."""
        try:
            result = self._step.wrap(body)(self)
        except BaseException:
            self.end_step()
            raise

        if inspect.isawaitable(result):
            return self._end_after(result)

        self.end_step()
        return result

    async def _end_after(self, awaitable: Awaitable[Any]) -> Any:
        try:
            return await awaitable
        finally:
            self.end_step()

    def run_step(self, name: str, body: Callable[[StepContext], Any]) -> Any:
        """Run ``body`` as a child step of this step."""
        return self.start_step(name).run(body)

    def end_step(self) -> None:
        self._reporter.pop_step(self._step)
        self._step.end_step()


class ReporterInterface:
    """
    Report API for test code.

    Example:
        chorus = reporter.get_interface()

        def test_body():
            chorus.feature("checkout")
            chorus.run_step("open cart", lambda step: cart.open())
            chorus.attach("receipt", receipt_text, ContentType.TEXT)
    """

    def __init__(self, reporter: SpecReporter):
        self._reporter = reporter

    @property
    def current_executable(self) -> ExecutableItem:
        return self._reporter.current_executable

    def _start_step(self, name: str) -> StepContext:
        step = self.current_executable.start_step(name)
        self._reporter.push_step(step)
        return StepContext(self._reporter, step)

    # ─────────────────────────────────────────────────────────────────────
    # Steps
    # ─────────────────────────────────────────────────────────────────────

    def run_step(self, name: str, body: Callable[[StepContext], Any]) -> Any:
        """
        Run ``body`` as a step named ``name``.

        The body receives a StepContext. Its outcome becomes the step's
        status; exceptions are re-raised after the step ends. If the body
        returns an awaitable, a coroutine is returned that ends the step
        once the awaitable settles.
        """
        return self._start_step(name).run(body)

    @contextmanager
    def step(self, name: str) -> Iterator[StepContext]:
        """
        Context manager form of ``run_step`` for synchronous code.

        Example:
            with chorus.step("fill form") as step:
                step.parameter("user", "alice")
                form.fill()
        """
        context = self._start_step(name)
        context.step.stage = Stage.RUNNING
        try:
            yield context
        except BaseException as error:
            context.step.apply(classify_outcome(error, context.step.status))
            raise
        else:
            context.step.apply(classify_outcome(current_status=context.step.status))
        finally:
            context.end_step()

    def log_step(
        self,
        name: str,
        status: Status,
        attachments: Iterable[AttachmentSpec] | None = None,
    ) -> None:
        """Record an already finished step with the given status."""
        context = self._start_step(name)
        for attachment in attachments or ():
            self.attach(attachment.name, attachment.content, attachment.type)
        context.log_step(status)
        context.end_step()

    # ─────────────────────────────────────────────────────────────────────
    # Fixtures
    # ─────────────────────────────────────────────────────────────────────

    def run_setup(self, body: Callable[[], Any]) -> Any:
        """
        Run ``body`` as a setup fixture of the current group.

        Returns the body's result, or a coroutine if it returned an
        awaitable. Exceptions are re-raised after they are recorded.
        """
        fixture = self._reporter.current_group.add_before(fixture_name(body, "setup"))
        return execute_fixture(self._reporter, fixture, body)

    # ─────────────────────────────────────────────────────────────────────
    # Attachments and parameters
    # ─────────────────────────────────────────────────────────────────────

    def attach(self, name: str, content: bytes | str, content_type: ContentType | str = ContentType.TEXT) -> None:
        """Persist ``content`` and attach it to the current executable."""
        source = self._reporter.write_attachment(content, content_type)
        self.current_executable.add_attachment(name, content_type, source)

    def parameter(self, name: str, value: Any) -> None:
        self.current_executable.add_parameter(name, str(value))

    # ─────────────────────────────────────────────────────────────────────
    # Test metadata
    # ─────────────────────────────────────────────────────────────────────

    def add_label(self, name: str, value: str) -> None:
        """
        Label the running test, or every test started later at this depth.
        """
        test = self._reporter.running_test
        if test is not None:
            test.add_label(name, value)
        else:
            self._reporter.add_label(name, value)

    def description(self, text: str) -> None:
        self._reporter.current_test.description = text

    def link(self, url: str, name: str | None = None, link_type: LinkType | str | None = None) -> None:
        self._reporter.current_test.add_link(url, name, link_type)

    def issue(self, name: str, url: str) -> None:
        self.link(url, name, LinkType.ISSUE)

    def tms(self, name: str, url: str) -> None:
        self.link(url, name, LinkType.TMS)

    def feature(self, value: str) -> None:
        self.add_label(LabelName.FEATURE, value)

    def story(self, value: str) -> None:
        self.add_label(LabelName.STORY, value)

    def epic(self, value: str) -> None:
        self.add_label(LabelName.EPIC, value)

    def severity(self, value: str) -> None:
        self.add_label(LabelName.SEVERITY, value)

    def owner(self, value: str) -> None:
        self.add_label(LabelName.OWNER, value)

    def tag(self, value: str) -> None:
        self.add_label(LabelName.TAG, value)
