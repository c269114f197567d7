"""
Pytest fixtures and a scripted describe/it engine for reporter tests.

The engine declares suites and specs up front, then replays them and
delivers lifecycle events to its reporters in the order describe/it
engines do: suite entered, before-all fixtures, children, after-all
fixtures, suite exited; and per spec: spec entered, before-each
fixtures (outer to inner), body, after-each fixtures (inner to outer),
spec exited.
"""

from __future__ import annotations

import asyncio
import inspect
import traceback
from types import SimpleNamespace
from typing import Any, Callable

import pytest

from chorus.config import DEFAULT_WORKER_ENV, ReporterConfig
from chorus.reporter import (
    Expectation,
    RunDetails,
    RunInfo,
    SpecEvent,
    SpecReporter,
    SpecStatus,
    SuiteEvent,
)
from chorus.runtime import InMemoryWriter

DEFAULT_TEST_PATH = "tests/test_sample.py"
XIT_REASON = "Temporarily disabled with xit"


class Suite:
    def __init__(self, description: str | None, parent: Suite | None = None):
        self.description = description
        self.parent = parent
        self.children: list[Suite | Spec] = []
        self.fixtures: dict[str, list[Callable[..., Any]]] = {
            "before_all": [],
            "after_all": [],
            "before_each": [],
            "after_each": [],
        }

    def chain(self) -> list[Suite]:
        """This suite and its ancestors, outermost first."""
        suites = []
        suite: Suite | None = self
        while suite is not None:
            suites.append(suite)
            suite = suite.parent
        return list(reversed(suites))


class Spec:
    def __init__(self, description: str, fn: Callable[[], Any] | None, parent: Suite,
                 pending_reason: str | None = None, test_path: str | None = None):
        self.description = description
        self.fn = fn
        self.parent = parent
        self.pending_reason = pending_reason
        self.test_path = test_path


class Done:
    """Completion callback the engine hands to fixture runners."""

    def __init__(self):
        self.called = False
        self.error: Any = None

    def __call__(self) -> None:
        self.called = True

    def fail(self, error: Any = None) -> None:
        self.error = error


class Matchers:
    def __init__(self, engine: Engine, actual: Any):
        self._engine = engine
        self._actual = actual

    def to_be(self, expected: Any) -> None:
        if self._actual is not expected:
            self._fail("toBe", f"Expected {self._actual!r} to be {expected!r}.")

    def to_equal(self, expected: Any) -> None:
        if self._actual != expected:
            self._fail("toEqual", f"Expected {self._actual!r} to equal {expected!r}.")

    def _fail(self, matcher_name: str, message: str) -> None:
        stack = f"Error: {message}\n" + "".join(traceback.format_stack(limit=4))
        self._engine.record_failure(Expectation(matcher_name, message, stack))


class Engine:
    """Minimal describe/it engine that reports through the reporter protocol."""

    def __init__(self, test_path: str = DEFAULT_TEST_PATH):
        self.test_path = test_path
        self.root = Suite(None)
        self._declaring = self.root
        self._failures: list[Expectation] | None = None
        self._reporters: list[Any] = []
        self.hooks = SimpleNamespace(
            before_all=self._registrar("before_all"),
            after_all=self._registrar("after_all"),
            before_each=self._registrar("before_each"),
            after_each=self._registrar("after_each"),
        )

    def _registrar(self, kind: str) -> Callable[..., None]:
        def register(fn: Callable[..., Any], timeout: float | None = None) -> None:
            self._declaring.fixtures[kind].append(fn)
        return register

    # Declaration

    def add_reporter(self, reporter: Any) -> None:
        self._reporters.append(reporter)

    def describe(self, description: str, body: Callable[[], None]) -> None:
        suite = Suite(description, self._declaring)
        self._declaring.children.append(suite)
        previous, self._declaring = self._declaring, suite
        try:
            body()
        finally:
            self._declaring = previous

    def it(self, description: str, fn: Callable[[], Any] | None = None, test_path: str | None = None) -> None:
        self._declaring.children.append(
            Spec(description, fn, self._declaring, test_path=test_path or self.test_path)
        )

    def xit(self, description: str, fn: Callable[[], Any] | None = None, reason: str = XIT_REASON) -> None:
        self._declaring.children.append(
            Spec(description, fn, self._declaring, pending_reason=reason, test_path=self.test_path)
        )

    def expect(self, actual: Any) -> Matchers:
        return Matchers(self, actual)

    def record_failure(self, expectation: Expectation) -> None:
        if self._failures is None:
            raise RuntimeError("expect() called outside of a spec")
        self._failures.append(expectation)

    # Execution

    def _notify(self, event: str, *args: Any) -> None:
        for reporter in self._reporters:
            getattr(reporter, event)(*args)

    async def execute(self) -> None:
        self._notify("run_started", RunInfo(total_specs_defined=self._count(self.root)))
        await self._run_children(self.root)
        self._notify("run_done", RunDetails())

    def _count(self, suite: Suite) -> int:
        return sum(self._count(c) if isinstance(c, Suite) else 1 for c in suite.children)

    async def _run_children(self, suite: Suite) -> None:
        for fn in suite.fixtures["before_all"]:
            await self._call_fixture(fn, [])
        for child in suite.children:
            if isinstance(child, Suite):
                await self._run_suite(child)
            else:
                await self._run_spec(child)
        for fn in suite.fixtures["after_all"]:
            await self._call_fixture(fn, [])

    async def _run_suite(self, suite: Suite) -> None:
        event = SuiteEvent(suite.description, full_name=self._full_name(suite.chain()))
        self._notify("suite_started", event)
        await self._run_children(suite)
        self._notify("suite_done", event)

    async def _run_spec(self, spec: Spec) -> None:
        chain = spec.parent.chain()
        event = SpecEvent(
            spec.description,
            full_name=self._full_name(chain, spec.description),
            test_path=spec.test_path,
        )
        self._notify("spec_started", event)

        if spec.pending_reason is not None:
            event.status = SpecStatus.PENDING
            event.pending_reason = spec.pending_reason
            self._notify("spec_done", event)
            return

        failures: list[Expectation] = []
        self._failures = failures
        try:
            for suite in chain:
                for fn in suite.fixtures["before_each"]:
                    await self._call_fixture(fn, failures)
            try:
                result = spec.fn() if spec.fn is not None else None
                if inspect.isawaitable(result):
                    await result
            except Exception as error:
                failures.append(Expectation.from_exception(error))
            for suite in reversed(chain):
                for fn in suite.fixtures["after_each"]:
                    await self._call_fixture(fn, failures)
        finally:
            self._failures = None

        event.status = SpecStatus.FAILED if failures else SpecStatus.PASSED
        event.failed_expectations = failures
        self._notify("spec_done", event)

    async def _call_fixture(self, fn: Callable[..., Any], failures: list[Expectation]) -> None:
        done = Done()
        try:
            result = fn(done) if _arity(fn) else fn()
            if inspect.isawaitable(result):
                await result
        except Exception as error:
            done.fail(error)
        if done.error is not None:
            if isinstance(done.error, BaseException):
                failures.append(Expectation.from_exception(done.error))
            else:
                failures.append(Expectation(message=str(done.error)))

    @staticmethod
    def _full_name(chain: list[Suite], description: str | None = None) -> str:
        names = [suite.description for suite in chain if suite.description]
        if description:
            names.append(description)
        return " ".join(names)


def _arity(fn: Callable[..., Any]) -> int:
    return len(inspect.signature(fn).parameters)


@pytest.fixture(autouse=True)
def no_worker_env(monkeypatch):
    """Keep a worker id in the environment from leaking into tests."""
    monkeypatch.delenv(DEFAULT_WORKER_ENV, raising=False)


@pytest.fixture
def writer():
    return InMemoryWriter()


@pytest.fixture
def reporter(writer):
    """Reporter wired to an in-memory writer, without fixture interception."""
    reporter = SpecReporter(ReporterConfig(writer=writer))
    yield reporter
    reporter.close()


@pytest.fixture
def run_scenario():
    """
    Declare and run a scenario on a fresh engine and reporter.

    Usage:
        def build(engine, chorus):
            engine.describe("A", lambda: engine.it("t1", lambda: None))

        writer = run_scenario(build)
    """
    def run(build: Callable[[Engine, Any], None], test_path: str = DEFAULT_TEST_PATH, **config: Any) -> InMemoryWriter:
        writer = InMemoryWriter()
        engine = Engine(test_path=test_path)
        reporter = SpecReporter(ReporterConfig(writer=writer, **config), hooks=engine.hooks)
        engine.add_reporter(reporter)
        try:
            build(engine, reporter.get_interface())
            asyncio.run(engine.execute())
        finally:
            reporter.close()
        return writer

    return run
