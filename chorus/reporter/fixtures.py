"""
Fixture interception.

This module replaces the host engine's fixture registration functions
(``before_all``, ``after_all``, ``before_each``, ``after_each``) with
wrappers that run every registered body as a fixture of the group open
at the time the host invokes it.

Host contract:
    The host exposes the four registration functions as attributes of a
    hooks object, each called as ``register(action, timeout=None)``. It
    later invokes the registered function as ``runner(done)`` and awaits
    the result when it is awaitable. ``done()`` signals completion and
    ``done.fail(error)`` signals failure.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from ..results import Fixture, Rejection

if TYPE_CHECKING:
    from .reporter import SpecReporter

logger = logging.getLogger(__name__)

BEFORE_ALL = "before_all"
AFTER_ALL = "after_all"
BEFORE_EACH = "before_each"
AFTER_EACH = "after_each"

FIXTURE_KINDS = (BEFORE_ALL, AFTER_ALL, BEFORE_EACH, AFTER_EACH)
SETUP_KINDS = {BEFORE_ALL, BEFORE_EACH}


def execute_fixture(reporter: SpecReporter, fixture: Fixture, body: Callable[..., Any], *args: Any) -> Any:
    """
    Run ``body`` as ``fixture``.

    The fixture is the reporter's running executable while the body
    runs, so steps and attachments made by the body land on it. Returns
    the body's result, or a coroutine when the body returned an awaitable.
    """
    token = reporter.enter_executable(fixture)
    try:
        result = fixture.wrap(body)(*args)
    except BaseException:
        fixture.end_fixture()
        raise
    finally:
        reporter.exit_executable(token)

    if inspect.isawaitable(result):
        return _settle_fixture(reporter, fixture, result)

    fixture.end_fixture()
    return result


async def _settle_fixture(reporter: SpecReporter, fixture: Fixture, awaitable: Awaitable[Any]) -> Any:
    token = reporter.enter_executable(fixture)
    try:
        return await awaitable
    finally:
        reporter.exit_executable(token)
        fixture.end_fixture()


class _DoneShim:
    """Completion callback handed to callback-style bodies."""

    def __init__(self, future: asyncio.Future):
        self._future = future

    def __call__(self, *_: Any) -> None:
        if not self._future.done():
            self._future.set_result(None)

    def fail(self, error: Any = None) -> None:
        if self._future.done():
            return
        if not isinstance(error, BaseException):
            error = Rejection(error)
        self._future.set_exception(error)


async def _run_with_done(action: Callable[..., Any]) -> None:
    """Run a callback-style body and wait until it signals completion."""
    future = asyncio.get_running_loop().create_future()
    result = action(_DoneShim(future))
    if inspect.isawaitable(result):
        await result
    await future


def takes_done(action: Callable[..., Any]) -> bool:
    """
    True if ``action`` expects a completion callback argument.

    Only required positional parameters count; defaulted parameters and
    ``*args`` do not.
    """
    try:
        parameters = inspect.signature(action).parameters.values()
    except (TypeError, ValueError):
        return False
    return any(
        p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is p.empty
        for p in parameters
    )


def fixture_name(action: Callable[..., Any], kind: str) -> str:
    name = getattr(action, "__name__", None)
    if not name or name == "<lambda>":
        return kind
    return name


class FixtureInterceptor:
    """
    Installs fixture-recording wrappers on a host's hooks object.

    Example:
        interceptor = FixtureInterceptor(reporter, engine.hooks)
        interceptor.install()
        ...
        interceptor.uninstall()
    """

    def __init__(self, reporter: SpecReporter, hooks: Any):
        self.reporter = reporter
        self.hooks = hooks
        self._originals: dict[str, Callable[..., Any]] = {}

    @property
    def installed(self) -> bool:
        return bool(self._originals)

    def install(self) -> None:
        """Store the host's registration functions and install wrappers."""
        if self.installed:
            return
        for kind in FIXTURE_KINDS:
            original = getattr(self.hooks, kind, None)
            if original is None:
                logger.warning(f"Host does not expose '{kind}', fixtures registered with it are not recorded")
                continue
            self._originals[kind] = original
            setattr(self.hooks, kind, self._make_register(original, kind))

    def uninstall(self) -> None:
        """Restore the host's registration functions."""
        for kind, original in self._originals.items():
            setattr(self.hooks, kind, original)
        self._originals.clear()

    def __enter__(self) -> FixtureInterceptor:
        self.install()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.uninstall()

    def _make_register(self, original: Callable[..., Any], kind: str) -> Callable[..., Any]:
        @functools.wraps(original)
        def register(action: Callable[..., Any], timeout: float | None = None) -> Any:
            def runner(done: Any) -> Any:
                return self._run(action, kind, done)

            return original(runner, timeout)

        return register

    def _create_fixture(self, kind: str, name: str) -> Fixture | None:
        group = self.reporter.get_current_group()
        if group is None:
            logger.error(f"Chorus reporter issue: no open group for {kind} fixture '{name}', not recording it")
            return None
        if kind in SETUP_KINDS:
            return group.add_before(name)
        return group.add_after(name)

    def _run(self, action: Callable[..., Any], kind: str, done: Any) -> Any:
        body = action
        if takes_done(action):
            body = functools.partial(_run_with_done, action)

        fixture = self._create_fixture(kind, fixture_name(action, kind))
        try:
            if fixture is None:
                result = body()
            else:
                result = execute_fixture(self.reporter, fixture, body)
        except Exception as error:
            done.fail(error)
            return None

        if inspect.isawaitable(result):
            return self._finish(result, done)

        done()
        return None

    async def _finish(self, awaitable: Awaitable[Any], done: Any) -> None:
        try:
            await awaitable
        except asyncio.CancelledError as error:
            done.fail(error)
            raise
        except Exception as error:
            done.fail(error)
            return
        done()
