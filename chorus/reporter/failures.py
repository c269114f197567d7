"""
Choosing and cleaning the failure reported for a spec.

A spec can carry several failed expectations. A failure policy picks
the one whose message and stack end up in the test's status details.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from rich.text import Text

from .events import Expectation

FailurePolicy = Callable[[Sequence[Expectation]], Optional[Expectation]]


def first_failure(expectations: Sequence[Expectation]) -> Expectation | None:
    """Pick the first recorded failure."""
    if expectations:
        return expectations[0]
    return None


def prefer_thrown_error(expectations: Sequence[Expectation]) -> Expectation | None:
    """
    Pick the first failure raised as an exception, else the first failure.

    Exceptions are recorded without a matcher name, and usually explain
    the failure better than a matcher mismatch that followed them.
    """
    for expectation in expectations:
        if expectation.matcher_name == "":
            return expectation
    return first_failure(expectations)


FAILURE_POLICIES: dict[str, FailurePolicy] = {
    "prefer_thrown_error": prefer_thrown_error,
    "first_failure": first_failure,
}


def strip_ansi(text: str) -> str:
    """Remove terminal color and style codes, keeping all other text."""
    # Text.from_ansi treats a carriage return as "rewind the line".
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return Text.from_ansi(text).plain


def trim_message(stack: str, message: str) -> str:
    """Drop the first copy of ``message`` from ``stack``."""
    if not message:
        return stack
    return stack.replace(message, "", 1)


def failure_text(expectation: Expectation) -> tuple[str | None, str | None]:
    """
    Cleaned message and trace for an expectation.

    Returns:
        Tuple of (message, trace); either is None when the expectation
        does not carry it as text
    """
    if not isinstance(expectation.message, str):
        return None, None

    message = strip_ansi(expectation.message)
    trace = None
    if isinstance(expectation.stack, str) and expectation.stack:
        trace = trim_message(strip_ansi(expectation.stack), message)
    return message, trace
