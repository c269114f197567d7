import asyncio
import logging

import pytest

from chorus.results import (
    ExecutableItem,
    ExecutableResult,
    OutcomeKind,
    Rejection,
    Stage,
    Status,
    StepResult,
    classify_outcome,
)
from chorus.results.executable import Step, failure_details


def _item() -> ExecutableItem:
    return ExecutableItem(ExecutableResult(name="item"))


def _raised(error: BaseException) -> BaseException:
    try:
        raise error
    except BaseException as caught:
        return caught


def test_new_item_is_scheduled_without_status():
    result = ExecutableResult(name="fresh")
    assert result.status is None
    assert result.stage == Stage.SCHEDULED
    assert result.status_details.message is None
    assert result.steps == [] and result.attachments == [] and result.parameters == []


def test_timing_is_stamped_once():
    result = StepResult(name="s")
    result.mark_started()
    first = result.start
    result.mark_started()
    assert result.start is first
    result.mark_stopped()
    stop = result.stop
    result.mark_stopped()
    assert result.stop is stop
    assert result.duration_ms >= 0


def test_sync_body_passes():
    item = _item()
    assert item.wrap(lambda x: x * 2)(21) == 42
    assert item.status == Status.PASSED
    assert item.stage == Stage.FINISHED


def test_sync_body_raising_is_failed_and_reraised():
    item = _item()

    def body():
        raise ValueError("bad input")

    with pytest.raises(ValueError):
        item.wrap(body)()

    assert item.status == Status.FAILED
    assert item.stage == Stage.FINISHED
    assert item.details_message == "bad input"
    assert "body" in item.details_trace


def test_error_without_message_is_broken():
    item = _item()

    def body():
        raise RuntimeError()

    with pytest.raises(RuntimeError):
        item.wrap(body)()

    assert item.status == Status.BROKEN
    assert item.stage == Stage.INTERRUPTED
    assert item.details_message is None


def test_async_body_resolving_passes():
    item = _item()

    async def body():
        await asyncio.sleep(0)
        return "ok"

    pending = item.wrap(body)()
    assert item.stage == Stage.RUNNING
    assert asyncio.run(pending) == "ok"
    assert item.status == Status.PASSED
    assert item.stage == Stage.FINISHED


def test_async_body_raising_is_failed():
    item = _item()

    async def body():
        await asyncio.sleep(0)
        raise AssertionError("expected 1 got 2")

    with pytest.raises(AssertionError):
        asyncio.run(item.wrap(body)())

    assert item.status == Status.FAILED
    assert item.details_message == "expected 1 got 2"


def test_async_rejection_with_non_error_is_broken():
    item = _item()

    async def body():
        raise Rejection("plain value")

    with pytest.raises(Rejection) as excinfo:
        asyncio.run(item.wrap(body)())

    assert excinfo.value.value == "plain value"
    assert item.status == Status.BROKEN
    assert item.stage == Stage.INTERRUPTED


def test_preset_status_survives_normal_completion():
    item = _item()

    def body():
        item.log_step(Status.SKIPPED)

    item.wrap(body)()
    assert item.status == Status.SKIPPED
    assert item.stage == Stage.FINISHED


def test_failure_overrides_preset_status():
    item = _item()
    item.status = Status.SKIPPED

    def body():
        raise KeyError("missing")

    with pytest.raises(KeyError):
        item.wrap(body)()
    assert item.status == Status.FAILED


def test_sync_body_exiting_is_broken_and_reraised():
    item = _item()

    def body():
        raise SystemExit(2)

    with pytest.raises(SystemExit):
        item.wrap(body)()

    assert item.status == Status.BROKEN
    assert item.stage == Stage.INTERRUPTED
    assert item.details_message is None


def test_async_body_interrupted_is_broken():
    item = _item()

    async def body():
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        item.wrap(body)().send(None)

    assert item.status == Status.BROKEN
    assert item.stage == Stage.INTERRUPTED


@pytest.mark.parametrize("error, current, kind, status, stage", [
    (None, None, OutcomeKind.PASSED, Status.PASSED, Stage.FINISHED),
    (None, Status.SKIPPED, OutcomeKind.PASSED, Status.SKIPPED, Stage.FINISHED),
    (_raised(ValueError("boom")), None, OutcomeKind.FAILED, Status.FAILED, Stage.FINISHED),
    (_raised(ValueError("boom")), Status.SKIPPED, OutcomeKind.FAILED, Status.FAILED, Stage.FINISHED),
    (ValueError("never raised"), None, OutcomeKind.BROKEN, Status.BROKEN, Stage.INTERRUPTED),
    (_raised(Rejection(42)), None, OutcomeKind.BROKEN, Status.BROKEN, Stage.INTERRUPTED),
    (_raised(Rejection(42)), Status.PASSED, OutcomeKind.BROKEN, Status.PASSED, Stage.INTERRUPTED),
    (_raised(KeyboardInterrupt()), None, OutcomeKind.BROKEN, Status.BROKEN, Stage.INTERRUPTED),
    (_raised(SystemExit(2)), Status.SKIPPED, OutcomeKind.BROKEN, Status.SKIPPED, Stage.INTERRUPTED),
])
def test_classify_outcome(error, current, kind, status, stage):
    outcome = classify_outcome(error, current)
    assert outcome.kind == kind
    assert outcome.status == status
    assert outcome.stage == stage


def test_failure_details_needs_message_and_traceback():
    assert failure_details(ValueError("no traceback")) is None
    assert failure_details(_raised(ValueError(""))) is None
    assert failure_details(_raised(asyncio.CancelledError("cancelled"))) is None
    message, trace = failure_details(_raised(ValueError("boom")))
    assert message == "boom"
    assert "_raised" in trace


def test_steps_nest_under_their_parent():
    item = _item()
    outer = item.start_step("outer")
    inner = outer.start_step("inner")
    inner.end_step()
    outer.end_step()

    assert [s.name for s in item.result.steps] == ["outer"]
    assert [s.name for s in item.result.steps[0].steps] == ["inner"]
    assert outer.ended and inner.ended


def test_end_step_twice_keeps_first_stop():
    step = Step(StepResult(name="s"))
    step.end_step()
    stop = step.result.stop
    step.end_step()
    assert step.result.stop is stop


def test_outcome_after_end_is_ignored(caplog):
    step = Step(StepResult(name="upload"))
    step.status = Status.BROKEN
    step.stage = Stage.INTERRUPTED
    step.end_step()

    with caplog.at_level(logging.DEBUG):
        step.apply(classify_outcome(_raised(ValueError("too late"))))

    assert step.status == Status.BROKEN
    assert step.stage == Stage.INTERRUPTED
    assert step.details_message is None
    assert "'upload' already ended, ignoring late outcome failed" in caplog.text
