"""
Report model and instrumented execution.

This package provides the records that make up a report and the
wrapper that runs user code on behalf of a test, fixture or step.

Usage:
    from chorus.results import StepResult, Step, Status

    step = Step(StepResult(name="login"))
    step.wrap(do_login)()
    step.end_step()
    assert step.status == Status.PASSED
"""

# Models
from .models import (
    Attachment,
    ContentType,
    ExecutableResult,
    FixtureResult,
    GroupResult,
    Label,
    LabelName,
    Link,
    LinkType,
    Parameter,
    Stage,
    Status,
    StatusDetails,
    StepResult,
    TestResult,
)

# Execution
from .executable import (
    ExecutableItem,
    Fixture,
    Outcome,
    OutcomeKind,
    Rejection,
    Step,
    classify_outcome,
    failure_details,
)

__all__ = [
    # Models
    "Attachment",
    "ContentType",
    "ExecutableResult",
    "FixtureResult",
    "GroupResult",
    "Label",
    "LabelName",
    "Link",
    "LinkType",
    "Parameter",
    "Stage",
    "Status",
    "StatusDetails",
    "StepResult",
    "TestResult",
    # Execution
    "ExecutableItem",
    "Fixture",
    "Outcome",
    "OutcomeKind",
    "Rejection",
    "Step",
    "classify_outcome",
    "failure_details",
]
