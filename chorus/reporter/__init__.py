"""
Reporting adapter for describe/it style test engines.

This package turns the host engine's lifecycle callbacks into a nested
report, records fixtures registered through the host's hookpoint, and
gives test code a facade for steps, attachments and labels.

Usage:
    from chorus.config import ReporterConfig
    from chorus.reporter import SpecReporter

    reporter = SpecReporter(ReporterConfig(results_dir="chorus-results"), hooks=engine.hooks)
    engine.add_reporter(reporter)
    chorus = reporter.get_interface()

    def body():
        chorus.run_step("log in", lambda step: session.login())

    engine.it("logs in", body)
    engine.execute()
    reporter.close()
"""

# Events
from .events import (
    Expectation,
    RunDetails,
    RunInfo,
    SpecEvent,
    SpecStatus,
    SuiteEvent,
)

# Failure selection
from .failures import (
    FAILURE_POLICIES,
    FailurePolicy,
    failure_text,
    first_failure,
    prefer_thrown_error,
    strip_ansi,
)

# Fixtures
from .fixtures import FIXTURE_KINDS, FixtureInterceptor, execute_fixture

# Facade
from .interface import AttachmentSpec, ReporterInterface, StepContext

# Reporter
from .reporter import TEST_WRAPPER_NAME, UNFINISHED_STEP_MESSAGE, SpecReporter

__all__ = [
    # Events
    "Expectation",
    "RunDetails",
    "RunInfo",
    "SpecEvent",
    "SpecStatus",
    "SuiteEvent",
    # Failure selection
    "FAILURE_POLICIES",
    "FailurePolicy",
    "failure_text",
    "first_failure",
    "prefer_thrown_error",
    "strip_ansi",
    # Fixtures
    "FIXTURE_KINDS",
    "FixtureInterceptor",
    "execute_fixture",
    # Facade
    "AttachmentSpec",
    "ReporterInterface",
    "StepContext",
    # Reporter
    "TEST_WRAPPER_NAME",
    "UNFINISHED_STEP_MESSAGE",
    "SpecReporter",
]
