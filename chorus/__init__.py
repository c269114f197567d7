"""
Chorus - reporting adapter for describe/it style test engines

This package turns a test engine's lifecycle events into a nested
report of groups, tests, fixtures and steps.

Subpackages:
    - results: Report model and instrumented execution
    - runtime: Report root, group/test handles and result writers
    - reporter: Lifecycle reporter, fixture interception and test facade
    - config: Reporter configuration and YAML loading

Usage:
    from chorus import ReporterConfig, SpecReporter, load_config

    config, result = load_config("chorus.yaml")
    reporter = SpecReporter(config, hooks=engine.hooks)
    engine.add_reporter(reporter)

    chorus = reporter.get_interface()
    chorus.run_step("open cart", lambda step: cart.open())
"""

__version__ = "0.1.0"

# Re-export errors for convenience
from .errors import (
    ChorusError,
    ConfigurationError,
    GroupClosedError,
    ItemFinalizedError,
    NoActiveGroupError,
    NoActiveTestError,
    OverlappingTestError,
    ReporterStateError,
)

# Re-export results for convenience
from .results import (
    ContentType,
    LabelName,
    Rejection,
    Stage,
    Status,
    classify_outcome,
)

# Re-export runtime for convenience
from .runtime import (
    BaseWriter,
    FileSystemWriter,
    InMemoryWriter,
    Runtime,
)

# Re-export reporter for convenience
from .reporter import (
    Expectation,
    FixtureInterceptor,
    ReporterInterface,
    SpecEvent,
    SpecReporter,
    SpecStatus,
    SuiteEvent,
)

# Re-export config for convenience
from .config import (
    ReporterConfig,
    ValidationResult,
    load_config,
)

__all__ = [
    # Package info
    "__version__",
    # Errors
    "ChorusError",
    "ConfigurationError",
    "GroupClosedError",
    "ItemFinalizedError",
    "NoActiveGroupError",
    "NoActiveTestError",
    "OverlappingTestError",
    "ReporterStateError",
    # Results
    "ContentType",
    "LabelName",
    "Rejection",
    "Stage",
    "Status",
    "classify_outcome",
    # Runtime
    "BaseWriter",
    "FileSystemWriter",
    "InMemoryWriter",
    "Runtime",
    # Reporter
    "Expectation",
    "FixtureInterceptor",
    "ReporterInterface",
    "SpecEvent",
    "SpecReporter",
    "SpecStatus",
    "SuiteEvent",
    # Config
    "ReporterConfig",
    "ValidationResult",
    "load_config",
]
