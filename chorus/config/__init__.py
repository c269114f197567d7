"""
Reporter configuration.

Usage:
    from chorus.config import load_config

    config, result = load_config("chorus.yaml")
    if not result.is_valid:
        print(result)
"""

# Public API
from .loader import build_config, load_config, load_config_yaml

# Models
from .models import (
    DEFAULT_RESULTS_DIR,
    DEFAULT_SKIP_REASON,
    DEFAULT_WORKER_ENV,
    ReporterConfig,
)

# Validation
from .validation import ConfigValidator, ConfigIssue, ValidationResult

__all__ = [
    # Public API
    "build_config",
    "load_config",
    "load_config_yaml",
    # Models
    "DEFAULT_RESULTS_DIR",
    "DEFAULT_SKIP_REASON",
    "DEFAULT_WORKER_ENV",
    "ReporterConfig",
    # Validation
    "ConfigValidator",
    "ConfigIssue",
    "ValidationResult",
]
