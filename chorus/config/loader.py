"""
Configuration loader.

This module provides the public API for loading and validating reporter
configuration from YAML files or strings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ..reporter.failures import FAILURE_POLICIES
from .models import ReporterConfig
from .validation import ConfigValidator, ValidationResult


def load_config(path: str | Path) -> tuple[ReporterConfig | None, ValidationResult]:
    """
    Load and validate a reporter configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file

    Returns:
        Tuple of (ReporterConfig or None, ValidationResult)
        If validation fails, ReporterConfig will be None.

    Example:
        config, result = load_config("chorus.yaml")
        if not result.is_valid:
            print(result)
            sys.exit(1)
        reporter = SpecReporter(config)
    """
    path = Path(path)

    if not path.exists():
        result = ValidationResult()
        result.add_issue(
            str(path),
            "File not found",
            hint="Check the file path is correct"
        )
        return None, result

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        result = ValidationResult()
        result.add_issue(
            str(path),
            f"Invalid YAML syntax: {e}",
            hint="Check YAML formatting (indentation, colons, etc.)"
        )
        return None, result

    return _validate_and_build(data, str(path))


def load_config_yaml(yaml_string: str) -> tuple[ReporterConfig | None, ValidationResult]:
    """
    Load and validate a reporter configuration from a YAML string.

    Args:
        yaml_string: YAML content as a string

    Returns:
        Tuple of (ReporterConfig or None, ValidationResult)
    """
    try:
        data = yaml.safe_load(yaml_string)
    except yaml.YAMLError as e:
        result = ValidationResult()
        result.add_issue("yaml", f"Invalid YAML syntax: {e}")
        return None, result

    return _validate_and_build(data, "yaml")


def _validate_and_build(data: Any, source: str) -> tuple[ReporterConfig | None, ValidationResult]:
    if not isinstance(data, dict):
        result = ValidationResult()
        result.add_issue(
            source,
            "Content must be a YAML object (not a list or scalar)",
            value=type(data).__name__
        )
        return None, result

    result = ConfigValidator(data).validate()
    if not result.is_valid:
        return None, result

    return build_config(data), result


def build_config(data: dict[str, Any]) -> ReporterConfig:
    """Build a ReporterConfig from validated data."""
    config = ReporterConfig()

    if data.get("results_dir"):
        config.results_dir = data["results_dir"]
    if data.get("project_dir"):
        config.project_dir = data["project_dir"]
    if data.get("worker_id") is not None:
        config.worker_id = str(data["worker_id"])
    if data.get("worker_env"):
        config.worker_env = data["worker_env"]
    if data.get("skip_reason"):
        config.skip_reason = data["skip_reason"]
    if data.get("failure_policy"):
        config.failure_policy = FAILURE_POLICIES[data["failure_policy"]]

    return config
