"""
Validation of reporter configuration files.

This module checks raw parsed YAML against the configuration schema
and reports errors with helpful messages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..errors import ConfigurationError
from ..reporter.failures import FAILURE_POLICIES


# ─────────────────────────────────────────────────────────────────────────────
# Validation Result Types
# ─────────────────────────────────────────────────────────────────────────────

_NO_VALUE = object()


@dataclass(frozen=True)
class ConfigIssue:
    """One problem found in a configuration, keyed by the offending field."""
    key: str
    message: str
    value: Any = _NO_VALUE
    hint: str | None = None

    def __str__(self) -> str:
        text = f"{self.key}: {self.message}"
        if self.value is not _NO_VALUE:
            text += f" (got {self.value!r})"
        if self.hint:
            text += f"; {self.hint}"
        return text


@dataclass
class ValidationResult:
    """Issues collected while checking a configuration."""
    issues: list[ConfigIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def add_issue(self, key: str, message: str, value: Any = _NO_VALUE, hint: str | None = None) -> None:
        self.issues.append(ConfigIssue(key, message, value, hint))

    def raise_for_issues(self) -> None:
        """Raise ConfigurationError naming every issue, if there are any."""
        if self.issues:
            raise ConfigurationError(str(self))

    def __str__(self) -> str:
        if self.is_valid:
            return "Configuration is valid"
        lines = [f"{len(self.issues)} configuration issue(s):"]
        lines.extend(f"  - {issue}" for issue in self.issues)
        return "\n".join(lines)


# ─────────────────────────────────────────────────────────────────────────────
# Config Validator
# ─────────────────────────────────────────────────────────────────────────────

class ConfigValidator:
    """Validates raw parsed YAML against the configuration schema."""

    REQUIRED_KEYS = {"version"}
    STRING_KEYS = {"results_dir", "project_dir", "worker_env", "skip_reason"}
    OPTIONAL_KEYS = STRING_KEYS | {"worker_id", "failure_policy"}

    def __init__(self, data: dict[str, Any]):
        self.data = data
        self.result = ValidationResult()

    def validate(self) -> ValidationResult:
        """Run all validation checks and return result."""
        self._validate_keys()
        if not self.result.is_valid:
            return self.result

        self._validate_version()
        self._validate_strings()
        self._validate_worker_id()
        self._validate_failure_policy()

        return self.result

    def _validate_keys(self) -> None:
        keys = set(self.data.keys())
        missing = self.REQUIRED_KEYS - keys
        unknown = keys - self.REQUIRED_KEYS - self.OPTIONAL_KEYS

        for key in sorted(missing):
            self.result.add_issue(
                key,
                f"Required field '{key}' is missing",
                hint=f"Add '{key}:' to your configuration file"
            )

        for key in sorted(unknown):
            self.result.add_issue(
                key,
                f"Unknown field '{key}'",
                hint=f"Valid fields are: {', '.join(sorted(self.REQUIRED_KEYS | self.OPTIONAL_KEYS))}"
            )

    def _validate_version(self) -> None:
        version = self.data.get("version")
        if not isinstance(version, int) or isinstance(version, bool):
            self.result.add_issue(
                "version",
                "Must be an integer",
                value=version,
                hint="Use 'version: 1'"
            )
        elif version != 1:
            self.result.add_issue(
                "version",
                "Unsupported version",
                value=version,
                hint="Only 'version: 1' is supported"
            )

    def _validate_strings(self) -> None:
        for key in sorted(self.STRING_KEYS):
            if key not in self.data or self.data[key] is None:
                continue
            value = self.data[key]
            if not isinstance(value, str):
                self.result.add_issue(key, "Must be a string", value=value)
            elif not value.strip():
                self.result.add_issue(key, "Cannot be empty")

    def _validate_worker_id(self) -> None:
        worker_id = self.data.get("worker_id")
        if worker_id is None:
            return
        if isinstance(worker_id, bool) or not isinstance(worker_id, (str, int)):
            self.result.add_issue(
                "worker_id",
                "Must be a string or an integer",
                value=worker_id
            )

    def _validate_failure_policy(self) -> None:
        policy = self.data.get("failure_policy")
        if policy is None:
            return
        if policy not in FAILURE_POLICIES:
            self.result.add_issue(
                "failure_policy",
                "Unknown failure policy",
                value=policy,
                hint=f"Valid policies: {', '.join(sorted(FAILURE_POLICIES))}"
            )
