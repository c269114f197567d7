"""
Typed reporter configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ..reporter.failures import FailurePolicy, prefer_thrown_error
from ..runtime import BaseWriter, FileSystemWriter

DEFAULT_RESULTS_DIR = "chorus-results"
DEFAULT_WORKER_ENV = "CHORUS_WORKER_ID"
DEFAULT_SKIP_REASON = "Suite disabled"


@dataclass
class ReporterConfig:
    """
    Settings for a SpecReporter.

    Attributes:
        results_dir: Directory the default writer persists results into
        project_dir: Spec paths are made relative to this before they are
            split into report groups and labels
        writer: Writer to use instead of a FileSystemWriter on results_dir
        worker_id: Worker/thread id of a parallel run; read from the
            worker_env environment variable when not set
        worker_env: Environment variable holding the worker id
        skip_reason: Details message for skipped specs without a reason
        failure_policy: Picks the expectation reported for a failed spec
    """
    results_dir: str | Path = DEFAULT_RESULTS_DIR
    project_dir: str | Path | None = None
    writer: BaseWriter | None = None
    worker_id: str | None = None
    worker_env: str = DEFAULT_WORKER_ENV
    skip_reason: str = DEFAULT_SKIP_REASON
    failure_policy: FailurePolicy = prefer_thrown_error

    def create_writer(self) -> BaseWriter:
        """Writer for this configuration."""
        if self.writer is not None:
            return self.writer
        return FileSystemWriter(self.results_dir)

    def resolve_worker_id(self) -> str | None:
        """Configured worker id, falling back to the environment."""
        if self.worker_id:
            return str(self.worker_id)
        return os.environ.get(self.worker_env) or None
