from pathlib import Path

import pytest

from chorus.config import (
    DEFAULT_RESULTS_DIR,
    DEFAULT_SKIP_REASON,
    ReporterConfig,
    load_config,
    load_config_yaml,
)
from chorus.errors import ConfigurationError
from chorus.reporter import first_failure, prefer_thrown_error
from chorus.runtime import FileSystemWriter, InMemoryWriter


def _write_config(base: Path, content: str) -> Path:
    path = base / "chorus.yaml"
    path.write_text(content)
    return path


def test_minimal_config_uses_defaults(tmp_path):
    config, result = load_config(_write_config(tmp_path, "version: 1\n"))

    assert result.is_valid
    assert config.results_dir == DEFAULT_RESULTS_DIR
    assert config.skip_reason == DEFAULT_SKIP_REASON
    assert config.failure_policy is prefer_thrown_error
    assert config.worker_id is None


def test_full_config(tmp_path):
    content = "\n".join([
        "version: 1",
        "results_dir: out/results",
        "project_dir: /work/proj",
        "worker_id: 4",
        "worker_env: SHARD",
        "skip_reason: Skipped by engine",
        "failure_policy: first_failure",
        "",
    ])
    config, result = load_config(_write_config(tmp_path, content))

    assert result.is_valid, str(result)
    assert config.results_dir == "out/results"
    assert config.project_dir == "/work/proj"
    assert config.worker_id == "4"
    assert config.worker_env == "SHARD"
    assert config.skip_reason == "Skipped by engine"
    assert config.failure_policy is first_failure


def test_missing_file(tmp_path):
    config, result = load_config(tmp_path / "absent.yaml")

    assert config is None
    assert "File not found" in str(result)


def test_invalid_yaml(tmp_path):
    config, result = load_config(_write_config(tmp_path, "version: [1\n"))

    assert config is None
    assert "Invalid YAML syntax" in str(result)


@pytest.mark.parametrize("content, path, message", [
    ("- version\n", "yaml", "must be a YAML object"),
    ("results_dir: out\n", "version", "is missing"),
    ("version: 1\ncolour: red\n", "colour", "Unknown field"),
    ("version: '1'\n", "version", "Must be an integer"),
    ("version: 2\n", "version", "Unsupported version"),
    ("version: 1\nresults_dir: '  '\n", "results_dir", "Cannot be empty"),
    ("version: 1\nskip_reason: 5\n", "skip_reason", "Must be a string"),
    ("version: 1\nworker_id: [1]\n", "worker_id", "string or an integer"),
    ("version: 1\nfailure_policy: loudest\n", "failure_policy", "Unknown failure policy"),
])
def test_validation_errors(content, path, message):
    config, result = load_config_yaml(content)

    assert config is None
    assert not result.is_valid
    assert any(issue.key == path and message in issue.message for issue in result.issues), str(result)


def test_create_writer():
    assert isinstance(ReporterConfig().create_writer(), FileSystemWriter)
    writer = InMemoryWriter()
    assert ReporterConfig(writer=writer).create_writer() is writer


def test_resolve_worker_id(monkeypatch):
    assert ReporterConfig().resolve_worker_id() is None
    monkeypatch.setenv("SHARD", "2")
    assert ReporterConfig(worker_env="SHARD").resolve_worker_id() == "2"
    assert ReporterConfig(worker_id="9", worker_env="SHARD").resolve_worker_id() == "9"


def test_issues_render_one_per_line_and_raise():
    config, result = load_config_yaml("version: 2\nresults_dir: ''\n")

    assert config is None
    text = str(result)
    assert text.startswith("2 configuration issue(s):")
    assert "  - version: Unsupported version (got 2); Only 'version: 1' is supported" in text
    assert "  - results_dir: Cannot be empty" in text

    with pytest.raises(ConfigurationError, match="Cannot be empty"):
        result.raise_for_issues()


def test_valid_result_does_not_raise():
    config, result = load_config_yaml("version: 1\n")

    assert str(result) == "Configuration is valid"
    result.raise_for_issues()
