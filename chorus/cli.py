#!/usr/bin/env python3
"""
Chorus CLI - test report adapter tools

Usage:
    chorus validate <chorus.yaml>
    chorus summary <results-dir> [OPTIONS]
    chorus --version
"""

from collections import Counter
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import load_config
from .runtime import read_results

app = typer.Typer(
    name="chorus",
    help="🎶 Chorus - test engine reporting adapter",
    add_completion=False,
)
console = Console()

_STATUS_STYLES = {
    "passed": "green",
    "failed": "red",
    "broken": "yellow",
    "skipped": "dim",
}


def version_callback(value: bool):
    if value:
        console.print(f"🎶 Chorus v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True,
        help="Show version and exit"
    ),
):
    """
    🎶 Chorus - test engine reporting adapter

    Inspect reporter configuration and persisted results.
    """
    pass


@app.command()
def validate(
    config_file: Path = typer.Argument(
        ...,
        help="Path to the reporter configuration YAML file",
        exists=True,
        readable=True,
    ),
):
    """
    Validate a reporter configuration file.
    """
    console.print(f"\n📄 Validating: {config_file}")

    config, validation = load_config(config_file)

    if not validation.is_valid:
        console.print(f"\n[red]❌ Validation failed:[/red]")
        console.print(str(validation))
        raise typer.Exit(code=1)

    console.print(f"\n[green]✅ Valid configuration[/green]")

    table = Table(title="Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("results_dir", str(config.results_dir))
    table.add_row("project_dir", str(config.project_dir or "-"))
    table.add_row("worker_id", str(config.worker_id or f"${config.worker_env}"))
    table.add_row("skip_reason", config.skip_reason)
    table.add_row("failure_policy", config.failure_policy.__name__)

    console.print()
    console.print(table)
    raise typer.Exit(code=0)


@app.command()
def summary(
    results_dir: Path = typer.Argument(
        ...,
        help="Directory the reporter wrote results into",
        exists=True,
        file_okay=False,
    ),
    output: str = typer.Option(
        "text", "--output", "-o",
        help="Output format: text or json"
    ),
):
    """
    Summarize persisted test results.

    Exits with code 1 when any test failed or broke.
    """
    results = read_results(results_dir)
    counts = Counter(result.get("status") or "unknown" for result in results)

    if output == "json":
        console.print_json(data={
            "total": len(results),
            "statuses": dict(counts),
        })
    else:
        table = Table(title=f"Results: {results_dir}")
        table.add_column("Test", style="cyan")
        table.add_column("Status")
        table.add_column("Duration", justify="right")

        for result in results:
            status = result.get("status") or "unknown"
            style = _STATUS_STYLES.get(status, "white")
            table.add_row(
                result.get("fullName") or result.get("name") or "?",
                f"[{style}]{status}[/{style}]",
                _format_duration(result.get("start"), result.get("stop")),
            )

        console.print(table)
        totals = ", ".join(f"{count} {status}" for status, count in sorted(counts.items()))
        console.print(f"\n  Tests: {len(results)} ({totals or 'none'})")

    if counts.get("failed") or counts.get("broken"):
        raise typer.Exit(code=1)
    raise typer.Exit(code=0)


@app.command()
def info():
    """
    Show information about Chorus.
    """
    console.print(f"""
🎶 [bold]Chorus[/bold] v{__version__}

Reporting adapter for describe/it style test engines

[bold]Features:[/bold]
  • Nested groups, tests, steps and fixtures from engine events
  • Pass/fail/broken/skip classification for sync and async code
  • Inherited labels, attachments and parameters
  • JSON results on disk

[bold]Quick Start:[/bold]
  chorus validate chorus.yaml
  chorus summary chorus-results
""")


def _format_duration(start: int | None, stop: int | None) -> str:
    if start is None or stop is None:
        return "N/A"
    return f"{stop - start}ms"


if __name__ == "__main__":
    app()
