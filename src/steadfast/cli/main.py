"""CLI entry point for steadfast.

Diagnostics for the error handling core: show how a given failure would be
classified and handled, and print the effective retry policy table.
"""

import asyncio
import json
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..core.config import ConfigError
from ..errors.api_error import ApiError
from ..errors.handler import ErrorHandler
from ..errors.reporting import log_level_for
from ..errors.types import Severity
from ..runtime.logging import bootstrap_logging

app = typer.Typer(
    name="steadfast",
    help="steadfast - error classification and retry diagnostics",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"steadfast {__version__}")
        raise typer.Exit()


def _load_handler() -> ErrorHandler:
    try:
        return asyncio.run(ErrorHandler.load())
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level (debug, info, warn, error, critical)",
    ),
):
    """steadfast - error classification and retry diagnostics."""
    try:
        bootstrap_logging(mode="cli", level=log_level)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)


@app.command()
def explain(
    status: int = typer.Argument(..., help="HTTP status code (0 for a network failure)"),
    code: Optional[str] = typer.Option(None, "--code", "-c", help="Backend error code"),
    severity: str = typer.Option("error", "--severity", "-s", help="info, warning, error or critical"),
    json_output: bool = typer.Option(False, "--json", help="Output raw JSON"),
):
    """Show how a failure with this status and code would be handled."""
    try:
        level = Severity.parse(severity)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)

    handler = _load_handler()
    error = ApiError(f"HTTP {status}", status_code=status, error_code=code, severity=level)
    _, result = handler.evaluate(error)

    if json_output:
        payload = result.model_dump(mode="json")
        payload["log_level"] = log_level_for(result.severity).value
        console.print_json(json.dumps(payload))
        return

    table = Table(show_header=False, box=None)
    table.add_column(style="bold cyan")
    table.add_column()
    table.add_row("category", result.category.value)
    table.add_row("severity", result.severity.value)
    table.add_row("message", result.user_message)
    table.add_row("retry", "yes" if result.should_retry else "no")
    if result.retry_delay_ms is not None:
        table.add_row("first delay", f"{result.retry_delay_ms} ms")
    logged = log_level_for(result.severity).value if result.should_log else "not logged"
    table.add_row("log", logged)
    console.print(table)


@app.command()
def policies(
    json_output: bool = typer.Option(False, "--json", help="Output raw JSON"),
):
    """Print the effective retry policy of every error category."""
    handler = _load_handler()
    rows = handler.policies.items()

    if json_output:
        payload = {
            category.value: {
                "eligible": policy.eligible,
                "max_attempts": policy.max_attempts,
                "base_delay_ms": policy.base_delay_ms,
                "max_delay_ms": policy.max_delay_ms,
            }
            for category, policy in rows
        }
        console.print_json(json.dumps(payload))
        return

    table = Table(title="Retry policies")
    table.add_column("Category", style="cyan")
    table.add_column("Retry")
    table.add_column("Max attempts", justify="right")
    table.add_column("Base delay (ms)", justify="right")
    table.add_column("Max delay (ms)", justify="right")
    for category, policy in rows:
        table.add_row(
            category.value,
            "[green]yes[/green]" if policy.eligible else "[dim]no[/dim]",
            str(policy.max_attempts),
            str(policy.base_delay_ms),
            str(policy.max_delay_ms),
        )
    console.print(table)


if __name__ == "__main__":
    app()
