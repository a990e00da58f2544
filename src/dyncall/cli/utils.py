"""
CLI utility helpers - argument parsing and output formatting.
"""

from __future__ import annotations

import json
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


def parse_parameters(values: list[str] | None) -> dict[str, str]:
    """Parse repeated ``key=value`` options."""
    parameters: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got: {item!r}", param_hint="--param")
        parameters[key] = value
    return parameters


def output_value(value: Any, *, as_json: bool = False) -> None:
    """Render a call result to the terminal."""
    if as_json:
        console.print_json(json.dumps(value, default=str))
        return

    if value is None:
        console.print("[dim]null[/dim]")
    elif isinstance(value, bool):
        typer.echo("true" if value else "false")
    elif isinstance(value, (dict, list)):
        console.print_json(json.dumps(value, default=str))
    else:
        typer.echo(str(value))


def output_mapping(data: dict[str, Any], *, as_json: bool = False, title: str = "") -> None:
    """Render a flat mapping as a two-column table (or JSON)."""
    if as_json:
        console.print_json(json.dumps(data, default=str))
        return

    table = Table(title=title or None)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(key, str(value))
    console.print(table)


def fail(message: str) -> NoReturn:
    err_console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(code=1)
