"""
Root Typer application for the dyncall CLI.

Usage:
    dyncall call https://api.example.com items/{{id}} -p id=42 --output json
    dyncall call https://api.example.com login -X POST -p username=u -p password=p
    dyncall settings --json
"""

from __future__ import annotations

import asyncio
from typing import Any

import typer
from typer import Typer

from dyncall.calls.call import DynCall
from dyncall.calls.http.client import HttpClient, HttpMethod
from dyncall.calls.http.executor import HttpExecutor
from dyncall.calls.http.params import WILDCARD
from dyncall.cli.utils import fail, output_mapping, output_value, parse_parameters
from dyncall.core.errors import DynCallError
from dyncall.core.logging import configure_logging
from dyncall.core.output import OutputKind
from dyncall.core.settings import get_settings

app = Typer(
    name="dyncall",
    help="dyncall - declarative remote calls.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from dyncall import __version__

        typer.echo(f"dyncall {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level (default: DYNCALL_LOG_LEVEL)."),
) -> None:
    """dyncall CLI - perform one-off calls and inspect configuration."""
    configure_logging(level=log_level.upper() if log_level else None)


# ── Commands ─────────────────────────────────────────────────────────────


def make_client(base_url: str) -> HttpClient:
    """HTTP client used by ``dyncall call``."""
    return HttpClient(base_url)


async def _perform(
    client: HttpClient,
    method: HttpMethod,
    path: str,
    parameters: dict[str, str],
    output_kind: OutputKind,
    retries: int,
) -> Any:
    executor = HttpExecutor(
        client,
        method,
        path,
        parameters_map={WILDCARD: WILDCARD},
        error_max_retries=retries,
    )
    dyn_call: DynCall[Any, Any] = DynCall(
        list(parameters),
        output_kind,
        allow_retries=retries > 0,
        name=f"{method.value} {path}",
    )
    dyn_call.executor = executor
    try:
        return await dyn_call.call(parameters)
    finally:
        await client.aclose()


@app.command("call")
def call(
    base_url: str = typer.Argument(..., help="Base URL of the service"),
    path: str = typer.Argument(..., help="Request path, may contain {{var}} placeholders"),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method"),
    param: list[str] | None = typer.Option(None, "--param", "-p", help="Call parameter as key=value (repeatable)"),
    output: str = typer.Option("string", "--output", "-o", help="Output kind: bool, string, integer, decimal, json"),
    retries: int = typer.Option(0, "--retries", "-r", help="Retries on transport errors"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Perform a single HTTP call and print the typed result."""
    parameters = parse_parameters(param)

    try:
        http_method = HttpMethod.parse(method)
        output_kind = OutputKind.parse(output)
    except (ValueError, DynCallError) as e:
        raise typer.BadParameter(str(e)) from e

    client = make_client(base_url)
    try:
        result = asyncio.run(_perform(client, http_method, path, parameters, output_kind, retries))
    except DynCallError as e:
        fail(e.message)

    output_value(result, as_json=json_out)


@app.command("settings")
def show_settings(
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show the effective DYNCALL_* settings."""
    settings = get_settings()
    output_mapping(settings.model_dump(), as_json=json_out, title="dyncall settings")
