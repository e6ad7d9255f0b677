"""
Command-line interface for minitranspile.
This module provides commands to transpile a program and inspect pattern leaves.
"""
# typer relies on function calls used as default values
# pyright: reportCallInDefaultInitializer=false

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from minitranspile.env import env
from minitranspile.errors import TranspileError, TranspileSyntaxError
from minitranspile.mini import get_leaf_locations
from minitranspile.transpiler import TranspileOptions, transpile

cli = typer.Typer(
	name="minitranspile",
	help="Transpile live-coding patterns and collect highlight/widget metadata",
	no_args_is_help=True,
)


@cli.callback()
def main_callback() -> None:
	logging.basicConfig(
		level=env.log_level,
		format="%(message)s",
		handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
	)


def _read_source(file: str) -> str:
	if file == "-":
		return sys.stdin.read()
	path = Path(file)
	if not path.is_file():
		raise FileNotFoundError(file)
	return path.read_text(encoding="utf-8")


@cli.command("transpile")
def transpile_cmd(
	file: str = typer.Argument(..., help="Source file, or '-' to read stdin"),
	wrap_async: bool = typer.Option(False, "--wrap-async", help="Wrap in an async IIFE"),
	add_return: bool = typer.Option(True, "--return/--no-return"),
	locations: bool = typer.Option(True, "--locations/--no-locations"),
	widgets: bool = typer.Option(True, "--widgets/--no-widgets"),
	caller_id: str | None = typer.Option(
		None, "--id", help="Namespace for widget IDs (defaults to $MINITRANSPILE_CALLER_ID)"
	),
	as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
):
	"""Transpile a program and print the output (or the full result as JSON)."""
	console = Console(stderr=True)
	try:
		code = _read_source(file)
	except FileNotFoundError:
		console.print(f"[red]File not found:[/red] {file}")
		raise typer.Exit(1) from None

	options = TranspileOptions(
		wrap_async=wrap_async,
		add_return=add_return,
		emit_locations=locations,
		emit_widgets=widgets,
		caller_id=caller_id or env.caller_id,
	)
	try:
		result = transpile(code, options)
	except TranspileSyntaxError as exc:
		console.print(f"[red]Syntax error:[/red] {exc}")
		raise typer.Exit(1) from None
	except TranspileError as exc:
		console.print(f"[red]Transpile error:[/red] {exc}")
		raise typer.Exit(1) from None

	if as_json:
		typer.echo(json.dumps(result.to_json(), indent=2))
	else:
		typer.echo(result.output)


@cli.command("locations")
def locations_cmd(
	pattern: str = typer.Argument(..., help="Mini-notation, without quotes"),
	offset: int = typer.Option(0, "--offset", help="Offset of the opening quote"),
):
	"""Print the leaf locations of a mini-notation pattern as JSON."""
	locs = get_leaf_locations(f'"{pattern}"', offset)
	typer.echo(json.dumps([list(loc) for loc in locs]))


def main():
	cli()


if __name__ == "__main__":
	main()
