"""Schema inspection CLI commands for dashrecord.

Registered as a subcommand group: `dashrecord schema show`, `dashrecord schema check`.
Record types are referenced as ``module.path:ClassName``.
"""

import importlib
import json
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from dashrecord.cli.app import app
from dashrecord.errors import DashRecordError
from dashrecord.printing import render_schema, render_table
from dashrecord.record import Record

console = Console()

schema_app = typer.Typer(help="Inspect record types and check data against them")
app.add_typer(schema_app, name="schema")


def load_record_type(reference: str) -> type[Record]:
    """Import a record type from a ``module:ClassName`` reference.

    Raises:
        ValueError: If the reference is malformed or does not name a Record subclass.
    """
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"Expected module:ClassName, got '{reference}'")

    try:
        target = importlib.import_module(module_name)
    except ImportError as exc:
        raise ValueError(f"Cannot import module '{module_name}': {exc}") from exc

    for part in attr_path.split("."):
        target = getattr(target, part, None)
        if target is None:
            raise ValueError(f"'{attr_path}' not found in module '{module_name}'")

    if not (isinstance(target, type) and issubclass(target, Record)):
        raise ValueError(f"'{reference}' is not a Record type")
    return target


def _resolve(reference: str) -> type[Record]:
    try:
        return load_record_type(reference)
    except ValueError as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        raise typer.Exit(1)


# --- Show ---


@schema_app.command("show")
def show(
    reference: Annotated[str, typer.Argument(help="Record type as module:ClassName")],
):
    """Show the properties declared for a record type."""
    record_type = _resolve(reference)
    logger.debug(f"Showing schema for {reference}")
    console.print(render_schema(record_type))


# --- Check ---


@schema_app.command("check")
def check(
    reference: Annotated[str, typer.Argument(help="Record type as module:ClassName")],
    data: Annotated[str, typer.Argument(help="JSON object with the record's attributes")],
):
    """Build a record from JSON data and report whether it satisfies the schema."""
    record_type = _resolve(reference)

    try:
        attributes = json.loads(data)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Error: invalid JSON: {escape(str(exc))}[/red]")
        raise typer.Exit(1)

    if not isinstance(attributes, dict):
        console.print("[red]Error: data must be a JSON object[/red]")
        raise typer.Exit(1)

    try:
        record = record_type(attributes)
    except DashRecordError as exc:
        console.print(f"[red]Invalid {record_type.__qualname__}: {escape(str(exc))}[/red]")
        raise typer.Exit(1)

    console.print(render_table(record))
    console.print(f"[green]Valid {record_type.__qualname__}[/green]")
