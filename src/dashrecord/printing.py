"""Human-readable rendering of records and record types with rich."""

from typing import Any

from rich.markup import escape
from rich.pretty import pretty_repr
from rich.table import Table

from dashrecord.config import get_config
from dashrecord.record import Record


def format_record(record: Record, max_width: int = 80) -> str:
    """Pretty-print a record's contents as a string."""
    return pretty_repr(
        record,
        max_width=max_width,
        max_string=get_config().repr_max_string,
    )


def render_table(record: Record) -> Table:
    """Build a table of every declared property and its current value.

    Declared properties that were never written show as unset.
    """
    schema = type(record).__schema__
    table = Table(title=type(record).__qualname__)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Required", style="yellow")
    table.add_column("Rule", style="blue")

    for name in schema:
        value = _format_value(record[name]) if name in record else "[dim]unset[/dim]"
        table.add_row(
            name,
            value,
            "yes" if schema.is_required(name) else "",
            _format_rule(schema.rule_for(name)),
        )
    return table


def render_schema(record_type: type[Record]) -> Table:
    """Build a table describing the properties declared for a record type."""
    schema = record_type.__schema__
    table = Table(title=f"{record_type.__qualname__} properties")
    table.add_column("Property", style="cyan")
    table.add_column("Default", style="green")
    table.add_column("Required", style="yellow")
    table.add_column("Rule", style="blue")

    for name in schema:
        info = schema.describe(name)
        if info.default_factory is not None:
            default = f"{getattr(info.default_factory, '__name__', 'factory')}()"
        elif info.has_default:
            default = _format_value(info.default)
        else:
            default = ""
        table.add_row(name, default, "yes" if info.required else "", _format_rule(info.rule))
    return table


def _format_value(value: Any) -> str:
    return escape(pretty_repr(value, max_string=get_config().repr_max_string))


def _format_rule(rule: Any) -> str:
    return escape(str(rule)) if rule is not None else ""
