"""
vss-types CLI
==============
Command-line interface for the vss-types library.

Commands:
    types       List every value type tag with its code and aliases
    inspect     Load a VSS JSON document and show its struct types
    defaults    Show and validate the default instance of a struct type
    version     Show version information

Usage::

    vss-types types
    vss-types inspect vss.json --json-output
    vss-types defaults vss.json Vehicle.Test.Position
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..loader.vss_json import VSSLoadError, load_vss_json
from ..models.struct import StructRegistry, StructValue, create_default_struct
from ..models.value import (
    Value,
    ValueType,
    is_array,
    is_primitive,
    value_type_aliases,
    value_type_to_string,
)
from ..validator.struct_validator import Severity, StructValidator

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
    )


def _group_of(value_type: ValueType) -> str:
    if value_type == ValueType.UNSPECIFIED:
        return "unspecified"
    if value_type in (ValueType.STRUCT, ValueType.STRUCT_ARRAY):
        return "struct"
    if is_array(value_type):
        return "array"
    if is_primitive(value_type):
        return "primitive"
    return "?"


def _load(vss_json: Path) -> StructRegistry:
    registry = StructRegistry()
    try:
        load_vss_json(vss_json, registry)
    except VSSLoadError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(2)
    return registry


def _value_to_json(value: Value) -> object:
    if value.type == ValueType.STRUCT:
        return _struct_to_json(value.data)
    if value.type == ValueType.STRUCT_ARRAY:
        return [_struct_to_json(item) for item in value.data]
    if is_array(value.type):
        return list(value.data)
    return value.data


def _struct_to_json(instance: StructValue) -> dict:
    return {
        "type_name": instance.type_name,
        "fields": {
            name: {"type": value_type_to_string(v.type), "value": _value_to_json(v)}
            for name, v in instance.fields.items()
        },
    }


@click.group()
@click.version_option(version=__version__, prog_name="vss-types")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """
    vss-types – runtime value, struct and quality types for VSS signals.
    """
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# types
# ---------------------------------------------------------------------------


@cli.command("types")
@click.option("--json-output", is_flag=True, help="Output results as JSON")
def list_types(json_output: bool) -> None:
    """List every value type tag."""
    rows = [
        {
            "name": value_type_to_string(t),
            "code": int(t),
            "group": _group_of(t),
            "aliases": value_type_aliases(t),
        }
        for t in ValueType
    ]

    if json_output:
        click.echo(json.dumps(rows, indent=2))
        return

    t = Table(title="Value Types", box=box.SIMPLE)
    t.add_column("Code", style="dim", justify="right")
    t.add_column("Name", style="cyan")
    t.add_column("Group")
    t.add_column("Aliases")
    for row in rows:
        t.add_row(str(row["code"]), row["name"], row["group"], ", ".join(row["aliases"]) or "—")
    console.print(t)


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("vss_json", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json-output", is_flag=True, help="Output results as JSON")
def inspect(vss_json: Path, json_output: bool) -> None:
    """Inspect the struct types defined in a VSS JSON document."""
    registry = _load(vss_json)

    if json_output:
        output = {
            "file": str(vss_json),
            "struct_count": len(registry),
            "structs": [
                {
                    "type_name": definition.type_name,
                    "description": definition.description,
                    "fields": [
                        {
                            "name": f.name,
                            "type": value_type_to_string(f.type),
                            "struct_type_name": f.struct_type_name,
                            "default": (
                                _value_to_json(f.default_value) if f.has_default() else None
                            ),
                        }
                        for f in definition.fields.values()
                    ],
                }
                for definition in registry.all().values()
            ],
        }
        click.echo(json.dumps(output, indent=2))
        return

    console.print()
    console.print(Panel(
        f"[bold]{vss_json.name}[/bold]\n"
        f"Struct types: [cyan]{len(registry)}[/cyan]",
        title="VSS Inspection",
        border_style="cyan",
    ))

    for definition in registry.all().values():
        t = Table(title=definition.type_name, caption=definition.description, box=box.ROUNDED)
        t.add_column("Field")
        t.add_column("Type")
        t.add_column("Struct Type")
        t.add_column("Default")
        for f in definition.fields.values():
            t.add_row(
                f.name,
                f"[cyan]{value_type_to_string(f.type)}[/cyan]",
                f.struct_type_name or "—",
                repr(f.default_value) if f.has_default() else "—",
            )
        console.print(t)

    if not len(registry):
        console.print("\n[yellow]No struct types found in this document.[/yellow]")
    console.print()


# ---------------------------------------------------------------------------
# defaults
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("vss_json", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("type_name")
def defaults(vss_json: Path, type_name: str) -> None:
    """Show the default instance of a struct type and validate it."""
    registry = _load(vss_json)

    instance = create_default_struct(type_name, registry)
    if instance is None:
        console.print(f"[red]Struct type '{type_name}' not found in registry[/red]")
        sys.exit(1)

    result = StructValidator(registry).validate(instance)
    status_str = "[bold green]PASS[/bold green]" if result.passed else "[bold red]FAIL[/bold red]"
    console.print(Panel(
        json.dumps(_struct_to_json(instance), indent=2),
        title=f"{type_name} – {status_str}",
        border_style="blue",
    ))
    for issue in result.issues:
        color = (
            "red" if issue.severity == Severity.ERROR
            else "yellow" if issue.severity == Severity.WARNING
            else "blue"
        )
        console.print(f"  [{color}]{issue.severity.value}[/{color}] [{issue.rule_id}] {issue.message}")

    sys.exit(0 if result.passed else 1)


# ---------------------------------------------------------------------------
# version info
# ---------------------------------------------------------------------------


@cli.command("version")
def show_version() -> None:
    """Show version information."""
    console.print(Panel(
        f"[bold cyan]vss-types[/bold cyan] v{__version__}\n\n"
        "Runtime value, struct and quality types for VSS signals\n"
        "VSS:      Vehicle Signal Specification 4.0 (struct support)\n"
        "License:  Apache 2.0",
        title="vss-types",
        border_style="cyan",
    ))
