"""Command-line interface for busvtable."""

from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from busvtable.generator import bind, introspect, parse
from busvtable.signature import SignatureError, SpellingError, compose
from busvtable.vtable import EntryKind, describe_flags

if TYPE_CHECKING:
    from busvtable.generator.types import Interface
    from busvtable.vtable import Vtable


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """D-Bus vtable and signature tools."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


def _load(input_file: str) -> list[tuple[Interface, Vtable]]:
    with open(input_file, encoding="utf-8") as f:
        text = f.read()
    return [(iface, bind(iface)) for iface in parse(text)]


@cli.command()
@click.option("--language", "-l", required=True, help="Target language (xml)")
@click.option("--input", "-i", "input_file", required=True, help="Input interface file")
@click.option("--output", "-o", "output_file", required=True, help="Output file")
def gen(language: str, input_file: str, output_file: str) -> None:
    """Generate an interface description from a definition file."""
    bound = _load(input_file)

    if language == "xml":
        generated_file = introspect.render((iface.name, vtable) for iface, vtable in bound)
    else:
        print(f"Unknown language: {language}")
        sys.exit(1)

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input interface file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display interfaces and their vtables."""
    bound = _load(input_file)

    if output_json:
        _output_json(bound)
    else:
        _output_plain(bound)


@cli.command()
@click.argument("types", nargs=-1)
def signature(types: tuple[str, ...]) -> None:
    """Print the D-Bus signature of C/C++ type spellings."""
    try:
        sig = compose(*types)
    except (SignatureError, SpellingError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(str(sig))


def _entry_dict(kind: EntryKind, vtable: Vtable) -> list[dict]:
    return [
        {
            "member": e.member,
            "signature": str(e.signature),
            "result": str(e.result),
            "names": list(e.argument_names),
            "flags": describe_flags(e.flags),
            "writable": e.is_writable,
        }
        for e in vtable.members
        if e.kind == kind or (kind == EntryKind.PROPERTY and e.kind.is_property)
    ]


def _output_json(bound: list[tuple[Interface, Vtable]]) -> None:
    """Output interface info as JSON."""
    data: dict = {"interfaces": []}

    for iface, vtable in bound:
        data["interfaces"].append(
            {
                "definition": iface.to_dict(),
                "vtable": {
                    "entries": len(vtable),
                    "flags": describe_flags(vtable.flags),
                    "methods": _entry_dict(EntryKind.METHOD, vtable),
                    "signals": _entry_dict(EntryKind.SIGNAL, vtable),
                    "properties": _entry_dict(EntryKind.PROPERTY, vtable),
                },
            }
        )

    print(json.dumps(data, indent=2))


def _output_plain(bound: list[tuple[Interface, Vtable]]) -> None:
    """Output interface info using rich text formatting."""
    console = Console()

    for iface, vtable in bound:
        flags = ", ".join(describe_flags(vtable.flags)) or "none"
        console.print(f"[bold cyan]{iface.name}[/bold cyan] [dim]({flags})[/dim]")

        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("Kind", style="dim")
        table.add_column("Member", style="white")
        table.add_column("In", style="yellow")
        table.add_column("Out", style="yellow")
        table.add_column("Names", style="white")
        table.add_column("Flags", style="green")

        for e in vtable.members:
            table.add_row(
                e.kind.name.lower().replace("_", " "),
                e.member or "",
                str(e.signature) or "-",
                str(e.result) if e.kind == EntryKind.METHOD and str(e.result) else "-",
                ", ".join(e.argument_names),
                ", ".join(describe_flags(e.flags)),
            )

        console.print(table)
        console.print()


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
