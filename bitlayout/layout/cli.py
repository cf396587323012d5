"""Command-line interface for bit-field layout translation."""

from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING, NoReturn

import click
from lark.exceptions import LarkError
from rich.console import Console
from rich.table import Table

from bitlayout.layout import parse, rust
from bitlayout.layout.emitter import named_classes
from bitlayout.layout.translator import BitfieldTranslator
from bitlayout.layout.types import BitGroup, LayoutError, Padding, TranslationContext

if TYPE_CHECKING:
    from bitlayout.layout.types import FieldClass, StructDecl


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log layout decisions")
def cli(verbose: bool) -> None:
    """Bit-field struct layout translator."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


def _fail(message: str) -> NoReturn:
    print(f"error: {message}")
    sys.exit(1)


def _load(input_file: str) -> list[StructDecl]:
    with open(input_file, encoding="utf-8") as f:
        text = f.read()

    try:
        return parse(text)
    except (LarkError, LayoutError) as e:
        _fail(str(e))


def _find(decls: list[StructDecl], name: str) -> StructDecl:
    for decl in decls:
        if decl.name == name:
            return decl
    _fail(f"Unknown struct: {name}")


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input layout file")
@click.option("--output", "-o", "output_file", required=True, help="Output Rust file")
def gen(input_file: str, output_file: str) -> None:
    """Generate Rust structs with bit-field accessors."""
    decls = _load(input_file)
    translator = BitfieldTranslator()

    try:
        shapes = [translator.convert_struct_decl(d) for d in decls if d.has_bitfields]
        generated_file = rust.render(shapes, comments=[f"Source: {input_file}"])
    except LayoutError as e:
        _fail(str(e))

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input layout file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display the classified layout of every struct."""
    decls = _load(input_file)
    translator = BitfieldTranslator()

    try:
        layouts = {decl.name: translator.classify(decl) for decl in decls}
    except LayoutError as e:
        _fail(str(e))

    if output_json:
        _output_json(decls, layouts)
    else:
        _output_plain(decls, layouts)


def _kind(cls: FieldClass) -> str:
    if isinstance(cls, BitGroup):
        return "bitfield"
    if isinstance(cls, Padding):
        return "padding"
    return "regular"


def _output_json(decls: list[StructDecl], layouts: dict[str, list[FieldClass]]) -> None:
    """Output layouts as JSON."""
    data: dict = {}

    for decl in decls:
        data[decl.name] = {
            "size": decl.platform_byte_size,
            "align": decl.manual_alignment or decl.platform_alignment,
            "layout": [{"kind": _kind(cls), **cls.to_dict()} for cls in layouts[decl.name]],
        }

    print(json.dumps(data, indent=2))


def _output_plain(decls: list[StructDecl], layouts: dict[str, list[FieldClass]]) -> None:
    """Output layouts using rich text formatting."""
    console = Console()

    for decl in decls:
        align = decl.manual_alignment or decl.platform_alignment
        console.print(
            f"[bold cyan]{decl.name}[/bold cyan] "
            f"[dim]({decl.platform_byte_size} bytes, align {align})[/dim]"
        )

        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("Kind", style="dim")
        table.add_column("Name", style="white")
        table.add_column("Bytes", style="yellow", justify="right")
        table.add_column("Members", style="green")

        for name, cls in named_classes(layouts[decl.name]):
            if isinstance(cls, BitGroup):
                members = ", ".join(f"{m.name} {m.bits}" for m in cls.members)
                table.add_row("bitfield", name, str(cls.byte_size), members)
            elif isinstance(cls, Padding):
                table.add_row("padding", name, str(cls.byte_size), "")
            else:
                table.add_row("regular", name, str(cls.byte_size), cls.ty)

        console.print(table)
        console.print()


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input layout file")
@click.option("--struct", "-s", "struct_name", required=True, help="Struct to initialize")
@click.option("--expr", "-e", "exprs", multiple=True, help="Initializer, in field order")
@click.option("--zero", is_flag=True, default=False, help="Zero initializer")
@click.option("--static", "is_static", is_flag=True, default=False, help="Static storage")
def init(
    input_file: str, struct_name: str, exprs: tuple[str, ...], zero: bool, is_static: bool
) -> None:
    """Print a Rust initializer expression for a struct."""
    decl = _find(_load(input_file), struct_name)
    translator = BitfieldTranslator()

    try:
        if zero:
            print(rust.render_expr(translator.zero_initializer(decl, is_static)))
        else:
            ctx = TranslationContext(is_static=is_static)
            plan = translator.literal_initializer(decl, list(exprs), ctx)
            print(rust.render_literal(plan), end="")
    except LayoutError as e:
        _fail(str(e))


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
