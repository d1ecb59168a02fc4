#!/usr/bin/env python3
"""
Genkō Yōshi layout tool - resolve the manuscript grid for a page and export it
Prints the geometry and background pattern for a direction, grid and mode,
and renders an editor document onto a printable DOCX sheet.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich import box

from layout_config import GRID_PRESETS
from layout_geometry import VisualMode, WritingDirection
from layout_settings import LayoutSettings
from background_pattern import css_number
from editor_style import build_editor_style, centering_transform
from document_io import (
    DocumentCorruptedError,
    document_paragraphs,
    open_document,
    parse_document,
    save_document,
    serialize_document,
)
from genkou_helpers import build_manuscript_document
from sizes import PageSizeSelector

logging.basicConfig(level=logging.INFO, format='[%(levelname)s] %(message)s')


def build_parser():
    parser = argparse.ArgumentParser(description="Genkō Yōshi layout resolver and manuscript exporter")
    parser.add_argument("input", nargs="?", help="Editor document (JSON tree, UTF-8)")
    parser.add_argument("-d", "--direction", default="horizontal",
                        choices=[d.value for d in WritingDirection], help="Writing direction")
    parser.add_argument("-m", "--mode", default="ruled",
                        choices=[m.value for m in VisualMode] + ['line'], help="Background style")
    parser.add_argument("--chars", type=int, help="Characters per line")
    parser.add_argument("--lines", type=int, help="Lines per page")
    parser.add_argument("--preset", choices=sorted(GRID_PRESETS), help="Manuscript grid preset")
    parser.add_argument("--font-size", type=int, default=16, help="Base font size (px) when not grid fitting")
    parser.add_argument("--format", default=None,
                        help="Paper format (see sizes.py); 'custom' prompts interactively")
    parser.add_argument("-o", "--output", help="Export the page as a DOCX manuscript sheet")
    parser.add_argument("--json", help="Write geometry and pattern as JSON")
    parser.add_argument("--svg", help="Write the background tile as SVG")
    parser.add_argument("--css", action="store_true", help="Print the editor CSS declarations")
    parser.add_argument("--save", help="Re-save the input document to this path")
    return parser


def settings_from_args(args, page_format) -> LayoutSettings:
    settings = (LayoutSettings()
                .with_direction(args.direction)
                .with_visual_mode(args.mode)
                .with_font_size(args.font_size))
    if args.preset:
        return settings.apply_grid_preset(args.preset)
    grid = PageSizeSelector.default_grid(page_format)
    chars = args.chars if args.chars is not None else grid.chars_per_line
    lines = args.lines if args.lines is not None else grid.lines_per_page
    return settings.apply_grid_settings(chars, lines)


def geometry_table(settings, descriptor, pattern) -> Table:
    table = Table(title="Page Geometry", box=box.ROUNDED, expand=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green", justify="right")

    table.add_row("Direction", settings.direction.value)
    table.add_row("Mode", settings.visual_mode.value)
    table.add_row("Grid", f"{settings.grid.chars_per_line}×{settings.grid.lines_per_page}")
    table.add_row("Grid fitting", "yes" if descriptor.grid_fitting else "no")
    table.add_row("Cell size", f"{css_number(descriptor.cell_size)}px")
    table.add_row("Line pitch", f"{css_number(descriptor.line_pitch)}px")
    table.add_row("Font size", f"{css_number(descriptor.effective_font_size)}px")
    table.add_row("Letter spacing", f"{css_number(descriptor.letter_spacing)}px")
    table.add_row("Centering", centering_transform(descriptor, settings.direction))
    table.add_row("Content", f"{css_number(descriptor.content_width)}×{css_number(descriptor.content_height)}px")
    if pattern.tile_size:
        table.add_row("Tile", f"{css_number(pattern.tile_size.width)}×{css_number(pattern.tile_size.height)}px "
                              f"({pattern.repeat_axis.value})")
    table.add_row("Border", pattern.border_style.to_css() if pattern.border_style else "none")
    return table


def pattern_to_dict(pattern):
    return {
        'tile_svg': pattern.to_svg(),
        'tile_size': [pattern.tile_size.width, pattern.tile_size.height] if pattern.tile_size else None,
        'repeat_axis': pattern.repeat_axis.value if pattern.repeat_axis else None,
        'placement_offset': list(pattern.placement_offset),
        'anchor': pattern.anchor,
        'border': pattern.border_style.to_css() if pattern.border_style else None,
    }


def load_input(path, console):
    """Read and parse the input document, exiting on failure"""
    result = open_document(path)
    if result.error or result.canceled:
        console.print(f"[bold red]Error reading file: {result.error or 'no file'}[/bold red]")
        sys.exit(1)
    try:
        return parse_document(result.content)
    except DocumentCorruptedError as e:
        console.print(f"[bold red]{e}[/bold red]")
        sys.exit(1)


def main(argv=None):
    args = build_parser().parse_args(argv)
    console = Console()

    if args.format == "custom":
        page_format = PageSizeSelector(console=console).select_page_size()
    elif args.format:
        page_format = PageSizeSelector.get_format(args.format)
        if page_format is None:
            console.print(f"[bold red]Error: Unknown page format '{args.format}'.[/bold red]")
            sys.exit(1)
    else:
        page_format = PageSizeSelector.default_format()

    settings = settings_from_args(args, page_format)
    page = PageSizeSelector.page_dimensions(page_format)
    descriptor, pattern = settings.render(page)

    console.print(f"[bold yellow]{page_format['name']}[/bold yellow] "
                  f"[green]({css_number(page.width)}×{css_number(page.height)}px writing area)[/green]")
    console.print(geometry_table(settings, descriptor, pattern))

    if args.css:
        style = build_editor_style(descriptor, settings.direction, page)
        style.update(pattern.to_css())
        for name, value in style.items():
            console.print(f"  [cyan]{name}[/cyan]: {value}", highlight=False)

    if args.json:
        report = {'settings': {'direction': settings.direction.value,
                               'mode': settings.visual_mode.value,
                               'chars_per_line': settings.grid.chars_per_line,
                               'lines_per_page': settings.grid.lines_per_page,
                               'font_size': settings.font_size},
                  'geometry': descriptor.to_dict(),
                  'pattern': pattern_to_dict(pattern)}
        with open(args.json, 'w', encoding='utf-8') as f:
            json.dump(report, f, ensure_ascii=False, indent=2)
        console.print(f"[bold green]✓ Geometry JSON saved:[/bold green] {args.json}")

    if args.svg:
        svg = pattern.to_svg()
        if svg is None:
            console.print(f"[yellow]Mode '{settings.visual_mode.value}' has no background tile[/yellow]")
        else:
            Path(args.svg).write_text(svg, encoding='utf-8')
            console.print(f"[bold green]✓ Tile SVG saved:[/bold green] {args.svg}")

    tree = load_input(args.input, console) if args.input else None

    if args.save:
        if tree is None:
            console.print("[bold red]No input document to save.[/bold red]")
            sys.exit(1)
        result = save_document(serialize_document(tree), args.save)
        if not result.success:
            console.print(f"[bold red]Error: {result.error}[/bold red]")
            sys.exit(1)
        console.print(f"[bold green]✓ Document saved:[/bold green] {result.file_path}")

    if args.output:
        paragraphs = document_paragraphs(tree) if tree else []
        doc = build_manuscript_document(paragraphs, settings, page_format)
        doc.save(args.output)
        console.print(f"[bold green]✓ DOCX file saved:[/bold green] {args.output}")

    return 0


if __name__ == "__main__":
    main()
