"""
Command-line interface for pdfsanitizex.
"""

import logging
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from pdfsanitizex import __version__
from pdfsanitizex.config import DEFAULT_DPI, SanitizerConfig
from pdfsanitizex.decoder import parse_pixel_data
from pdfsanitizex.exceptions import PdfSanitizeXError
from pdfsanitizex.pipeline import ConversionPipeline
from pdfsanitizex.renderer import ContainerRenderer
from pdfsanitizex.utils import format_file_size
from pdfsanitizex.writer import pixels_to_pdf

console = Console()


def _configure_logging(verbosity: int) -> None:
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fail(exc: Exception) -> None:
    stage = getattr(exc, "stage", None)
    label = f"✗ Error ({stage}):" if stage else "✗ Error:"
    console.print(f"\n[bold red]{label}[/bold red] {escape(str(exc))}")
    sys.exit(1)


def _default_output(input_doc: str) -> str:
    path = Path(input_doc)
    return str(path.with_name(f"{path.stem}-safe.pdf"))


def _read_stream(stream_file: str) -> bytes:
    with open(stream_file, 'rb') as handle:
        return handle.read()


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    pdfsanitizex - convert untrusted documents into safe, pixel-only PDFs.
    """
    pass


@cli.command(name="convert")
@click.argument('input_doc', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--output', '-o',
    help='Output PDF path (default: <input>-safe.pdf)',
    type=click.Path(dir_okay=False)
)
@click.option('--ocr', is_flag=True, help='Add a searchable text layer when an OCR engine is available')
@click.option('--dpi', type=click.FloatRange(min=0, min_open=True), help=f'Rendering resolution (default: {DEFAULT_DPI:g})')
@click.option('--runtime', help='Container runtime executable (default: podman)')
@click.option('--image', help='Converter container image')
@click.option(
    '--max-decoded-bytes',
    type=click.IntRange(min=0),
    help='Reject pixel streams declaring more pixel data than this'
)
@click.option('--validate', is_flag=True, help='Re-read the produced PDF and check its structure')
@click.option('--verbose', '-v', count=True, help='Increase log verbosity (-v, -vv)')
def convert(input_doc, output, ocr, dpi, runtime, image, max_decoded_bytes, validate, verbose):
    """
    Sanitize a document by rendering it to pixels in a container.

    Examples:

        pdfsanitizex convert invoice.docx

        pdfsanitizex convert scan.pdf -o safe.pdf --ocr
    """
    _configure_logging(verbose)
    output = output or _default_output(input_doc)
    try:
        config = SanitizerConfig().with_updates(
            dpi=dpi,
            container_runtime=runtime,
            image_name=image,
            max_decoded_bytes=max_decoded_bytes,
            post_validate=validate or None,
        )
        pipeline = ConversionPipeline(config, renderer=ContainerRenderer(config))

        console.print(f"\n[bold cyan]Converting {escape(os.path.basename(input_doc))}...[/bold cyan]")
        result = pipeline.convert(input_doc, output, apply_ocr=ocr)

        table = Table(title="Safe PDF", show_header=False)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Output", str(result.output_path))
        table.add_row("Pages", str(result.page_count))
        table.add_row("Size", format_file_size(result.output_size))
        if result.ocr is not None:
            table.add_row("OCR", "none (copied without text layer)" if result.ocr.degraded else result.ocr.strategy)
        console.print(table)

        for warning in result.warnings:
            console.print(f"[yellow]! OCR warning:[/yellow] {escape(warning)}")
        console.print("\n[bold green]✓ Conversion completed successfully[/bold green]\n")

    except Exception as e:
        _fail(e)


@cli.command(name="pixels-to-pdf")
@click.argument('stream_file', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--output', '-o',
    required=True,
    help='Output PDF path',
    type=click.Path(dir_okay=False)
)
@click.option('--dpi', type=click.FloatRange(min=0, min_open=True), help=f'Resolution the stream was rendered at (default: {DEFAULT_DPI:g})')
@click.option('--max-decoded-bytes', type=click.IntRange(min=0), help='Upper bound on decoded pixel data')
def pixels_to_pdf_command(stream_file, output, dpi, max_decoded_bytes):
    """
    Assemble a PDF from a captured raw pixel stream.

    Example:

        pdfsanitizex pixels-to-pdf pages.bin -o safe.pdf
    """
    try:
        config = SanitizerConfig().with_updates(dpi=dpi, max_decoded_bytes=max_decoded_bytes)
        pages = parse_pixel_data(_read_stream(stream_file), max_decoded_bytes=config.max_decoded_bytes)
        destination = pixels_to_pdf(pages, output, config=config)
        console.print(f"\n[bold green]✓ Wrote {len(pages)} page(s) to:[/bold green] {escape(str(destination))}\n")
    except (OSError, PdfSanitizeXError, ValueError) as e:
        _fail(e)


@cli.command(name="inspect")
@click.argument('stream_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--dpi', type=click.FloatRange(min=0, min_open=True), default=DEFAULT_DPI, show_default=True, help='Resolution used for page sizes')
def inspect_stream(stream_file, dpi):
    """
    List the pages contained in a raw pixel stream.

    Example:

        pdfsanitizex inspect pages.bin
    """
    try:
        pages = parse_pixel_data(_read_stream(stream_file))
    except (OSError, PdfSanitizeXError) as e:
        _fail(e)
        return

    table = Table(title=f"Pixel stream: {escape(os.path.basename(stream_file))}")
    table.add_column("Page", style="cyan", justify="right")
    table.add_column("Pixels", style="green")
    table.add_column("Data", style="green", justify="right")
    table.add_column("Points", style="green")
    for index, page in enumerate(pages, 1):
        width_pts, height_pts = page.size_in_points(dpi)
        table.add_row(
            str(index),
            f"{page.width}x{page.height}",
            format_file_size(page.byte_size),
            f"{width_pts:.2f}x{height_pts:.2f}",
        )

    console.print()
    console.print(table)
    console.print(f"[dim]{len(pages)} page(s)[/dim]\n")


if __name__ == '__main__':
    cli()
