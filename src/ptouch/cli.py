"""
Command-Line Interface for P-touch Printers.

Usage:
    ptouch info            - Show USB device strings
    ptouch status          - Show printer status
    ptouch print IMAGE     - Print an image
    ptouch text TEXT       - Print text
    ptouch qr DATA         - Print a QR code
    ptouch barcode DATA    - Print a barcode
    ptouch test            - Print a test pattern
"""

import logging
import sys
from typing import Callable, Optional

import click
from PIL import Image

from .barcodes import BARCODE_TYPES, ERROR_CORRECTION_LEVELS, generate_barcode, generate_qr
from .connection import DEFAULT_TIMEOUT_MS
from .device import Filter, Media, PTouchDevice
from .errors import (
    DeviceError,
    InvalidIndexError,
    PrinterError,
    RenderError,
    TimeoutError,
)
from .image import RasterRenderer, create_test_pattern, lines_to_image, render_text
from .printer import PTouchPrinter

DEVICE_NAMES = [d.cli_name for d in PTouchDevice]


def media_cli_name(media: Media) -> str:
    """Command-line name of a media (e.g. "tze-12mm")."""
    return media.name.lower().replace("_", "-")


MEDIA_NAMES = [media_cli_name(m) for m in Media]


def media_from_name(name: Optional[str]) -> Optional[Media]:
    """Resolve a --media value, None meaning "ask the printer"."""
    if name is None:
        return None
    for media in Media:
        if media_cli_name(media) == name:
            return media
    raise click.BadParameter(f"Unknown media: {name}")


def open_printer(ctx) -> PTouchPrinter:
    """Open the printer selected by the global options."""
    return PTouchPrinter.open(ctx.obj["selector"], timeout=ctx.obj["timeout"])


def report_error(e: Exception) -> None:
    """Print a printer error in the matching wording and exit with status 1."""
    if isinstance(e, InvalidIndexError):
        click.echo(f"Printer not found: {e}", err=True)
    elif isinstance(e, DeviceError):
        click.echo(f"Printer error: {e}", err=True)
    elif isinstance(e, TimeoutError):
        click.echo(f"Timeout: {e}", err=True)
    elif isinstance(e, RenderError):
        click.echo(f"Render error: {e}", err=True)
    else:
        click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def print_label(
    ctx,
    render: Callable[[Media], Image.Image],
    media_name: Optional[str],
    preview: Optional[str],
) -> None:
    """
    Render a label for the loaded media and print it, or save a preview.

    Args:
        ctx: Click context
        render: Produces the label image for a media
        media_name: --media value (None: ask the printer)
        preview: Save the rendered raster here instead of printing
    """
    media = media_from_name(media_name)

    if preview is not None:
        if media is None:
            raise click.UsageError("--preview requires --media")
        try:
            lines = RasterRenderer(media).render(render(media))
        except RenderError as e:
            report_error(e)
        lines_to_image(lines).save(preview)
        click.echo(f"Preview saved to {preview} ({len(lines)} raster lines)")
        return

    try:
        with open_printer(ctx) as printer:
            if media is None:
                media = printer.media()
            click.echo(f"Printing on {media_cli_name(media)}...")
            printer.print_image(render(media), media=media)
        click.echo("Print complete!")
    except PrinterError as e:
        report_error(e)


@click.group()
@click.option("--debug/--no-debug", default=False, help="Enable debug output")
@click.option(
    "--device",
    type=click.Choice(DEVICE_NAMES),
    default=PTouchDevice.PT_P710BT.cli_name,
    envvar="PTOUCH_DEVICE",
    show_default=True,
    help="Label maker device kind",
)
@click.option(
    "--index",
    type=click.IntRange(min=0),
    default=0,
    envvar="PTOUCH_INDEX",
    help="Index (if multiple devices are connected)",
)
@click.option(
    "--timeout",
    type=click.IntRange(min=1),
    default=DEFAULT_TIMEOUT_MS,
    show_default=True,
    help="USB transfer timeout in milliseconds",
)
@click.pass_context
def main(ctx, debug, device, index, timeout):
    """Brother P-touch Label Printer CLI."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["selector"] = Filter(device=PTouchDevice.from_name(device), index=index)
    ctx.obj["timeout"] = timeout


@main.command()
@click.pass_context
def info(ctx):
    """Show manufacturer, product and serial number."""
    try:
        with open_printer(ctx) as printer:
            device_info = printer.info()
    except PrinterError as e:
        report_error(e)

    click.echo(f"Manufacturer: {device_info.manufacturer}")
    click.echo(f"Product:      {device_info.product}")
    click.echo(f"Serial:       {device_info.serial}")


@main.command()
@click.pass_context
def status(ctx):
    """Show printer status (media, phase, errors)."""
    try:
        with open_printer(ctx) as printer:
            printer_status = printer.status()
    except PrinterError as e:
        report_error(e)

    click.echo(str(printer_status))


media_option = click.option(
    "--media",
    "media_name",
    type=click.Choice(MEDIA_NAMES),
    default=None,
    help="Loaded media (default: as reported by the printer)",
)
preview_option = click.option(
    "--preview",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Save a preview image instead of printing (requires --media)",
)


@main.command("print")
@click.argument("image", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--threshold",
    type=click.IntRange(0, 255),
    default=128,
    help="Black/white threshold (0-255, default 128)",
)
@media_option
@preview_option
@click.pass_context
def print_image(ctx, image, threshold, media_name, preview):
    """Print an image file."""

    def render(media):
        renderer = RasterRenderer(media, threshold=threshold)
        return renderer.prepare(renderer.load(image))

    print_label(ctx, render, media_name, preview)


@main.command()
@click.argument("text")
@click.option("--font", type=click.Path(exists=True, dir_okay=False), help="TrueType font file")
@click.option("--font-size", type=click.IntRange(min=1), help="Font size in pixels")
@media_option
@preview_option
@click.pass_context
def text(ctx, text, font, font_size, media_name, preview):
    """Print a line of text.

    Use "\\n" in TEXT for multiple lines.
    """
    content = text.replace("\\n", "\n")
    print_label(
        ctx,
        lambda media: render_text(content, media, font_path=font, font_size=font_size),
        media_name,
        preview,
    )


@main.command()
@click.argument("data")
@click.option(
    "--error-correction",
    type=click.Choice(ERROR_CORRECTION_LEVELS),
    default="M",
    help="Error correction level (L=7%%, M=15%%, Q=25%%, H=30%%)",
)
@media_option
@preview_option
@click.pass_context
def qr(ctx, data, error_correction, media_name, preview):
    """Generate and print a QR code.

    DATA is the content to encode (URL, text, etc.).

    Examples:
        ptouch qr "https://example.com"
        ptouch qr "Hello World" --error-correction H
    """

    def render(media):
        try:
            return generate_qr(data, media, error_correction=error_correction)
        except ImportError as e:
            raise RenderError(str(e)) from e
        except ValueError as e:
            raise RenderError(f"Invalid QR data: {e}") from e

    print_label(ctx, render, media_name, preview)


@main.command()
@click.argument("data")
@click.option(
    "--type",
    "barcode_type",
    type=click.Choice(BARCODE_TYPES),
    default="code128",
    help="Barcode type (default: code128)",
)
@click.option("--no-text", is_flag=True, help="Omit human-readable text below barcode")
@media_option
@preview_option
@click.pass_context
def barcode(ctx, data, barcode_type, no_text, media_name, preview):
    """Generate and print a barcode.

    DATA is the content to encode (numbers/text depending on barcode type).

    Examples:
        ptouch barcode "12345"
        ptouch barcode "HELLO" --type code39
    """

    def render(media):
        try:
            return generate_barcode(
                data, media, barcode_type=barcode_type, include_text=not no_text
            )
        except ImportError as e:
            raise RenderError(str(e)) from e
        except ValueError as e:
            raise RenderError(f"Invalid barcode data: {e}") from e

    print_label(ctx, render, media_name, preview)


@main.command()
@click.option("--length", default=64, type=click.IntRange(min=1), help="Pattern length in pixels")
@media_option
@preview_option
@click.pass_context
def test(ctx, length, media_name, preview):
    """Print a test pattern covering the printable area."""
    print_label(ctx, lambda media: create_test_pattern(media, length), media_name, preview)


if __name__ == "__main__":
    main()
