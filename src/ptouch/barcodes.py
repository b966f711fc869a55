"""
Barcode and QR Code Labels.

Both generators return 1-bit images exactly as high as the media's
printable area, ready for RasterRenderer. They need the optional
dependencies:

    pip install ptouch[barcodes]
"""

import importlib
from io import BytesIO
from typing import Literal

from PIL import Image

from .device import Media

Symbology = Literal["code128", "code39", "ean13", "upca"]

BARCODE_TYPES = ("code128", "code39", "ean13", "upca")

ErrorCorrection = Literal["L", "M", "Q", "H"]

ERROR_CORRECTION_LEVELS = ("L", "M", "Q", "H")

# python-barcode works in mm; the print head has 180 dots per inch
DOTS_PER_MM = 180 / 25.4


def _require(module: str, package: str):
    """Import an optional dependency or explain how to install it."""
    try:
        return importlib.import_module(module)
    except ImportError:
        raise ImportError(
            f"{package} is needed for this label. Install with: pip install ptouch[barcodes]"
        ) from None


def generate_barcode(
    data: str,
    media: Media,
    barcode_type: Symbology = "code128",
    include_text: bool = True,
) -> Image.Image:
    """
    Draw a linear barcode along the tape.

    Bars run across the tape and the code reads along the label.

    Args:
        data: Content to encode
        media: Target media
        barcode_type: One of BARCODE_TYPES
        include_text: Print the human-readable digits under the bars

    Returns:
        1-bit image, media.print_area pixels high

    Raises:
        ImportError: If python-barcode is missing
        ValueError: For an unknown type or data the type cannot encode
    """
    barcode = _require("barcode", "python-barcode")
    errors = _require("barcode.errors", "python-barcode")
    writer = _require("barcode.writer", "python-barcode")

    if barcode_type not in BARCODE_TYPES:
        raise ValueError(
            f"Invalid barcode type: {barcode_type}. Supported types: {list(BARCODE_TYPES)}"
        )

    try:
        code = barcode.get_barcode_class(barcode_type)(data, writer=writer.ImageWriter())
    except errors.BarcodeError as e:
        raise ValueError(f"Cannot encode {data!r} as {barcode_type}: {e}") from e

    buffer = BytesIO()
    code.write(buffer, options={
        "module_width": 0.3,
        "module_height": media.print_area / DOTS_PER_MM,
        "write_text": include_text,
        "font_size": 6 if include_text else 0,
        "text_distance": 2,
        "quiet_zone": 2,
        "dpi": 180,
    })
    buffer.seek(0)

    img = Image.open(buffer).convert("L")

    # Text and quiet zone make the drawing taller than the bars; fit it back
    width = max(1, int(img.width * media.print_area / img.height))
    img = img.resize((width, media.print_area), Image.Resampling.NEAREST)

    return img.point(lambda x: 0 if x < 128 else 255, mode="1")


def generate_qr(
    data: str,
    media: Media,
    error_correction: ErrorCorrection = "M",
    border: int = 1,
) -> Image.Image:
    """
    Draw the largest QR code that fits across the tape.

    Each module is a whole number of pins, so the code is centred with a
    few blank pins above and below.

    Args:
        data: Content to encode (URL, text, etc.)
        media: Target media
        error_correction: Recovery level (L=7%, M=15%, Q=25%, H=30%)
        border: Quiet zone in modules

    Returns:
        1-bit image, media.print_area pixels high

    Raises:
        ImportError: If qrcode is missing
        ValueError: For an unknown level, or data that does not fit the media
    """
    qrcode = _require("qrcode", "qrcode")
    constants = _require("qrcode.constants", "qrcode")
    exceptions = _require("qrcode.exceptions", "qrcode")

    if error_correction not in ERROR_CORRECTION_LEVELS:
        raise ValueError(
            f"Invalid error correction: {error_correction}. "
            f"Supported levels: {list(ERROR_CORRECTION_LEVELS)}"
        )

    qr = qrcode.QRCode(
        version=None,
        error_correction=getattr(constants, f"ERROR_CORRECT_{error_correction}"),
        box_size=1,
        border=border,
    )
    qr.add_data(data)
    try:
        qr.make(fit=True)
    except exceptions.DataOverflowError as e:
        raise ValueError(f"Too much data for a QR code: {e}") from e

    modules = qr.modules_count + 2 * border
    if modules > media.print_area:
        raise ValueError(
            f"QR code needs {modules} pixels, media prints {media.print_area}"
        )

    qr.box_size = media.print_area // modules
    code = qr.make_image(fill_color="black", back_color="white")
    if hasattr(code, "get_image"):
        code = code.get_image()
    code = code.convert("1")

    canvas = Image.new("1", (code.width, media.print_area), color=1)
    canvas.paste(code, (0, (media.print_area - code.height) // 2))
    return canvas
