"""
Image Rendering for P-touch Printers.

Converts images to 16-byte raster lines for the 128-pin print head. The
image's vertical axis runs across the tape, so each image column becomes
one raster line and the label grows with the image width.
"""

from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from PIL import Image, ImageDraw, ImageFont

from .device import HEAD_PINS, Media
from .errors import RenderError
from .packbits import RASTER_LINE_BYTES

# Larger images are refused before decoding the pixels
MAX_IMAGE_DIMENSION = 10000  # pixels per side
MAX_IMAGE_PIXELS = 10_000_000

ImageSource = Union[str, Path, bytes, Image.Image]


class ImageSizeError(RenderError):
    """Image is too large to render."""

    pass


def _check_size(img: Image.Image) -> None:
    width, height = img.size
    if max(width, height) > MAX_IMAGE_DIMENSION:
        raise ImageSizeError(
            f"{width}x{height} image has a side over {MAX_IMAGE_DIMENSION} pixels"
        )
    if width * height > MAX_IMAGE_PIXELS:
        raise ImageSizeError(
            f"{width}x{height} image pixel count exceeds {MAX_IMAGE_PIXELS:,}"
        )


class RasterRenderer:
    """Render images into raster lines for a given media."""

    def __init__(self, media: Media, threshold: int = 128):
        """
        Args:
            media: Loaded media, which fixes the printable pin range
            threshold: Pixels darker than this (0-255) are printed
        """
        self.media = media
        self.threshold = threshold

    def load(self, source: ImageSource) -> Image.Image:
        """
        Open a label image.

        Args:
            source: PIL Image, file path, or encoded image bytes

        Raises:
            ImageSizeError: If the image is too large
            RenderError: If the source cannot be read
        """
        if isinstance(source, Image.Image):
            img = source
        elif isinstance(source, (str, Path, bytes)):
            if not isinstance(source, bytes) and not Path(source).exists():
                raise RenderError(f"Image file not found: {source}")
            try:
                img = Image.open(BytesIO(source) if isinstance(source, bytes) else source)
            except (OSError, ValueError, Image.DecompressionBombError) as e:
                raise RenderError(f"Failed to load image: {e}") from e
        else:
            raise RenderError(f"Unsupported image type: {type(source).__name__}")

        _check_size(img)
        return img

    def prepare(self, image: Image.Image) -> Image.Image:
        """
        Scale an image to the printable height and convert it to 1-bit.

        Returns:
            1-bit image exactly media.print_area pixels high
        """
        # Keep hard edges on images that are already black and white
        resample = Image.Resampling.NEAREST if image.mode == "1" else Image.Resampling.LANCZOS
        if image.mode != "L":
            image = image.convert("L")

        height = self.media.print_area
        if image.height != height:
            ratio = height / image.height
            width = max(1, int(image.width * ratio))
            image = image.resize((width, height), resample)

        # Black pixels (0) are burned
        return image.point(lambda x: 0 if x < self.threshold else 255, mode="1")

    def to_lines(self, image: Image.Image) -> list[bytes]:
        """
        Convert a prepared 1-bit image to raster lines.

        Pin (left_margin + y) of line x is set when pixel (x, y) is black.
        Bit 7 of byte 0 is pin 0.

        Raises:
            RenderError: If the image is taller than the printable area
        """
        if image.mode != "1":
            image = image.convert("1")

        if image.height > self.media.print_area:
            raise RenderError(
                f"Image height {image.height} exceeds printable area "
                f"({self.media.print_area} pins)"
            )

        offset = self.media.left_margin
        lines = []

        for col in range(image.width):
            line = bytearray(RASTER_LINE_BYTES)
            for row in range(image.height):
                if image.getpixel((col, row)) == 0:
                    pin = offset + row
                    line[pin // 8] |= 1 << (7 - pin % 8)
            lines.append(bytes(line))

        return lines

    def render(self, source: ImageSource) -> list[bytes]:
        """Load, prepare and convert an image in one step."""
        return self.to_lines(self.prepare(self.load(source)))


def render_text(
    text: str,
    media: Media,
    font_path: Optional[str] = None,
    font_size: Optional[int] = None,
    padding: int = 4,
) -> Image.Image:
    """
    Draw text as a 1-bit image sized for the media.

    Args:
        text: Text to draw (may contain newlines)
        media: Target media; the text fills its printable height
        font_path: TrueType font file (default: Pillow's built-in font)
        font_size: Font size in pixels (default: printable height)
        padding: Blank pixels before and after the text

    Raises:
        RenderError: If the text is empty or the font cannot be loaded
    """
    if not text:
        raise RenderError("Nothing to render")

    height = media.print_area
    try:
        if font_path is not None:
            font = ImageFont.truetype(font_path, font_size or height)
        else:
            font = ImageFont.load_default()
    except OSError as e:
        raise RenderError(f"Failed to load font {font_path}: {e}") from e

    # Measure on a scratch canvas
    scratch = ImageDraw.Draw(Image.new("L", (1, 1), 255))
    left, top, right, bottom = scratch.multiline_textbbox((0, 0), text, font=font)

    img = Image.new("L", (right - left + 2 * padding, bottom - top + 2 * padding), 255)
    draw = ImageDraw.Draw(img)
    draw.multiline_text((padding - left, padding - top), text, font=font, fill=0)

    return RasterRenderer(media).prepare(img)


def create_test_pattern(media: Media, length: int = 64) -> Image.Image:
    """Create a border-and-diagonals pattern covering the printable area."""
    height = media.print_area
    img = Image.new("1", (length, height), color=1)  # White background
    draw = ImageDraw.Draw(img)

    draw.rectangle([0, 0, length - 1, height - 1], outline=0)
    draw.line([(0, 0), (length - 1, height - 1)], fill=0)
    draw.line([(0, height - 1), (length - 1, 0)], fill=0)

    return img


def lines_to_image(lines: list[bytes]) -> Image.Image:
    """Rebuild a 1-bit preview image (HEAD_PINS high) from raster lines."""
    img = Image.new("1", (max(1, len(lines)), HEAD_PINS), color=1)
    for col, line in enumerate(lines):
        for pin in range(HEAD_PINS):
            if line[pin // 8] & (1 << (7 - pin % 8)):
                img.putpixel((col, pin), 0)
    return img
