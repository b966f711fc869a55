"""
High-Level P-touch Printer Interface.

Provides a simple API for printing labels on Brother P-touch printers
over USB, using the raster command protocol.
"""

import logging
from typing import Iterable, Optional

from .commands import CommandSender, PrintInfo
from .connection import DEFAULT_TIMEOUT_MS, DeviceInfo, UsbConnection, UsbContext
from .device import Filter, Media, MediaKind
from .errors import PrinterError
from .image import ImageSource, RasterRenderer
from .job import DEFAULT_MARGIN, MAX_POLL_ATTEMPTS, POLL_INTERVAL, PrintJob
from .responses import Status

logger = logging.getLogger(__name__)


class PTouchPrinter:
    """
    High-level interface to a P-touch label printer.

    Use PTouchPrinter.open() to connect; the returned printer owns the
    USB session until close() (or the end of a with block).
    """

    def __init__(
        self,
        connection: UsbConnection,
        poll_attempts: int = MAX_POLL_ATTEMPTS,
        poll_interval: float = POLL_INTERVAL,
        margin: int = DEFAULT_MARGIN,
    ):
        """
        Wrap an already open connection.

        Args:
            connection: Open USB session
            poll_attempts: Status polls before a print times out
            poll_interval: Seconds between status polls
            margin: Feed margin in dots
        """
        self.connection = connection
        self.commands = CommandSender(connection)
        self.poll_attempts = poll_attempts
        self.poll_interval = poll_interval
        self.margin = margin

    @classmethod
    def open(
        cls,
        selector: Optional[Filter] = None,
        context: Optional[UsbContext] = None,
        timeout: int = DEFAULT_TIMEOUT_MS,
        **kwargs,
    ) -> "PTouchPrinter":
        """
        Connect to a printer and reset it.

        Args:
            selector: Device kind and index (default: first PT-P710BT)
            context: USB context to enumerate with
            timeout: Transfer timeout in milliseconds
            **kwargs: Passed on to the constructor

        Raises:
            InvalidIndexError: If the selected printer is not connected
            InvalidEndpointsError: If the printer lacks bulk endpoints
            UsbError: On USB failure
        """
        if selector is None:
            selector = Filter()

        connection = UsbConnection.open(selector, context=context, timeout=timeout)
        printer = cls(connection, **kwargs)

        try:
            printer.reset()
        except PrinterError:
            connection.close()
            raise

        return printer

    def reset(self) -> None:
        """Clear any pending job and error state (invalidate + initialize)."""
        logger.debug("Resetting printer")
        self.commands.invalidate()
        self.commands.initialize()

    def close(self) -> None:
        """Release the USB session."""
        self.connection.close()

    def __enter__(self) -> "PTouchPrinter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def info(self) -> DeviceInfo:
        """Fetch manufacturer, product and serial number."""
        return self.connection.info()

    def status(self) -> Status:
        """Request and parse a status frame."""
        self.commands.status_request()
        status = Status.parse(self.connection.read())
        logger.debug(f"Status: {status.raw_data.hex()}")
        return status

    def media(self) -> Media:
        """Look up the media currently loaded."""
        return Media.from_status(self.status())

    def new_job(self) -> PrintJob:
        """Create a print job bound to this printer's session."""
        return PrintJob(
            self.commands,
            self.connection,
            poll_attempts=self.poll_attempts,
            poll_interval=self.poll_interval,
            margin=self.margin,
        )

    def print_raw(self, lines: Iterable[bytes], info: PrintInfo) -> None:
        """
        Print raster lines and wait for completion.

        Args:
            lines: 16-byte raster lines, in print order
            info: Media/page information sent before the data

        Raises:
            DeviceError: If the printer reports an error
            TimeoutError: If a transfer is short or the print never completes
            UsbError: On USB failure
        """
        self.new_job().run(lines, info)

    def print_image(
        self,
        image: ImageSource,
        media: Optional[Media] = None,
        threshold: int = 128,
    ) -> None:
        """
        Render and print an image.

        Args:
            image: Image source (path, bytes, or PIL Image)
            media: Loaded media (default: as reported by the printer)
            threshold: Grayscale threshold for black/white conversion

        Raises:
            RenderError: If the image or the loaded media cannot be used
        """
        status = self.status()
        if media is None:
            media = Media.from_status(status)
        logger.debug(f"Printing on {media.name}")

        lines = RasterRenderer(media, threshold=threshold).render(image)
        kind = status.media_kind if isinstance(status.media_kind, MediaKind) else None
        info = PrintInfo(
            kind=kind,
            width=media.width,
            length=0,
            raster_number=len(lines),
        )
        self.print_raw(lines, info)

    @property
    def is_connected(self) -> bool:
        """Check if the USB session is open."""
        return self.connection.is_connected
