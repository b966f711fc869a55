"""
Integration tests for P-touch printers.

These tests require real hardware to run. Without --ptouch-device they are
skipped. To run them, use:

    pytest tests/ -m hardware --ptouch-device=pt-p710bt [--ptouch-index=0]

The print tests feed tape; load a cheap 12mm or wider cassette first.
"""

import pytest
from PIL import Image

from ptouch import Media, PTouchPrinter, PrintState
from ptouch.commands import PrintInfo
from ptouch.device import DeviceStatus, MediaKind
from ptouch.image import RasterRenderer, create_test_pattern

pytestmark = pytest.mark.hardware


@pytest.fixture
def connected_printer(printer_filter):
    """Open the selected printer for one test."""
    with PTouchPrinter.open(printer_filter) as printer:
        yield printer


class TestConnection:
    """Tests for opening the USB session."""

    def test_open_close(self, printer_filter):
        """Test opening and releasing the printer."""
        printer = PTouchPrinter.open(printer_filter)
        assert printer.is_connected
        printer.close()
        assert not printer.is_connected

    def test_reopen(self, printer_filter):
        """The interface is released on close and can be claimed again."""
        for _ in range(2):
            with PTouchPrinter.open(printer_filter) as printer:
                assert printer.is_connected

    def test_info(self, connected_printer):
        """Test reading the USB string descriptors."""
        info = connected_printer.info()
        assert info.manufacturer.startswith("Brother")
        assert info.product


class TestStatus:
    """Tests for status queries."""

    def test_status_reply(self, connected_printer):
        """An idle printer answers a status request with a reply frame."""
        status = connected_printer.status()

        assert len(status.raw_data) == 32
        assert status.status_type == DeviceStatus.REPLY
        assert not status.has_error

    def test_media_loaded(self, connected_printer):
        """The loaded cassette maps to a known media."""
        media = connected_printer.media()
        assert isinstance(media, Media)


class TestPrinting:
    """Tests that feed tape."""

    def test_print_test_pattern(self, connected_printer):
        """Print a short test pattern."""
        media = connected_printer.media()
        connected_printer.print_image(create_test_pattern(media, length=32), media=media)

    def test_print_job_steps(self, connected_printer):
        """Drive a job one state at a time."""
        status = connected_printer.status()
        media = Media.from_status(status)
        lines = RasterRenderer(media).render(Image.new("1", (16, media.print_area), color=0))

        job = connected_printer.new_job()
        job.configure(PrintInfo(
            kind=status.media_kind if isinstance(status.media_kind, MediaKind) else None,
            width=media.width,
            length=0,
            raster_number=len(lines),
        ))
        job.transfer(lines)
        job.start()
        job.wait()

        assert job.state == PrintState.COMPLETED
