"""Tests for status frame parsing."""

import pytest

from conftest import status_frame
from ptouch.device import (
    DeviceStatus,
    Error1,
    Error2,
    MediaKind,
    Notification,
    Phase,
    TapeColour,
    TextColour,
)
from ptouch.responses import Status


class TestStatusParse:
    """Test Status.parse."""

    def test_completed_without_errors(self):
        """A completion frame with empty error fields."""
        status = Status.parse(status_frame(status_type=0x01))

        assert status.status_type == DeviceStatus.COMPLETED
        assert status.error1 == Error1(0)
        assert status.error2 == Error2(0)
        assert not status.has_error
        assert status.is_completed

    def test_error1_preserved(self):
        """Error bits are kept bit for bit."""
        status = Status.parse(status_frame(status_type=0x02, error1=0x05))

        assert int(status.error1) == 0x05
        assert Error1.NO_MEDIA in status.error1
        assert Error1.CUTTER_JAM in status.error1
        assert Error1.END_OF_MEDIA not in status.error1
        assert status.has_error

    def test_error2_preserved(self):
        """Second error byte decodes independently."""
        status = Status.parse(status_frame(error2=0x10))

        assert status.error1 == Error1(0)
        assert status.error2 == Error2.COVER_OPEN
        assert status.has_error

    def test_media_fields(self):
        """Media width, kind and colours are decoded."""
        status = Status.parse(status_frame(media_width=24, media_kind=0x01))

        assert status.media_width == 24
        assert status.media_kind == MediaKind.LAMINATED_TAPE
        assert status.tape_colour == TapeColour.WHITE
        assert status.text_colour == TextColour.BLACK
        assert status.model == 0x76

    def test_phase_change(self):
        """Phase change frames report the printing phase."""
        status = Status.parse(status_frame(status_type=0x06, phase=0x01))

        assert status.status_type == DeviceStatus.PHASE_CHANGE
        assert status.phase == Phase.PRINTING
        assert not status.is_completed

    def test_phase_number_big_endian(self):
        """Phase number spans bytes 20-21, high byte first."""
        frame = bytearray(status_frame())
        frame[20] = 0x00
        frame[21] = 0x14
        assert Status.parse(bytes(frame)).phase_number == 0x0014

    def test_notification(self):
        """Cover open notification."""
        frame = bytearray(status_frame(status_type=0x05))
        frame[22] = 0x03
        status = Status.parse(bytes(frame))

        assert status.status_type == DeviceStatus.NOTIFICATION
        assert status.notification == Notification.COVER_OPEN

    def test_unknown_status_type_is_other(self):
        """Unlisted status types decode as OTHER."""
        status = Status.parse(status_frame(status_type=0x42))
        assert status.status_type == DeviceStatus.OTHER
        assert status.raw_data[18] == 0x42

    def test_unknown_codes_kept_raw(self):
        """Unknown vendor codes are preserved as integers."""
        status = Status.parse(status_frame(media_kind=0x42, tape_colour=0x99))
        assert status.media_kind == 0x42
        assert status.tape_colour == 0x99

    def test_raw_data_preserved(self):
        """The full frame is kept."""
        frame = status_frame()
        status = Status.parse(frame)
        assert status.raw_data == frame
        assert status.hardware_settings == frame[26:30]

    def test_accepts_bytearray(self):
        """PyUSB returns arrays; any bytes-like frame parses."""
        status = Status.parse(bytearray(status_frame(status_type=0x01)))
        assert status.is_completed

    @pytest.mark.parametrize("length", [0, 31, 33])
    def test_wrong_length_rejected(self, length):
        """Anything but 32 bytes is not a status frame."""
        with pytest.raises(ValueError, match="32 bytes"):
            Status.parse(bytes(length))

    def test_str(self):
        """Human-readable summary names the status and media."""
        text = str(Status.parse(status_frame(status_type=0x01)))
        assert "COMPLETED" in text
        assert "LAMINATED_TAPE 12mm" in text
