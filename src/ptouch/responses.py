"""
Status Frame Parser for P-touch Printers.

The printer answers a status request (and, with notification enabled,
reports print progress) with a fixed 32-byte frame:

    Offset  Field
    0       Print head mark (0x80)
    1       Size (0x20)
    2       Brother code ('B')
    3       Series code
    4       Model code
    5       Country code ('0')
    6       Battery level (PT-P710BT)
    7       Extended error
    8       Error information 1
    9       Error information 2
    10      Media width (mm)
    11      Media type
    12      Number of colors
    13      Fonts
    14      Japanese fonts
    15      Mode
    16      Density
    17      Media length (mm)
    18      Status type
    19      Phase type
    20-21   Phase number (big-endian)
    22      Notification number
    23      Expansion area
    24      Tape color information
    25      Text color information
    26-29   Hardware settings
    30-31   Reserved

Fields the driver does not act on are kept as raw values.
"""

from dataclasses import dataclass
from typing import Union

from .device import (
    DeviceStatus,
    Error1,
    Error2,
    MediaKind,
    Notification,
    Phase,
    TapeColour,
    TextColour,
)

STATUS_FRAME_SIZE = 32


def _lookup(enum_cls, value: int):
    """Return the enum member for value, or value itself if unknown."""
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass
class Status:
    """Parsed status frame."""

    model: int
    battery: int
    extended_error: int
    error1: Error1
    error2: Error2
    media_width: int
    media_kind: Union[MediaKind, int]
    mode: int
    density: int
    media_length: int
    status_type: DeviceStatus
    phase: Union[Phase, int]
    phase_number: int
    notification: Union[Notification, int]
    tape_colour: Union[TapeColour, int]
    text_colour: Union[TextColour, int]
    hardware_settings: bytes
    raw_data: bytes = b""

    @classmethod
    def parse(cls, data: bytes) -> "Status":
        """
        Parse a status frame.

        Args:
            data: Exactly 32 bytes read from the status endpoint

        Returns:
            Status instance

        Raises:
            ValueError: If the frame is not 32 bytes long
        """
        data = bytes(data)
        if len(data) != STATUS_FRAME_SIZE:
            raise ValueError(
                f"Status frame must be {STATUS_FRAME_SIZE} bytes, got {len(data)}"
            )

        return cls(
            model=data[4],
            battery=data[6],
            extended_error=data[7],
            error1=Error1(data[8]),
            error2=Error2(data[9]),
            media_width=data[10],
            media_kind=_lookup(MediaKind, data[11]),
            mode=data[15],
            density=data[16],
            media_length=data[17],
            status_type=DeviceStatus(data[18]),
            phase=_lookup(Phase, data[19]),
            phase_number=(data[20] << 8) | data[21],
            notification=_lookup(Notification, data[22]),
            tape_colour=_lookup(TapeColour, data[24]),
            text_colour=_lookup(TextColour, data[25]),
            hardware_settings=data[26:30],
            raw_data=data,
        )

    @property
    def has_error(self) -> bool:
        """True if either error bit set is non-empty."""
        return int(self.error1) != 0 or int(self.error2) != 0

    @property
    def is_completed(self) -> bool:
        """True if this frame reports a finished print."""
        return self.status_type == DeviceStatus.COMPLETED

    def __str__(self) -> str:
        return (
            f"Status(\n"
            f"  status_type={self.status_type.name},\n"
            f"  phase={getattr(self.phase, 'name', self.phase)},\n"
            f"  media={getattr(self.media_kind, 'name', self.media_kind)} {self.media_width}mm,\n"
            f"  tape_colour={getattr(self.tape_colour, 'name', self.tape_colour)},\n"
            f"  text_colour={getattr(self.text_colour, 'name', self.text_colour)},\n"
            f"  error1={self.error1!r},\n"
            f"  error2={self.error2!r}\n"
            f")"
        )
