"""
Device Kinds, Media and Flag Definitions for Brother P-touch Printers.

Values follow the Brother raster command reference for the PT-E550W,
PT-P750W and PT-P710BT, which share a 128-pin, 180 DPI print head.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum, IntFlag

from .errors import RenderError

BROTHER_VID = 0x04F9

# Print head width in pins (one bit per pin in a raster line)
HEAD_PINS = 128


class PTouchDevice(IntEnum):
    """Supported label makers, keyed by USB product ID."""
    PT_E550W = 0x2060
    PT_P750W = 0x2062
    PT_P710BT = 0x20AF

    @property
    def cli_name(self) -> str:
        """Name used on the command line (e.g. "pt-p710bt")."""
        return self.name.lower().replace("_", "-")

    @classmethod
    def from_name(cls, name: str) -> "PTouchDevice":
        """Look up a device kind by its command-line name."""
        for device in cls:
            if device.cli_name == name.lower():
                return device
        raise ValueError(
            f"Unknown device: {name}. Supported devices: "
            f"{[d.cli_name for d in cls]}"
        )


@dataclass
class Filter:
    """Selects one connected printer: device kind plus index among matches."""
    device: PTouchDevice = PTouchDevice.PT_P710BT
    index: int = 0


class Mode(IntEnum):
    """Command mode (ESC i a)."""
    ESCP = 0x00
    RASTER = 0x01
    TEMPLATE = 0x03


class VariousMode(IntFlag):
    """Various mode settings (ESC i M)."""
    AUTO_CUT = 0x40
    MIRROR = 0x80


class AdvancedMode(IntFlag):
    """Advanced mode settings (ESC i K)."""
    HALF_CUT = 0x04
    NO_CHAIN = 0x08
    SPECIAL_TAPE = 0x10  # no cutting
    HIGH_RESOLUTION = 0x40
    NO_BUFFER_CLEARING = 0x80


class CompressionMode(IntEnum):
    """Raster data compression (M)."""
    NONE = 0x00
    TIFF = 0x02


class PrintInfoFlags(IntFlag):
    """Valid-field flags of the print information command (ESC i z)."""
    KIND = 0x02
    WIDTH = 0x04
    LENGTH = 0x08
    QUALITY = 0x40
    RECOVER = 0x80


class Error1(IntFlag):
    """Error information 1 (status byte 8)."""
    NO_MEDIA = 0x01
    END_OF_MEDIA = 0x02
    CUTTER_JAM = 0x04
    WEAK_BATTERY = 0x08
    PRINTER_IN_USE = 0x10
    PRINTER_TURNED_OFF = 0x20
    HIGH_VOLTAGE_ADAPTER = 0x40
    FAN_MOTOR_ERROR = 0x80


class Error2(IntFlag):
    """Error information 2 (status byte 9)."""
    REPLACE_MEDIA = 0x01
    EXPANSION_BUFFER_FULL = 0x02
    COMMUNICATION_ERROR = 0x04
    COMMUNICATION_BUFFER_FULL = 0x08
    COVER_OPEN = 0x10
    OVERHEATING = 0x20
    BLACK_MARKING_NOT_DETECTED = 0x40
    SYSTEM_ERROR = 0x80


class MediaKind(IntEnum):
    """Media type (status byte 11, print info n2)."""
    NONE = 0x00
    LAMINATED_TAPE = 0x01
    NON_LAMINATED_TAPE = 0x03
    HEAT_SHRINK_TUBE_2_1 = 0x11
    HEAT_SHRINK_TUBE_3_1 = 0x17
    INCOMPATIBLE = 0xFF


class DeviceStatus(IntEnum):
    """Status type (status byte 18)."""
    REPLY = 0x00
    COMPLETED = 0x01
    ERROR = 0x02
    EXIT_IF = 0x03
    TURNED_OFF = 0x04
    NOTIFICATION = 0x05
    PHASE_CHANGE = 0x06
    OTHER = -1

    @classmethod
    def _missing_(cls, value):
        return cls.OTHER


class Phase(IntEnum):
    """Phase type (status byte 19)."""
    EDITING = 0x00
    PRINTING = 0x01


class Notification(IntEnum):
    """Notification number (status byte 22)."""
    NONE = 0x00
    COVER_OPEN = 0x03
    COVER_CLOSED = 0x04


class TapeColour(IntEnum):
    """Tape colour information (status byte 24)."""
    WHITE = 0x01
    OTHER = 0x02
    CLEAR = 0x03
    RED = 0x04
    BLUE = 0x05
    YELLOW = 0x06
    GREEN = 0x07
    BLACK = 0x08
    CLEAR_WHITE_TEXT = 0x09
    MATTE_WHITE = 0x20
    MATTE_CLEAR = 0x21
    MATTE_SILVER = 0x22
    SATIN_GOLD = 0x23
    SATIN_SILVER = 0x24
    BLUE_D = 0x30
    RED_D = 0x31
    FLUORESCENT_ORANGE = 0x40
    FLUORESCENT_YELLOW = 0x41
    BERRY_PINK_S = 0x50
    LIGHT_GRAY_S = 0x51
    LIME_GREEN_S = 0x52
    YELLOW_F = 0x60
    PINK_F = 0x61
    BLUE_F = 0x62
    WHITE_HEAT_SHRINK = 0x70
    WHITE_FLEX_ID = 0x90
    YELLOW_FLEX_ID = 0x91
    CLEANING = 0xF0
    STENCIL = 0xF1
    INCOMPATIBLE = 0xFF


class TextColour(IntEnum):
    """Text colour information (status byte 25)."""
    WHITE = 0x01
    OTHER = 0x02
    RED = 0x04
    BLUE = 0x05
    BLACK = 0x08
    GOLD = 0x0A
    BLUE_F = 0x62
    CLEANING = 0xF0
    STENCIL = 0xF1
    INCOMPATIBLE = 0xFF


HEAT_SHRINK_KINDS = (MediaKind.HEAT_SHRINK_TUBE_2_1, MediaKind.HEAT_SHRINK_TUBE_3_1)


class Media(Enum):
    """
    Known media and their print head geometry.

    Value: (family, reported width in mm, left margin pins,
            printable pins, right margin pins)

    The three pin counts always add up to HEAD_PINS.
    """
    TZE_3_5MM = ("tze", 4, 52, 24, 52)
    TZE_6MM = ("tze", 6, 48, 32, 48)
    TZE_9MM = ("tze", 9, 39, 50, 39)
    TZE_12MM = ("tze", 12, 29, 70, 29)
    TZE_18MM = ("tze", 18, 8, 112, 8)
    TZE_24MM = ("tze", 24, 0, 128, 0)
    HS_5_8MM = ("hs", 6, 50, 28, 50)
    HS_8_8MM = ("hs", 9, 40, 48, 40)
    HS_11_7MM = ("hs", 12, 31, 66, 31)
    HS_17_7MM = ("hs", 18, 11, 106, 11)
    HS_23_6MM = ("hs", 24, 0, 128, 0)

    def __init__(self, family, width, left_margin, print_area, right_margin):
        self.family = family
        self.width = width
        self.left_margin = left_margin
        self.print_area = print_area
        self.right_margin = right_margin

    @classmethod
    def lookup(cls, kind, width: int) -> "Media":
        """
        Find the media matching a reported media kind and width.

        Raises:
            RenderError: If no media is loaded or it is not a known size
        """
        if kind in (MediaKind.NONE, MediaKind.INCOMPATIBLE):
            raise RenderError(f"No usable media loaded ({kind!r})")

        family = "hs" if kind in HEAT_SHRINK_KINDS else "tze"
        for media in cls:
            if media.family == family and media.width == width:
                return media

        raise RenderError(f"Unsupported media: {kind!r}, {width}mm")

    @classmethod
    def from_status(cls, status) -> "Media":
        """Find the media currently loaded, from a decoded status frame."""
        return cls.lookup(status.media_kind, status.media_width)
