"""Brother P-touch USB Label Printer Driver."""

__version__ = "0.1.0"

from .commands import Commands, CommandSender, PrintInfo
from .connection import DEFAULT_TIMEOUT_MS, DeviceInfo, UsbConnection, UsbContext
from .device import (
    BROTHER_VID,
    AdvancedMode,
    CompressionMode,
    DeviceStatus,
    Error1,
    Error2,
    Filter,
    Media,
    MediaKind,
    Mode,
    PTouchDevice,
    VariousMode,
)
from .errors import (
    DeviceError,
    InvalidEndpointsError,
    InvalidIndexError,
    NoLanguagesError,
    PrintError,
    PrinterError,
    RenderError,
    TimeoutError,
    UsbError,
)
from .image import ImageSizeError, RasterRenderer, render_text
from .job import PrintJob, PrintState
from .packbits import compress, decompress
from .printer import PTouchPrinter
from .responses import Status

__all__ = [
    "PTouchPrinter",
    "PrintJob",
    "PrintState",
    "UsbConnection",
    "UsbContext",
    "DeviceInfo",
    "DEFAULT_TIMEOUT_MS",
    "Commands",
    "CommandSender",
    "PrintInfo",
    "Status",
    "BROTHER_VID",
    "PTouchDevice",
    "Filter",
    "Media",
    "MediaKind",
    "Mode",
    "VariousMode",
    "AdvancedMode",
    "CompressionMode",
    "DeviceStatus",
    "Error1",
    "Error2",
    "PrinterError",
    "UsbError",
    "InvalidIndexError",
    "NoLanguagesError",
    "InvalidEndpointsError",
    "RenderError",
    "TimeoutError",
    "PrintError",
    "DeviceError",
    "ImageSizeError",
    "RasterRenderer",
    "render_text",
    "compress",
    "decompress",
]
