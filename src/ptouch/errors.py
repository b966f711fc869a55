"""
Exception Classes for the P-touch Driver.

Every failure is raised to the caller; the driver never retries on its own
except while polling for print completion (see job.PrintJob.wait).
"""


class PrinterError(Exception):
    """Base exception for all printer errors."""

    pass


class UsbError(PrinterError):
    """Lower-level USB transport failure."""

    pass


class InvalidIndexError(PrinterError):
    """Device index has no corresponding connected device."""

    pass


class NoLanguagesError(PrinterError):
    """Device advertises no USB string descriptor language."""

    pass


class InvalidEndpointsError(PrinterError):
    """Required bulk IN/OUT endpoints were not found."""

    pass


class RenderError(PrinterError):
    """Error turning label content into raster lines."""

    pass


class TimeoutError(PrinterError):
    """Short read/write, transport timeout, or print poll bound exceeded."""

    pass


class PrintError(PrinterError):
    """Print job driven out of order."""

    pass


class DeviceError(PrinterError):
    """Error reported by the printer in a status frame."""

    def __init__(self, error1, error2):
        self.error1 = error1
        self.error2 = error2
        super().__init__(f"Printer error ({error1!r} {error2!r})")
