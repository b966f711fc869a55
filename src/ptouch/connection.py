"""
USB Connection Handler for P-touch Printers.

Handles bulk transfers to and from the printer using PyUSB. Commands go to
the bulk OUT endpoint, 32-byte status frames come back on the bulk IN
endpoint. Every call blocks until it completes or its timeout expires.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import usb.core
import usb.util

from .device import BROTHER_VID, Filter
from .errors import (
    InvalidEndpointsError,
    InvalidIndexError,
    NoLanguagesError,
    TimeoutError,
    UsbError,
)
from .responses import STATUS_FRAME_SIZE

logger = logging.getLogger(__name__)

# Default timeout for bulk transfers (ms)
DEFAULT_TIMEOUT_MS = 500


@dataclass
class DeviceInfo:
    """USB string descriptors of a connected printer."""
    manufacturer: str
    product: str
    serial: str

    def __str__(self) -> str:
        return f"{self.manufacturer} {self.product} (serial {self.serial})"


class UsbContext:
    """
    Explicit handle on the USB backend used for enumeration.

    Create one and pass it to every open() that should share it; by default
    PyUSB picks the first available backend.
    """

    def __init__(self, backend=None):
        self.backend = backend

    def devices(self, vendor_id: int, product_id: int) -> list:
        """List matching devices in enumeration order."""
        try:
            found = usb.core.find(
                find_all=True,
                idVendor=vendor_id,
                idProduct=product_id,
                backend=self.backend,
            )
            return list(found)
        except usb.core.USBError as e:
            raise UsbError(f"USB enumeration failed: {e}") from e


class UsbConnection:
    """Exclusive bulk IN/OUT session with one printer."""

    def __init__(
        self,
        device,
        interface_number: int,
        command_endpoint: int,
        status_endpoint: int,
        timeout: int = DEFAULT_TIMEOUT_MS,
    ):
        self.device = device
        self.interface_number = interface_number
        self.command_endpoint = command_endpoint
        self.status_endpoint = status_endpoint
        self.timeout = timeout
        self._closed = False

    @classmethod
    def open(
        cls,
        selector: Filter,
        context: Optional[UsbContext] = None,
        timeout: int = DEFAULT_TIMEOUT_MS,
    ) -> "UsbConnection":
        """
        Open and claim the selected printer.

        Args:
            selector: Device kind and index among matching devices
            context: USB context to enumerate with (default: new UsbContext)
            timeout: Default transfer timeout in milliseconds

        Returns:
            Connected UsbConnection

        Raises:
            InvalidIndexError: If no device matches or the index is too large
            InvalidEndpointsError: If the bulk endpoints cannot be found
            UsbError: On any lower-level USB failure
        """
        if context is None:
            context = UsbContext()

        matches = context.devices(BROTHER_VID, int(selector.device))
        logger.debug(f"Found {len(matches)} matching device(s)")

        if not matches or selector.index >= len(matches):
            logger.error(
                f"Device index ({selector.index}) exceeds number of "
                f"discovered devices ({len(matches)})"
            )
            raise InvalidIndexError(
                f"No {selector.device.cli_name} at index {selector.index} "
                f"({len(matches)} found)"
            )

        device = matches[selector.index]

        try:
            device.reset()
            interface_number, command_ep, status_ep = cls._find_endpoints(device)

            if device.is_kernel_driver_active(interface_number):
                logger.debug("Detaching kernel driver")
                device.detach_kernel_driver(interface_number)
            else:
                logger.debug("Kernel driver inactive")

            logger.debug(f"Claiming interface {interface_number}")
            usb.util.claim_interface(device, interface_number)
        except usb.core.USBError as e:
            usb.util.dispose_resources(device)
            raise UsbError(f"Failed to open device: {e}") from e
        except Exception:
            usb.util.dispose_resources(device)
            raise

        return cls(device, interface_number, command_ep, status_ep, timeout)

    @staticmethod
    def _find_endpoints(device) -> tuple[int, int, int]:
        """
        Locate the bulk endpoints of the first interface.

        Returns:
            (interface number, command OUT address, status IN address)
        """
        config = device[0]
        interfaces = list(config.interfaces())
        if not interfaces:
            logger.error("No interfaces found")
            raise InvalidEndpointsError("Device has no interfaces")

        interface_number = interfaces[0].bInterfaceNumber
        command_ep = None
        status_ep = None

        # Scan every alternate setting of the first interface
        for interface in interfaces:
            if interface.bInterfaceNumber != interface_number:
                continue
            for endpoint in interface.endpoints():
                if usb.util.endpoint_type(endpoint.bmAttributes) != usb.util.ENDPOINT_TYPE_BULK:
                    continue
                address = endpoint.bEndpointAddress
                if usb.util.endpoint_direction(address) == usb.util.ENDPOINT_IN:
                    status_ep = address
                else:
                    command_ep = address

        if command_ep is None or status_ep is None:
            logger.error("Failed to locate command and status endpoints")
            raise InvalidEndpointsError("Bulk IN/OUT endpoints not found")

        logger.debug(f"Command endpoint 0x{command_ep:02X}, status endpoint 0x{status_ep:02X}")
        return interface_number, command_ep, status_ep

    def write(self, data: bytes, timeout: Optional[int] = None) -> None:
        """
        Send data to the command endpoint in one bulk transfer.

        Raises:
            TimeoutError: If the transfer times out or is only partly accepted
            UsbError: On any other USB failure
        """
        if timeout is None:
            timeout = self.timeout

        logger.debug(f"TX: {data.hex() if len(data) < 50 else data[:50].hex() + '...'}")

        try:
            written = self.device.write(self.command_endpoint, data, timeout)
        except usb.core.USBTimeoutError as e:
            raise TimeoutError(f"Write timed out after {timeout} ms") from e
        except usb.core.USBError as e:
            raise UsbError(f"Write failed: {e}") from e

        if written != len(data):
            raise TimeoutError(f"Short write: {written} of {len(data)} bytes")

    def read(self, timeout: Optional[int] = None) -> bytes:
        """
        Read one 32-byte status frame from the status endpoint.

        Raises:
            TimeoutError: If the transfer times out or returns a short frame
            UsbError: On any other USB failure
        """
        if timeout is None:
            timeout = self.timeout

        try:
            data = self.device.read(self.status_endpoint, STATUS_FRAME_SIZE, timeout)
        except usb.core.USBTimeoutError as e:
            raise TimeoutError(f"Read timed out after {timeout} ms") from e
        except usb.core.USBError as e:
            raise UsbError(f"Read failed: {e}") from e

        if len(data) != STATUS_FRAME_SIZE:
            raise TimeoutError(f"Short read: {len(data)} of {STATUS_FRAME_SIZE} bytes")

        frame = bytes(data)
        logger.debug(f"RX: {frame.hex()}")
        return frame

    def info(self) -> DeviceInfo:
        """
        Read manufacturer, product and serial strings.

        Raises:
            NoLanguagesError: If the device reports no string languages
            UsbError: On USB failure
        """
        try:
            languages = usb.util.get_langids(self.device)
            logger.debug(f"Languages: {languages}")

            if not languages:
                raise NoLanguagesError("Device reports no supported languages")

            language = languages[0]
            strings = [
                usb.util.get_string(self.device, index, language)
                for index in (
                    self.device.iManufacturer,
                    self.device.iProduct,
                    self.device.iSerialNumber,
                )
            ]
        except usb.core.USBError as e:
            raise UsbError(f"Failed to read string descriptors: {e}") from e

        manufacturer, product, serial = (s or "" for s in strings)
        return DeviceInfo(manufacturer=manufacturer, product=product, serial=serial)

    def close(self) -> None:
        """Release the interface and free the device handle."""
        if self._closed:
            return
        self._closed = True

        try:
            usb.util.release_interface(self.device, self.interface_number)
        except usb.core.USBError as e:
            logger.warning(f"Failed to release interface: {e}")
        finally:
            usb.util.dispose_resources(self.device)
        logger.debug("Connection closed")

    @property
    def is_connected(self) -> bool:
        """Check if the session is still open."""
        return not self._closed

    def __enter__(self) -> "UsbConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
