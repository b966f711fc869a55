"""
P-touch Raster Command Definitions.

This module provides the command frames of the Brother raster protocol.
`Commands` builds frames, `CommandSender` sends each one as a single bulk
OUT transfer. Only the status request is answered by the printer; its
32-byte reply is read separately from the status endpoint.
"""

import struct
from dataclasses import dataclass
from typing import Optional

from .device import (
    AdvancedMode,
    CompressionMode,
    MediaKind,
    Mode,
    PrintInfoFlags,
    VariousMode,
)

ESC = 0x1B

# Length of the invalidate command (clears a half-received job)
INVALIDATE_LENGTH = 100


@dataclass
class PrintInfo:
    """
    Print information (ESC i z).

    Fields left as None are sent as zero and flagged as not specified.
    """
    kind: Optional[MediaKind] = None
    width: Optional[int] = None  # mm
    length: Optional[int] = None  # mm, 0 for continuous tape
    raster_number: int = 0  # number of raster lines in the page
    recover: bool = True
    quality: bool = False
    starting_page: bool = True

    @property
    def flags(self) -> PrintInfoFlags:
        """Valid-field flags for this print information."""
        flags = PrintInfoFlags(0)
        if self.kind is not None:
            flags |= PrintInfoFlags.KIND
        if self.width is not None:
            flags |= PrintInfoFlags.WIDTH
        if self.length is not None:
            flags |= PrintInfoFlags.LENGTH
        if self.quality:
            flags |= PrintInfoFlags.QUALITY
        if self.recover:
            flags |= PrintInfoFlags.RECOVER
        return flags

    def encode(self) -> bytes:
        """Encode the ten parameter bytes n1..n10."""
        return struct.pack(
            "<BBBBIBB",
            int(self.flags),
            int(self.kind or 0),
            self.width or 0,
            self.length or 0,
            self.raster_number,
            0 if self.starting_page else 1,
            0,
        )


class Commands:
    """Command frame builders for P-touch raster printing."""

    @staticmethod
    def invalidate() -> bytes:
        """Flush any partly received command with a run of zero bytes."""
        return bytes(INVALIDATE_LENGTH)

    @staticmethod
    def initialize() -> bytes:
        """Initialize (ESC @): clear the print buffer and reset settings."""
        return bytes([ESC, 0x40])

    @staticmethod
    def status_request() -> bytes:
        """Request a status frame (ESC i S)."""
        return bytes([ESC, 0x69, 0x53])

    @staticmethod
    def switch_mode(mode: Mode) -> bytes:
        """Switch command mode (ESC i a)."""
        return bytes([ESC, 0x69, 0x61, int(mode)])

    @staticmethod
    def set_status_notify(enabled: bool) -> bytes:
        """
        Enable or disable automatic status notification (ESC i !).

        The printer expects 0 to enable and 1 to disable.
        """
        return bytes([ESC, 0x69, 0x21, 0x00 if enabled else 0x01])

    @staticmethod
    def set_print_info(info: PrintInfo) -> bytes:
        """Specify media and page information (ESC i z)."""
        return bytes([ESC, 0x69, 0x7A]) + info.encode()

    @staticmethod
    def set_various_mode(mode: VariousMode) -> bytes:
        """Set auto cut / mirror printing (ESC i M)."""
        return bytes([ESC, 0x69, 0x4D, int(mode)])

    @staticmethod
    def set_page_number(count: int) -> bytes:
        """
        Cut every `count` labels (ESC i A).

        Not supported by the PT-P710BT.
        """
        if not 1 <= count <= 99:
            raise ValueError(f"Page count must be 1-99, got {count}")
        return bytes([ESC, 0x69, 0x41, count])

    @staticmethod
    def set_advanced_mode(mode: AdvancedMode) -> bytes:
        """Set half cut / chain printing / resolution (ESC i K)."""
        return bytes([ESC, 0x69, 0x4B, int(mode)])

    @staticmethod
    def set_margin(amount: int) -> bytes:
        """
        Specify the feed margin in dots (ESC i d).

        Args:
            amount: Margin as an unsigned 16-bit value
        """
        return bytes([ESC, 0x69, 0x64]) + struct.pack("<H", amount)

    @staticmethod
    def set_compression_mode(mode: CompressionMode) -> bytes:
        """Select raster compression (M)."""
        return bytes([0x4D, int(mode)])

    @staticmethod
    def raster_transfer(data: bytes) -> bytes:
        """
        Transfer one raster line (G).

        Args:
            data: Raster line, compressed if TIFF mode is selected
        """
        return bytes([0x47]) + struct.pack("<H", len(data)) + bytes(data)

    @staticmethod
    def raster_zero() -> bytes:
        """Transfer an empty raster line (Z)."""
        return bytes([0x5A])

    @staticmethod
    def print_page() -> bytes:
        """Print without feeding (FF)."""
        return bytes([0x0C])

    @staticmethod
    def print_and_feed() -> bytes:
        """Print and feed the last page (Ctrl-Z)."""
        return bytes([0x1A])


class CommandSender:
    """Sends command frames over an open connection."""

    def __init__(self, connection):
        self.connection = connection

    def send(self, frame: bytes) -> None:
        self.connection.write(frame)

    def invalidate(self) -> None:
        self.send(Commands.invalidate())

    def initialize(self) -> None:
        self.send(Commands.initialize())

    def status_request(self) -> None:
        self.send(Commands.status_request())

    def switch_mode(self, mode: Mode) -> None:
        self.send(Commands.switch_mode(mode))

    def set_status_notify(self, enabled: bool) -> None:
        self.send(Commands.set_status_notify(enabled))

    def set_print_info(self, info: PrintInfo) -> None:
        self.send(Commands.set_print_info(info))

    def set_various_mode(self, mode: VariousMode) -> None:
        self.send(Commands.set_various_mode(mode))

    def set_page_number(self, count: int) -> None:
        self.send(Commands.set_page_number(count))

    def set_advanced_mode(self, mode: AdvancedMode) -> None:
        self.send(Commands.set_advanced_mode(mode))

    def set_margin(self, amount: int) -> None:
        self.send(Commands.set_margin(amount))

    def set_compression_mode(self, mode: CompressionMode) -> None:
        self.send(Commands.set_compression_mode(mode))

    def raster_transfer(self, data: bytes) -> None:
        self.send(Commands.raster_transfer(data))

    def raster_zero(self) -> None:
        self.send(Commands.raster_zero())

    def print_page(self) -> None:
        self.send(Commands.print_page())

    def print_and_feed(self) -> None:
        self.send(Commands.print_and_feed())
