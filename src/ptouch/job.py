"""
Print Job State Machine.

A print job moves through these states:

    IDLE -> INITIALIZED -> CONFIGURED -> TRANSFERRING -> PRINTING
                                                          |
                                 COMPLETED / FAILED / TIMED_OUT

IDLE -> INITIALIZED happens when the printer session is opened (the
invalidate/initialize handshake). Each later transition is a method, so
it can be driven and checked one step at a time.
"""

import logging
import time
from enum import Enum
from typing import Iterable, Optional

from .commands import CommandSender, PrintInfo
from .device import AdvancedMode, CompressionMode, DeviceStatus, Mode, VariousMode
from .errors import DeviceError, PrintError, TimeoutError, UsbError
from .packbits import RASTER_LINE_BYTES, compress
from .responses import Status

logger = logging.getLogger(__name__)

# Completion polling: number of status reads and delay between them
MAX_POLL_ATTEMPTS = 11
POLL_INTERVAL = 1.0

# Feed margin in dots
DEFAULT_MARGIN = 14


class PrintState(Enum):
    """States of a print job."""
    IDLE = "idle"
    INITIALIZED = "initialized"
    CONFIGURED = "configured"
    TRANSFERRING = "transferring"
    PRINTING = "printing"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


TERMINAL_STATES = (PrintState.COMPLETED, PrintState.FAILED, PrintState.TIMED_OUT)


class PrintJob:
    """
    One raster print on an open printer session.

    The job borrows the session for its lifetime and keeps no state
    beyond it once finished.
    """

    def __init__(
        self,
        commands: CommandSender,
        connection,
        poll_attempts: int = MAX_POLL_ATTEMPTS,
        poll_interval: float = POLL_INTERVAL,
        margin: int = DEFAULT_MARGIN,
    ):
        self.commands = commands
        self.connection = connection
        self.poll_attempts = poll_attempts
        self.poll_interval = poll_interval
        self.margin = margin
        self.state = PrintState.INITIALIZED
        self.last_status: Optional[Status] = None
        self.attempts = 0

    def _expect(self, state: PrintState) -> None:
        if self.state != state:
            raise PrintError(
                f"Print job is {self.state.value}, expected {state.value}"
            )

    def _enter(self, state: PrintState) -> None:
        logger.debug(f"Print job: {self.state.value} -> {state.value}")
        self.state = state

    def configure(self, info: PrintInfo) -> None:
        """
        Send the print settings, strictly in protocol order.

        None of these commands is acknowledged; errors show up while
        polling for completion.
        """
        self._expect(PrintState.INITIALIZED)

        self.commands.switch_mode(Mode.RASTER)
        self.commands.set_status_notify(True)
        self.commands.set_print_info(info)
        self.commands.set_various_mode(VariousMode.AUTO_CUT)
        self.commands.set_advanced_mode(AdvancedMode.NO_CHAIN)
        self.commands.set_margin(self.margin)
        self.commands.set_compression_mode(CompressionMode.TIFF)

        self._enter(PrintState.CONFIGURED)

    def transfer(self, lines: Iterable[bytes]) -> None:
        """
        Compress and send raster lines in order.

        Every line is checked before the first one is sent, so a bad page
        leaves the job CONFIGURED and the printer buffer empty.

        Raises:
            ValueError: If a line is not RASTER_LINE_BYTES long
        """
        self._expect(PrintState.CONFIGURED)

        lines = list(lines)
        for index, line in enumerate(lines):
            if len(line) != RASTER_LINE_BYTES:
                raise ValueError(
                    f"Raster line {index} is {len(line)} bytes, "
                    f"expected {RASTER_LINE_BYTES}"
                )

        self._enter(PrintState.TRANSFERRING)
        for line in lines:
            self.commands.raster_transfer(compress(line))

        logger.debug(f"Sent {len(lines)} raster lines")

    def start(self) -> None:
        """Trigger printing of the transferred page."""
        self._expect(PrintState.TRANSFERRING)
        self.commands.print_and_feed()
        self._enter(PrintState.PRINTING)

    def poll(self) -> PrintState:
        """
        Request and read one status frame, and update the state from it.

        A failed read leaves the job printing.

        Returns:
            The state after this poll
        """
        self._expect(PrintState.PRINTING)
        self.attempts += 1

        self.commands.status_request()
        try:
            frame = self.connection.read()
        except (TimeoutError, UsbError) as e:
            logger.debug(f"Status read failed (attempt {self.attempts}): {e}")
            return self.state

        status = Status.parse(frame)
        self.last_status = status

        if status.has_error:
            logger.error(f"Print error: {status.error1!r} {status.error2!r}")
            self._enter(PrintState.FAILED)
        elif status.is_completed:
            logger.debug("Print completed")
            self._enter(PrintState.COMPLETED)
        elif status.status_type == DeviceStatus.PHASE_CHANGE:
            logger.debug("Started printing")

        return self.state

    def wait(self) -> None:
        """
        Poll until the print completes.

        Raises:
            DeviceError: If the printer reports an error
            TimeoutError: If no terminal state is reached within poll_attempts
        """
        if self.state not in TERMINAL_STATES:
            self._expect(PrintState.PRINTING)

        while self.state == PrintState.PRINTING:
            self.poll()

            if self.state == PrintState.PRINTING:
                if self.attempts >= self.poll_attempts:
                    self._enter(PrintState.TIMED_OUT)
                    break
                time.sleep(self.poll_interval)

        if self.state == PrintState.FAILED:
            raise DeviceError(self.last_status.error1, self.last_status.error2)
        if self.state == PrintState.TIMED_OUT:
            logger.debug("Print timeout")
            raise TimeoutError(
                f"Print did not complete after {self.attempts} status polls"
            )

    def run(self, lines: Iterable[bytes], info: PrintInfo) -> None:
        """Configure, transfer, print and wait for completion."""
        self.configure(info)
        self.transfer(lines)
        self.start()
        self.wait()

    @property
    def is_finished(self) -> bool:
        return self.state in TERMINAL_STATES
