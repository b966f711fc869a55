"""
Pytest configuration for P-touch printer tests.

Provides fake PyUSB objects, fixtures and command-line options for
hardware tests.
"""

from unittest.mock import MagicMock

import pytest
import usb.core

from ptouch import Filter, PTouchDevice

BULK = 0x02
INTERRUPT = 0x03


def pytest_addoption(parser):
    """Add command-line options for hardware tests."""
    parser.addoption(
        "--ptouch-device",
        action="store",
        default=None,
        help="Device kind of a connected printer for hardware tests (e.g. pt-p710bt)",
    )
    parser.addoption(
        "--ptouch-index",
        action="store",
        type=int,
        default=0,
        help="Index of the printer if several are connected",
    )


@pytest.fixture
def printer_filter(request):
    """Get the printer selector from the command line."""
    name = request.config.getoption("--ptouch-device")
    if name is None:
        pytest.skip("No printer selected (use --ptouch-device=pt-p710bt)")
    return Filter(
        device=PTouchDevice.from_name(name),
        index=request.config.getoption("--ptouch-index"),
    )


# --- Fake PyUSB descriptors ---


class FakeEndpoint:
    def __init__(self, address, attributes=BULK):
        self.bEndpointAddress = address
        self.bmAttributes = attributes


class FakeInterface:
    def __init__(self, number, endpoints, alternate=0):
        self.bInterfaceNumber = number
        self.bAlternateSetting = alternate
        self._endpoints = endpoints

    def endpoints(self):
        return tuple(self._endpoints)


class FakeConfiguration:
    def __init__(self, interfaces):
        self._interfaces = interfaces

    def interfaces(self):
        return tuple(self._interfaces)


class FakeDevice:
    """Stands in for usb.core.Device, recording transfers."""

    def __init__(self, interfaces=None, serial="000F1Z401370", kernel_driver=False):
        if interfaces is None:
            interfaces = [FakeInterface(0, [FakeEndpoint(0x81), FakeEndpoint(0x02)])]
        self.configuration = FakeConfiguration(interfaces)
        self.kernel_driver = kernel_driver
        self.serial = serial
        self.iManufacturer = 1
        self.iProduct = 2
        self.iSerialNumber = 3
        self.written = []
        self.responses = []
        self.detached = []
        self.reset_count = 0
        self.short_write = False

    def __getitem__(self, index):
        assert index == 0
        return self.configuration

    def reset(self):
        self.reset_count += 1

    def is_kernel_driver_active(self, interface):
        return self.kernel_driver

    def detach_kernel_driver(self, interface):
        self.detached.append(interface)
        self.kernel_driver = False

    def write(self, endpoint, data, timeout):
        self.written.append(bytes(data))
        if self.short_write:
            return len(data) - 1
        return len(data)

    def read(self, endpoint, size, timeout):
        if not self.responses:
            raise usb.core.USBTimeoutError("Operation timed out")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeContext:
    """Stands in for UsbContext with a fixed device list."""

    def __init__(self, devices):
        self._devices = devices
        self.queries = []

    def devices(self, vendor_id, product_id):
        self.queries.append((vendor_id, product_id))
        return list(self._devices)


def status_frame(status_type=0x00, error1=0x00, error2=0x00, media_width=12,
                 media_kind=0x01, phase=0x00, tape_colour=0x01, text_colour=0x08):
    """Build a 32-byte status frame."""
    frame = bytearray(32)
    frame[0] = 0x80
    frame[1] = 0x20
    frame[2] = 0x42
    frame[3] = 0x30
    frame[4] = 0x76
    frame[5] = 0x30
    frame[8] = error1
    frame[9] = error2
    frame[10] = media_width
    frame[11] = media_kind
    frame[18] = status_type
    frame[19] = phase
    frame[24] = tape_colour
    frame[25] = text_colour
    return bytes(frame)


@pytest.fixture
def usb_util(monkeypatch):
    """Replace the PyUSB helpers that need a real backend."""
    fake = MagicMock()
    monkeypatch.setattr("ptouch.connection.usb.util.claim_interface", fake.claim_interface)
    monkeypatch.setattr("ptouch.connection.usb.util.release_interface", fake.release_interface)
    monkeypatch.setattr("ptouch.connection.usb.util.dispose_resources", fake.dispose_resources)
    monkeypatch.setattr("ptouch.connection.usb.util.get_langids", fake.get_langids)
    monkeypatch.setattr("ptouch.connection.usb.util.get_string", fake.get_string)
    fake.get_langids.return_value = (0x0409,)
    fake.get_string.side_effect = lambda dev, index, lang: {
        1: "Brother",
        2: "PT-P710BT",
        3: dev.serial,
    }.get(index)
    return fake


@pytest.fixture
def fake_device():
    """A printer with one bulk IN (0x81) and one bulk OUT (0x02) endpoint."""
    return FakeDevice()


@pytest.fixture
def fake_context(fake_device):
    """A USB context that finds exactly fake_device."""
    return FakeContext([fake_device])
