# tests/fake_transport.py

import struct

from rover_monitor.errors import RoverConnectionError, TransportError


def words(*values: int) -> bytes:
    """Pack unsigned 16-bit register values the way they arrive on the wire."""
    return struct.pack(f">{len(values)}H", *values)


MODEL_RAW = b"     ML2420N".ljust(32, b" ")
SERIAL_RAW = words(0x0001, 0x0002)
PANEL_RAW = words(182, 350, 63)
BATTERY_RAW = bytes([0x00, 0x32, 0x00, 0x64, 0x00, 0x0A, 0x19, 0x0F])
HISTORICAL_RAW = words(120, 138, 512, 0, 130, 0, 42, 3, 560, 0xFFFF)
STATUS_RAW = words(0x0002, 0x0001, 0x0004)


class FakeTransport:
    """
    Stand-in for RegisterTransport that serves canned payloads by base address.

    A payload may be an Exception instance, which is raised instead.
    """

    def __init__(self, blocks=None, fail_open=False, **kwargs):
        self.blocks = dict(blocks if blocks is not None else default_blocks())
        self.fail_open = fail_open
        self.kwargs = kwargs
        self.calls = []
        self.opened = False
        self.open_count = 0
        self.closed = False

    def open(self):
        self.open_count += 1
        if self.fail_open:
            raise RoverConnectionError("cannot open fake port", port=self.kwargs.get("port"))
        self.opened = True

    def close(self):
        self.closed = True

    def read_holding_registers(self, base, count):
        self.calls.append((base, count))
        payload = self.blocks.get(base)
        if payload is None:
            raise TransportError(f"no response for 0x{base:04X}", base=base, count=count)
        if isinstance(payload, Exception):
            raise payload
        return payload


def default_blocks():
    return {
        0x000C: MODEL_RAW,
        0x0018: SERIAL_RAW,
        0x0107: PANEL_RAW,
        0x0100: BATTERY_RAW,
        0x010B: HISTORICAL_RAW,
        0x0120: STATUS_RAW,
    }


def factory_for(transport):
    """Return a transport_factory that records its kwargs on the given fake."""

    def _factory(**kwargs):
        transport.kwargs = kwargs
        return transport

    return _factory
