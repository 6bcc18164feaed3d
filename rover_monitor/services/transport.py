# rover_monitor/services/transport.py

from __future__ import annotations

import struct
from typing import Any, Callable, Optional

from pymodbus.client import ModbusSerialClient
from pymodbus.exceptions import ModbusException

from rover_monitor.errors import RoverConnectionError, TransportError
from rover_monitor.logging import get_logger

log = get_logger("rover.transport")


class RegisterTransport:
    """
    Thin pass-through to pymodbus for one RTU serial link.

    One request at a time, no retries; callers own sequencing.
    """

    def __init__(
        self,
        port: str,
        baudrate: int = 9600,
        modbus_id: int = 1,
        timeout_ms: int = 1000,
        client_factory: Optional[Callable[..., Any]] = None,
    ):
        self.port = port
        self.baudrate = baudrate
        self.modbus_id = modbus_id
        self.timeout_ms = timeout_ms
        self._client_factory = client_factory or ModbusSerialClient
        self._client = None

    @property
    def is_open(self) -> bool:
        return self._client is not None

    # ----------------------------------------------------------------------

    def open(self) -> None:
        client = self._client_factory(
            port=self.port,
            baudrate=self.baudrate,
            bytesize=8,
            parity="N",
            stopbits=1,
            timeout=self.timeout_ms / 1000,
            retries=0,
        )
        try:
            connected = client.connect()
        except (ModbusException, OSError) as exc:
            client.close()
            raise RoverConnectionError(f"cannot open {self.port}: {exc}", port=self.port) from exc
        if not connected:
            client.close()
            raise RoverConnectionError(f"cannot open {self.port}", port=self.port)

        self._client = client
        log.debug("Opened %s at %d baud (slave %d)", self.port, self.baudrate, self.modbus_id)

    def close(self) -> None:
        if self._client is None:
            return
        try:
            self._client.close()
        finally:
            self._client = None
            log.debug("Closed %s", self.port)

    # ----------------------------------------------------------------------

    def read_holding_registers(self, base: int, count: int) -> bytes:
        """Issue one FC3 request and return the raw big-endian payload."""
        if self._client is None:
            raise TransportError("transport is not open", base=base, count=count)

        try:
            response = self._client.read_holding_registers(base, count=count, device_id=self.modbus_id)
        except ModbusException as exc:
            raise TransportError(f"read 0x{base:04X}/{count} failed: {exc}", base=base, count=count) from exc
        except OSError as exc:
            raise TransportError(f"read 0x{base:04X}/{count} I/O error: {exc}", base=base, count=count) from exc

        if response is None or response.isError():
            raise TransportError(f"read 0x{base:04X}/{count} returned {response}", base=base, count=count)

        registers = list(getattr(response, "registers", None) or [])
        if len(registers) != count:
            raise TransportError(
                f"read 0x{base:04X}/{count} returned {len(registers)} registers",
                base=base,
                count=count,
            )
        return struct.pack(f">{count}H", *registers)
