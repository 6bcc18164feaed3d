# rover_monitor/services/rover_client.py

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Optional, TypeVar

from rover_monitor.config import ConnectionConfig
from rover_monitor.errors import RoverConnectionError, RoverError
from rover_monitor.models.battery import BatteryReading
from rover_monitor.models.controller_status import ControllerStatus
from rover_monitor.models.historical import HistoricalReading
from rover_monitor.models.panel import PanelReading
from rover_monitor.services import register_decoder as regs
from rover_monitor.services.transport import RegisterTransport

T = TypeVar("T")

DEFAULT_SUPPORTED_MODEL = "ML2420N"


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


def is_supported_model(model: Optional[str], supported: str = DEFAULT_SUPPORTED_MODEL) -> bool:
    """Substring match; the controller pads the model with leading spaces."""
    if not model:
        return False
    return supported in model


# ============================================================================
# Rover client
# ============================================================================

class RoverClient:
    """
    Renogy Rover charge controller over Modbus RTU.

    Owns the single serial connection for its lifetime. Reads are synchronous
    and must not be issued concurrently; errors from the transport or the
    decoder are raised to the caller untouched, without retry.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        log: Any,
        transport_factory: Optional[Callable[..., RegisterTransport]] = None,
    ):
        self.config = config.validate()
        self.log = log
        self._transport_factory = transport_factory or RegisterTransport
        self._transport: Optional[RegisterTransport] = None
        self.state = ConnectionState.DISCONNECTED

    @property
    def transport(self) -> Optional[RegisterTransport]:
        """The open transport, for custom register reads."""
        return self._transport

    # ----------------------------------------------------------------------

    def connect(self) -> None:
        if self.state is ConnectionState.CONNECTED:
            self.log.debug("connect() called while already connected to %s", self.config.port)
            return

        self.state = ConnectionState.CONNECTING
        transport = self._transport_factory(
            port=self.config.port,
            baudrate=self.config.baudrate,
            modbus_id=self.config.modbus_id,
            timeout_ms=self.config.timeout_ms,
        )
        try:
            transport.open()
        except RoverConnectionError:
            self.state = ConnectionState.DISCONNECTED
            raise
        except OSError as exc:
            self.state = ConnectionState.DISCONNECTED
            raise RoverConnectionError(str(exc), port=self.config.port) from exc

        self._transport = transport
        self.state = ConnectionState.CONNECTED
        self.log.info("Connected to %s (baud=%d, id=%d)", self.config.port, self.config.baudrate, self.config.modbus_id)

    def close(self) -> None:
        if self._transport is not None:
            try:
                self._transport.close()
            finally:
                self._transport = None
        self.state = ConnectionState.DISCONNECTED

    # ----------------------------------------------------------------------

    def _read_block(self, what: str, base: int, length: int, decode: Callable[[bytes], T]) -> T:
        """Read `length` registers at `base` and decode them."""
        if self._transport is None or self.state is not ConnectionState.CONNECTED:
            raise RoverConnectionError(f"not connected; cannot read {what}", port=self.config.port)

        try:
            raw = self._transport.read_holding_registers(base, length)
            if self.config.trace:
                self.log.debug("%s @0x%04X: %s", what, base, raw.hex(" "))
            return decode(raw)
        except RoverError as exc:
            if self.config.trace_error:
                self.log.warning("error reading %s: %s", what, exc)
            raise

    # ----------------------------------------------------------------------
    # Identification
    # ----------------------------------------------------------------------

    def get_product_model(self) -> str:
        model = self._read_block("product model", regs.MODEL_BASE, regs.MODEL_LENGTH, regs.decode_model)
        if self.config.trace:
            self.log.debug("model=%r", model)
        return model

    def get_serial_number(self) -> str:
        return self._read_block("serial number", regs.SERIAL_BASE, regs.SERIAL_LENGTH, regs.decode_serial_number)

    # ----------------------------------------------------------------------
    # Telemetry
    # ----------------------------------------------------------------------

    def get_panel_state(self) -> PanelReading:
        return self._read_block("panel state", regs.PANEL_BASE, regs.PANEL_LENGTH, regs.decode_panel)

    def get_battery_state(self) -> BatteryReading:
        return self._read_block("battery state", regs.BATTERY_BASE, regs.BATTERY_LENGTH, regs.decode_battery)

    def get_historical_parameters(self) -> HistoricalReading:
        return self._read_block(
            "historical data",
            regs.HISTORICAL_BASE,
            regs.HISTORICAL_LENGTH,
            regs.decode_historical,
        )

    def get_controller_status(self) -> ControllerStatus:
        return self._read_block(
            "controller status",
            regs.STATUS_BASE,
            regs.STATUS_LENGTH,
            regs.decode_controller_status,
        )
