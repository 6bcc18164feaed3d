# rover_monitor/services/register_decoder.py

from __future__ import annotations

import struct

from rover_monitor.errors import DecodeError
from rover_monitor.models.battery import BatteryReading
from rover_monitor.models.controller_status import ControllerStatus
from rover_monitor.models.historical import HistoricalReading
from rover_monitor.models.panel import PanelReading


# ============================================================================
# Register map (word addresses, word counts)
# ============================================================================

MODEL_BASE, MODEL_LENGTH = 0x000C, 16
SERIAL_BASE, SERIAL_LENGTH = 0x0018, 2
BATTERY_BASE, BATTERY_LENGTH = 0x0100, 4
PANEL_BASE, PANEL_LENGTH = 0x0107, 3
HISTORICAL_BASE, HISTORICAL_LENGTH = 0x010B, 10
STATUS_BASE, STATUS_LENGTH = 0x0120, 3

CHARGING_STATES = {
    0x00: "deactivated",
    0x01: "activated",
    0x02: "mppt",
    0x03: "equalizing",
    0x04: "boost",
    0x05: "floating",
    0x06: "current_limiting",
}

FAULT_FLAGS = {
    16: "battery_over_discharge",
    17: "battery_over_voltage",
    18: "battery_under_voltage_warning",
    19: "load_short_circuit",
    20: "load_overpower_or_over_current",
    21: "controller_temperature_too_high",
    22: "ambient_temperature_too_high",
    23: "pv_input_overpower",
    24: "pv_input_short_circuit",
}


# ============================================================================
# Primitive helpers
# ============================================================================

def _require(raw: bytes, size: int, what: str) -> None:
    if raw is None or len(raw) < size:
        got = 0 if raw is None else len(raw)
        raise DecodeError(f"{what}: expected {size} bytes, got {got}")


def int16_words(raw: bytes, count: int) -> tuple[int, ...]:
    """Big-endian signed 16-bit words; 0xFFFF decodes to -1."""
    _require(raw, 2 * count, "int16 block")
    return struct.unpack_from(f">{count}h", raw, 0)


def sign_magnitude_byte(value: int) -> int:
    """Bit 7 is the sign flag, bits 0..6 the magnitude (0x85 -> -5)."""
    magnitude = value & 0x7F
    return -magnitude if value & 0x80 else magnitude


# ============================================================================
# Block decoders
# ============================================================================

def decode_model(raw: bytes) -> str:
    _require(raw, 2 * MODEL_LENGTH, "product model")
    return bytes(raw[: 2 * MODEL_LENGTH]).decode("ascii", errors="replace")


def decode_serial_number(raw: bytes) -> str:
    _require(raw, 2 * SERIAL_LENGTH, "serial number")
    (serial,) = struct.unpack_from(">I", raw, 0)
    return f"{serial:08d}"


def decode_panel(raw: bytes) -> PanelReading:
    voltage, current, power = int16_words(raw, PANEL_LENGTH)
    return PanelReading(voltage=voltage, current=current, charging_power=power)


def decode_battery(raw: bytes) -> BatteryReading:
    _require(raw, 2 * BATTERY_LENGTH, "battery block")
    soc, voltage, current = int16_words(raw, 3)
    return BatteryReading(
        state_of_charge=soc,
        voltage=voltage,
        charging_current=current,
        controller_temperature=sign_magnitude_byte(raw[6]),
        battery_temperature=sign_magnitude_byte(raw[7]),
    )


def decode_historical(raw: bytes) -> HistoricalReading:
    words = int16_words(raw, HISTORICAL_LENGTH)
    return HistoricalReading(*words)


def decode_controller_status(raw: bytes) -> ControllerStatus:
    _require(raw, 2 * STATUS_LENGTH, "controller status")
    load, state, fault_bits = struct.unpack_from(">BBI", raw, 0)
    faults = [name for bit, name in sorted(FAULT_FLAGS.items()) if fault_bits & (1 << bit)]
    return ControllerStatus(
        charging_state=state,
        charging_state_name=CHARGING_STATES.get(state, f"unknown({state:#04x})"),
        load_status=load,
        fault_bits=fault_bits,
        faults=faults,
    )
