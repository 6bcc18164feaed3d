# rover_monitor/services/output_formatter.py

from __future__ import annotations

import json
from typing import Optional

from rover_monitor.models.composite import CompositeReading, SlotResult
from rover_monitor.models.device import DeviceIdentity


def reading_to_dict(reading: CompositeReading, identity: Optional[DeviceIdentity] = None) -> dict:
    payload = reading.as_dict()
    if identity is not None:
        payload["device"] = {
            "model": identity.model.strip() if identity.model else None,
            "serial_number": identity.serial_number,
            "supported": identity.supported,
        }
    return payload


def emit_json(
    reading: CompositeReading,
    identity: Optional[DeviceIdentity] = None,
    *,
    compact: bool = False,
) -> None:
    payload = reading_to_dict(reading, identity)
    if compact:
        print(json.dumps(payload, separators=(",", ":")))
    else:
        print(json.dumps(payload, indent=2))


def _error_line(name: str, slot: SlotResult) -> str:
    return f"[{name}] ERROR: {slot.error}"


def format_human(reading: CompositeReading) -> list[str]:
    lines = [f"{reading.timestamp.isoformat()}:"]

    panel = reading.panel
    if not panel.ok:
        lines.append(_error_line("panel", panel))
    else:
        p = panel.value
        lines.append(
            f"[panel] V={p.voltage_v:.1f}V  I={p.current_a:.2f}A  P={p.charging_power}W"
        )

    battery = reading.battery
    if not battery.ok:
        lines.append(_error_line("battery", battery))
    else:
        b = battery.value
        lines.append(
            f"[battery] SOC={b.state_of_charge}%  V={b.voltage_v:.1f}V  "
            f"I={b.charging_current_a:.2f}A  "
            f"controller={b.controller_temperature}C  battery={b.battery_temperature}C"
        )

    historical = reading.historical
    if not historical.ok:
        lines.append(_error_line("historical", historical))
    else:
        h = historical.value
        lines.append(
            f"[historical] Vmin={h.battery_voltage_min_for_day / 10:.1f}V  "
            f"Vmax={h.battery_voltage_max_for_day / 10:.1f}V  "
            f"Ichg={h.max_charge_current_for_day / 100:.2f}A  "
            f"Idis={h.max_discharge_current_for_day / 100:.2f}A  "
            f"Pchg={h.max_charge_power_for_day}W  Pdis={h.max_discharge_power_for_day}W  "
            f"Ah+={h.charging_amp_hours_for_day}  Ah-={h.discharging_amp_hours_for_day}  "
            f"gen={h.power_generation_for_day}  use={h.power_consumption_for_day}"
        )

    status = reading.status
    if status is not None:
        if not status.ok:
            lines.append(_error_line("status", status))
        else:
            s = status.value
            faults = ",".join(s.faults) if s.faults else "none"
            lines.append(f"[status] charging={s.charging_state_name}  load=0x{s.load_status:02X}  faults={faults}")

    return lines


def emit_human(reading: CompositeReading) -> None:
    for line in format_human(reading):
        print(line)


def emit_identity(identity: DeviceIdentity, *, as_json: bool = False) -> None:
    model = identity.model.strip() if identity.model else None
    if as_json:
        print(json.dumps({"model": model, "serial_number": identity.serial_number, "supported": identity.supported}, indent=2))
        return
    support_txt = "supported" if identity.supported else "not tested"
    print(f"Model: {model or 'unknown'}  serial={identity.serial_number or 'unknown'}  ({support_txt})")
