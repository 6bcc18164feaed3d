# rover_monitor/models/device.py
from dataclasses import dataclass


@dataclass
class DeviceIdentity:
    model: str | None          # untrimmed, as reported by the controller
    serial_number: str | None
    supported: bool
