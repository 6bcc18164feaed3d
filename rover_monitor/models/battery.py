# rover_monitor/models/battery.py
from dataclasses import dataclass


@dataclass(frozen=True)
class BatteryReading:
    state_of_charge: int         # percent
    voltage: int                 # raw, x0.1 V
    charging_current: int        # raw, x0.01 A
    controller_temperature: int  # degC, sign-magnitude byte
    battery_temperature: int     # degC, sign-magnitude byte

    @property
    def voltage_v(self) -> float:
        return self.voltage / 10

    @property
    def charging_current_a(self) -> float:
        return self.charging_current / 100
