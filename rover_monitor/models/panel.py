# rover_monitor/models/panel.py
from dataclasses import dataclass


@dataclass(frozen=True)
class PanelReading:
    voltage: int          # raw, x0.1 V
    current: int          # raw, x0.01 A
    charging_power: int   # W

    @property
    def voltage_v(self) -> float:
        return self.voltage / 10

    @property
    def current_a(self) -> float:
        return self.current / 100
