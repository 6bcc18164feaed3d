# rover_monitor/models/historical.py
from dataclasses import dataclass, fields


@dataclass(frozen=True)
class HistoricalReading:
    """Daily extrema and accumulators, 0x010B..0x0114 in address order."""

    battery_voltage_min_for_day: int     # x0.1 V
    battery_voltage_max_for_day: int     # x0.1 V
    max_charge_current_for_day: int      # x0.01 A
    max_discharge_current_for_day: int   # x0.01 A
    max_charge_power_for_day: int        # W
    max_discharge_power_for_day: int     # W
    charging_amp_hours_for_day: int      # Ah
    discharging_amp_hours_for_day: int   # Ah
    power_generation_for_day: int
    power_consumption_for_day: int

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]
