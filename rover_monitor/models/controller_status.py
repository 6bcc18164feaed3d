# rover_monitor/models/controller_status.py
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ControllerStatus:
    charging_state: int
    charging_state_name: str
    load_status: int
    fault_bits: int
    faults: list[str] = field(default_factory=list)
