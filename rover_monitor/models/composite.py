# rover_monitor/models/composite.py

from __future__ import annotations

from dataclasses import asdict, dataclass, is_dataclass
from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from rover_monitor.models.battery import BatteryReading
from rover_monitor.models.controller_status import ControllerStatus
from rover_monitor.models.historical import HistoricalReading
from rover_monitor.models.panel import PanelReading

T = TypeVar("T")


@dataclass(frozen=True)
class SlotResult(Generic[T]):
    """Outcome of one block read: a decoded value or the error, never both."""

    value: Optional[T] = None
    error: Optional[BaseException] = None

    def __post_init__(self):
        if (self.value is None) == (self.error is None):
            raise ValueError("SlotResult needs exactly one of value or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "SlotResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "SlotResult[T]":
        return cls(error=error)

    def as_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"value": None, "error": str(self.error) or type(self.error).__name__}
        value = asdict(self.value) if is_dataclass(self.value) else self.value
        return {"value": value, "error": None}


@dataclass(frozen=True)
class CompositeReading:
    timestamp: datetime
    panel: SlotResult[PanelReading]
    battery: SlotResult[BatteryReading]
    historical: SlotResult[HistoricalReading]
    status: Optional[SlotResult[ControllerStatus]] = None

    def slots(self) -> dict[str, SlotResult]:
        slots: dict[str, SlotResult] = {
            "panel": self.panel,
            "battery": self.battery,
            "historical": self.historical,
        }
        if self.status is not None:
            slots["status"] = self.status
        return slots

    def errors(self) -> dict[str, BaseException]:
        return {name: slot.error for name, slot in self.slots().items() if slot.error is not None}

    @property
    def all_ok(self) -> bool:
        return not self.errors()

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"timestamp": self.timestamp.isoformat()}
        for name, slot in self.slots().items():
            payload[name] = slot.as_dict()
        return payload
