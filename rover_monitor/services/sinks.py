# rover_monitor/services/sinks.py

from __future__ import annotations

from typing import Any, Callable

from rover_monitor.models.composite import CompositeReading

Handler = Callable[[CompositeReading], Any]


class SinkChain:
    """Fans one reading out to every registered handler; one failing handler does not block the rest."""

    def __init__(self, log):
        self.log = log
        self._handlers: list[tuple[str, Handler]] = []

    def add(self, name: str, handler: Handler) -> "SinkChain":
        self._handlers.append((name, handler))
        return self

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self._handlers]

    def __call__(self, reading: CompositeReading) -> None:
        for name, handler in self._handlers:
            try:
                handler(reading)
            except Exception as exc:
                self.log.warning("Sink %s failed: %s", name, exc)
