from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, asdict, is_dataclass
from pathlib import Path
from typing import Any, Iterable


def _default_logger_name() -> logging.Logger:
    return logging.getLogger("rover")


class ConsoleLog:
    """Configure console logging for the application."""

    def __init__(self, level: str = "INFO", quiet: bool = False, debug_modules: Iterable[str] | None = None):
        self.level = level.upper()
        self.quiet = quiet
        self.debug_modules = list(debug_modules or [])

    def setup(self) -> logging.Logger:
        # Root logger handles all levels; handlers control visibility.
        root = logging.getLogger()
        root.handlers.clear()
        root.setLevel(logging.DEBUG)

        if not self.quiet:
            handler = logging.StreamHandler(sys.stdout)
            handler.setLevel(getattr(logging, self.level, logging.INFO))
            fmt = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
            handler.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))
            root.addHandler(handler)

        for name in self.debug_modules:
            logging.getLogger(name).setLevel(logging.DEBUG)

        return _default_logger_name()


@dataclass
class RunLogEntry:
    timestamp: str
    model: str | None
    serial_number: str | None
    panel: Any
    battery: Any
    historical: Any
    status: Any
    errors: dict[str, str] | None

    @classmethod
    def from_reading(cls, reading, identity=None) -> "RunLogEntry":
        def _value(slot):
            if slot is None or not slot.ok:
                return None
            return slot.value

        errors = {name: str(exc) or type(exc).__name__ for name, exc in reading.errors().items()}
        return cls(
            timestamp=reading.timestamp.isoformat(),
            model=identity.model if identity else None,
            serial_number=identity.serial_number if identity else None,
            panel=_value(reading.panel),
            battery=_value(reading.battery),
            historical=_value(reading.historical),
            status=_value(reading.status),
            errors=errors or None,
        )


def _to_jsonable(obj: Any) -> Any:
    """Best-effort conversion to JSON-safe structures."""
    if obj is None:
        return None
    if isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, BaseException):
        return str(obj) or type(obj).__name__
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    if is_dataclass(obj):
        return _to_jsonable(asdict(obj))
    if isinstance(obj, dict):
        return {k: _to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [_to_jsonable(x) for x in obj]
    return str(obj)


class StructuredLog:
    """Structured, machine-readable logging (one JSON line per poll cycle)."""

    def __init__(self, path: str | None, enabled: bool = False):
        self.enabled = enabled and bool(path)
        self.path = Path(path).expanduser() if path else None
        if self.enabled and self.path:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def write(self, entry: RunLogEntry) -> None:
        if not self.enabled or not self.path:
            return
        payload = _to_jsonable(asdict(entry))
        try:
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(payload, default=str) + "\n")
        except OSError as exc:  # pragma: no cover - best-effort logging
            logging.getLogger(__name__).debug("Structured log write skipped: %s", exc)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
