# rover_monitor/services/poller.py

from __future__ import annotations

import math
import threading
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional

from rover_monitor.errors import RoverConnectionError, RoverError
from rover_monitor.models.composite import CompositeReading, SlotResult
from rover_monitor.models.device import DeviceIdentity
from rover_monitor.services.rover_client import DEFAULT_SUPPORTED_MODEL, RoverClient, is_supported_model

Sink = Callable[[CompositeReading], None]


class PollerState(str, Enum):
    INIT = "init"
    CONNECTING = "connecting"
    IDENTIFYING = "identifying"
    POLLING = "polling"
    STOPPED = "stopped"
    FATAL = "fatal"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Poller:
    """
    Connect once, identify once, then read every block on a fixed interval.

    Cycles are serialized: the next cycle never starts before the previous one
    has emitted its reading, and ticks missed by an overrunning cycle are
    skipped rather than queued.
    """

    def __init__(
        self,
        client: RoverClient,
        log: Any,
        *,
        interval: float = 60,
        supported_model: str = DEFAULT_SUPPORTED_MODEL,
        include_status: bool = False,
        clock: Callable[[], float] = time.monotonic,
        sleep: Optional[Callable[[float], Any]] = None,
        now: Callable[[], datetime] = _utcnow,
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.client = client
        self.log = log
        self.interval = interval
        self.supported_model = supported_model
        self.include_status = include_status
        self.clock = clock
        self.now = now
        self._stop_event = threading.Event()
        self._sleep = sleep or self._stop_event.wait
        self.state = PollerState.INIT
        self.identity: Optional[DeviceIdentity] = None

    # ----------------------------------------------------------------------

    def start(self) -> DeviceIdentity:
        """Connect and identify. A connection failure is fatal and re-raised."""
        self.state = PollerState.CONNECTING
        try:
            self.client.connect()
        except RoverConnectionError as exc:
            self.state = PollerState.FATAL
            self.log.error("Connection to %s failed: %s", self.client.config.port, exc)
            raise

        self.state = PollerState.IDENTIFYING
        model = self._identify("product model", self.client.get_product_model)
        serial = self._identify("serial number", self.client.get_serial_number)

        supported = is_supported_model(model, self.supported_model)
        if model is None:
            self.log.warning("Product model unavailable; polling anyway")
        elif supported:
            self.log.info("Model %s supported by this application identified", model.strip())
        else:
            self.log.warning("Model not tested: %r", model)

        self.identity = DeviceIdentity(model=model, serial_number=serial, supported=supported)
        self.state = PollerState.POLLING
        return self.identity

    def _identify(self, what: str, read: Callable[[], str]) -> Optional[str]:
        try:
            return read()
        except RoverError as exc:
            self.log.warning("Error reading %s: %s", what, exc)
            return None

    # ----------------------------------------------------------------------

    def _capture(self, read: Callable[[], Any]) -> SlotResult:
        try:
            return SlotResult.success(read())
        except RoverError as exc:
            return SlotResult.failure(exc)

    def poll_once(self) -> CompositeReading:
        """Read panel, battery and historical blocks in order; never raises for block errors."""
        timestamp = self.now()
        panel = self._capture(self.client.get_panel_state)
        battery = self._capture(self.client.get_battery_state)
        historical = self._capture(self.client.get_historical_parameters)
        status = self._capture(self.client.get_controller_status) if self.include_status else None

        reading = CompositeReading(
            timestamp=timestamp,
            panel=panel,
            battery=battery,
            historical=historical,
            status=status,
        )
        for name, exc in reading.errors().items():
            self.log.warning("Error getting %s reading: %s", name, exc)
        return reading

    # ----------------------------------------------------------------------

    def stop(self) -> None:
        self._stop_event.set()

    @property
    def stopping(self) -> bool:
        return self._stop_event.is_set()

    def _emit(self, sink: Sink, reading: CompositeReading) -> None:
        try:
            sink(reading)
        except Exception as exc:
            self.log.error("Reading sink failed: %s", exc, exc_info=True)

    def run(self, sink: Sink, max_cycles: Optional[int] = None) -> int:
        """
        Run cycles until stop() or max_cycles. The first cycle fires
        immediately; later ones on interval boundaries measured from the
        first cycle's start. Returns the number of readings emitted.
        """
        if self.state is not PollerState.POLLING:
            raise RuntimeError(f"poller not started (state={self.state.value})")

        cycles = 0
        next_start = self.clock()
        while not self.stopping:
            self._emit(sink, self.poll_once())
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break

            next_start += self.interval
            now = self.clock()
            if now > next_start:
                missed = math.ceil((now - next_start) / self.interval)
                self.log.warning(
                    "Poll cycle overran the %ss interval; skipping %d tick(s)",
                    self.interval,
                    missed,
                )
                next_start += missed * self.interval

            if self.stopping:
                break
            self._sleep(max(0.0, next_start - now))

        self.state = PollerState.STOPPED
        return cycles
