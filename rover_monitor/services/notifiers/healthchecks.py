# rover_monitor/services/notifiers/healthchecks.py

from __future__ import annotations

import urllib.error
import urllib.parse
import urllib.request

from rover_monitor.config import HealthchecksConfig
from rover_monitor.models.composite import CompositeReading


class HealthchecksNotifier:
    """Healthchecks.io heartbeat: one ping per poll cycle."""

    def __init__(self, cfg: HealthchecksConfig, log, opener=None):
        self.cfg = cfg
        self.log = log
        self._opener = opener or urllib.request.urlopen
        self._base_url = (cfg.ping_url or "").rstrip("/")
        self._enabled = bool(cfg.enabled and self._base_url)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ------------------------------------------------------------------
    def _hit(self, suffix: str = "", message: str = "") -> bool:
        if not self._enabled:
            self.log.debug("[Healthchecks] Disabled; skipping ping %s", suffix)
            return False

        url = f"{self._base_url}{suffix}" if suffix else self._base_url

        parsed = list(urllib.parse.urlparse(url))
        query = urllib.parse.parse_qs(parsed[4])
        if message:
            query["msg"] = [message[:200]]
        parsed[4] = urllib.parse.urlencode(query, doseq=True)
        full_url = urllib.parse.urlunparse(parsed)

        try:
            self._opener(full_url, timeout=10)
            self.log.debug("[Healthchecks] Ping sent to %s", suffix or "/")
            return True
        except urllib.error.URLError as exc:
            self.log.warning("[Healthchecks] Ping failed: %s", exc)
            return False

    # ------------------------------------------------------------------
    def ping_success(self, message: str = "") -> bool:
        return self._hit("", message)

    def ping_failure(self, message: str = "") -> bool:
        return self._hit("/fail", message)

    def report(self, reading: CompositeReading) -> bool:
        errors = reading.errors()
        if not errors:
            return self.ping_success("all blocks read")
        summary = ", ".join(f"{name}: {exc}" for name, exc in errors.items())
        return self.ping_failure(summary)
