# rover_monitor/services/uploader.py

from __future__ import annotations

from typing import Optional

import requests

from rover_monitor.config import UploadConfig
from rover_monitor.models.composite import CompositeReading
from rover_monitor.models.device import DeviceIdentity
from rover_monitor.services.output_formatter import reading_to_dict


class ReadingUploader:
    """POST each composite reading as JSON to a collector endpoint."""

    def __init__(self, cfg: UploadConfig, log, session: Optional[requests.Session] = None):
        self.cfg = cfg
        self.log = log
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    @property
    def enabled(self) -> bool:
        return bool(self.cfg.enabled and self.cfg.url)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.cfg.token:
            headers["Authorization"] = f"Bearer {self.cfg.token}"
        return headers

    # ------------------------------------------------------------------
    def upload(self, reading: CompositeReading, identity: Optional[DeviceIdentity] = None) -> bool:
        if not self.enabled:
            return False

        payload = reading_to_dict(reading, identity)
        try:
            resp = self.session.post(
                self.cfg.url,
                json=payload,
                headers=self._headers(),
                timeout=self.cfg.timeout,
            )
        except requests.RequestException as exc:
            self.log.warning("[Upload] POST to %s failed: %s", self.cfg.url, exc)
            return False

        if resp.status_code >= 400:
            self.log.warning("[Upload] Collector returned HTTP %s", resp.status_code)
            return False

        self.log.debug("[Upload] Reading %s accepted", payload["timestamp"])
        return True
