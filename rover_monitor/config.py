# rover_monitor/config.py
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping
import configparser
import os

from rover_monitor.errors import ConfigError


ENV_PORT = "RENOGY_ROVER_PORT"
ENV_INTERVAL = "RENOGY_ROVER_INTERVAL"


@dataclass(frozen=True)
class ConnectionConfig:
    port: str | None
    baudrate: int = 9600
    modbus_id: int = 1
    timeout_ms: int = 1000
    trace: bool = False
    trace_error: bool = False

    def validate(self) -> "ConnectionConfig":
        if not self.port:
            raise ConfigError("serial port is required")
        if self.baudrate <= 0:
            raise ConfigError(f"baudrate must be positive, got {self.baudrate}")
        if not 1 <= self.modbus_id <= 247:
            raise ConfigError(f"modbus_id must be in 1..247, got {self.modbus_id}")
        if self.timeout_ms <= 0:
            raise ConfigError(f"timeout_ms must be positive, got {self.timeout_ms}")
        return self


@dataclass
class PollingConfig:
    interval: int = 60
    supported_model: str = "ML2420N"
    include_status: bool = False


@dataclass
class HealthchecksConfig:
    ping_url: str | None = None
    enabled: bool = False


@dataclass
class UploadConfig:
    enabled: bool = False
    url: str | None = None
    token: str | None = None
    timeout: float = 10.0


@dataclass
class LoggingConfig:
    console_level: str = "INFO"
    console_quiet: bool = False
    debug_modules: list[str] = field(default_factory=list)
    structured_enabled: bool = False
    structured_path: str | None = None


@dataclass
class AppConfig:
    connection: ConnectionConfig
    polling: PollingConfig = field(default_factory=PollingConfig)
    healthchecks: HealthchecksConfig = field(default_factory=HealthchecksConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"true", "yes", "1", "on"}


def _as_int(value: str, name: str) -> int:
    try:
        return int(str(value).strip(), 0)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def _as_float(value: str, name: str) -> float:
    try:
        return float(str(value).strip())
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}") from None


class Config:
    def __init__(self, path: str | None):
        self.path = Path(path) if path else None
        self.parser = configparser.ConfigParser(inline_comment_prefixes=("#",))
        if self.path is not None:
            read = self.parser.read(self.path)
            if not read:
                raise FileNotFoundError(f"Config file not found: {self.path}")

    @classmethod
    def load(cls, path: str | None) -> AppConfig:
        """Parse the INI file (if any) without validating the port yet."""
        cfg = cls(path)
        p = cfg.parser

        # --- Rover connection ---
        conn_kwargs = {"port": None}
        polling_kwargs = {}
        if "rover" in p:
            rover_sec = p["rover"]
            if rover_sec.get("port", "").strip():
                conn_kwargs["port"] = rover_sec["port"].strip()
            if "baudrate" in rover_sec:
                conn_kwargs["baudrate"] = _as_int(rover_sec["baudrate"], "baudrate")
            if "modbus_id" in rover_sec:
                conn_kwargs["modbus_id"] = _as_int(rover_sec["modbus_id"], "modbus_id")
            if "timeout_ms" in rover_sec:
                conn_kwargs["timeout_ms"] = _as_int(rover_sec["timeout_ms"], "timeout_ms")
            if "trace" in rover_sec:
                conn_kwargs["trace"] = _as_bool(rover_sec["trace"])
            if "trace_error" in rover_sec:
                conn_kwargs["trace_error"] = _as_bool(rover_sec["trace_error"])
            if "supported_model" in rover_sec:
                polling_kwargs["supported_model"] = rover_sec["supported_model"].strip()
        connection = ConnectionConfig(**conn_kwargs)

        # --- Polling ---
        if "polling" in p:
            polling_sec = p["polling"]
            if "interval" in polling_sec:
                polling_kwargs["interval"] = _as_int(polling_sec["interval"], "interval")
            if "include_status" in polling_sec:
                polling_kwargs["include_status"] = _as_bool(polling_sec["include_status"])
        polling = PollingConfig(**polling_kwargs)

        # --- Healthchecks ---
        healthchecks_kwargs = {}
        if "healthchecks" in p:
            hc_sec = p["healthchecks"]
            if "ping_url" in hc_sec:
                healthchecks_kwargs["ping_url"] = hc_sec["ping_url"]
            if "enabled" in hc_sec:
                healthchecks_kwargs["enabled"] = _as_bool(hc_sec["enabled"])
        healthchecks = HealthchecksConfig(**healthchecks_kwargs)

        # --- Upload ---
        upload_kwargs = {}
        if "upload" in p:
            upload_sec = p["upload"]
            if "enabled" in upload_sec:
                upload_kwargs["enabled"] = _as_bool(upload_sec["enabled"])
            if "url" in upload_sec:
                upload_kwargs["url"] = upload_sec["url"]
            if "token" in upload_sec:
                upload_kwargs["token"] = upload_sec["token"]
            if "timeout" in upload_sec:
                upload_kwargs["timeout"] = _as_float(upload_sec["timeout"], "upload timeout")
        upload = UploadConfig(**upload_kwargs)

        logging_kwargs = {}
        if "logging" in p:
            logging_sec = p["logging"]
            if "console_level" in logging_sec:
                logging_kwargs["console_level"] = logging_sec["console_level"]
            if "console_quiet" in logging_sec:
                logging_kwargs["console_quiet"] = _as_bool(logging_sec["console_quiet"])
            if "debug_modules" in logging_sec:
                raw = logging_sec["debug_modules"]
                logging_kwargs["debug_modules"] = [x.strip() for x in raw.split(",") if x.strip()]
            if "structured_enabled" in logging_sec:
                logging_kwargs["structured_enabled"] = _as_bool(logging_sec["structured_enabled"])
            if "structured_path" in logging_sec:
                logging_kwargs["structured_path"] = logging_sec["structured_path"]
        logging_cfg = LoggingConfig(**logging_kwargs)

        return AppConfig(
            connection=connection,
            polling=polling,
            healthchecks=healthchecks,
            upload=upload,
            logging=logging_cfg,
        )


def apply_overrides(
    app_cfg: AppConfig,
    *,
    env: Mapping[str, str] | None = None,
    port: str | None = None,
    interval: int | None = None,
    trace: bool = False,
) -> AppConfig:
    """
    Layer environment variables, then CLI values, over the file config and
    validate the result. Precedence: CLI > environment > file > defaults.
    """
    env = os.environ if env is None else env

    conn = app_cfg.connection
    if env.get(ENV_PORT):
        conn = replace(conn, port=env[ENV_PORT])
    if port:
        conn = replace(conn, port=port)
    if trace:
        conn = replace(conn, trace=True, trace_error=True)

    polling = app_cfg.polling
    if env.get(ENV_INTERVAL):
        polling = replace(polling, interval=_as_int(env[ENV_INTERVAL], ENV_INTERVAL))
    if interval is not None:
        polling = replace(polling, interval=interval)
    if polling.interval <= 0:
        raise ConfigError(f"polling interval must be positive, got {polling.interval}")

    return replace(app_cfg, connection=conn.validate(), polling=polling)
