# rover_monitor/errors.py

from __future__ import annotations


class RoverError(Exception):
    """Base class for every error raised by the rover monitor."""


class ConfigError(RoverError):
    """Missing or invalid configuration; fatal at startup."""


class RoverConnectionError(RoverError):
    """The serial port could not be opened."""

    def __init__(self, message: str, port: str | None = None):
        self.port = port
        super().__init__(message)


class TransportError(RoverError):
    """A register read failed on the wire (I/O, timeout, exception response)."""

    def __init__(self, message: str, base: int | None = None, count: int | None = None):
        self.base = base
        self.count = count
        super().__init__(message)


class DecodeError(RoverError):
    """A register payload could not be decoded (short or empty buffer)."""
