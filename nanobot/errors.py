"""Exception taxonomy for nanobot."""

from __future__ import annotations

from typing import Optional


class NanobotError(RuntimeError):
    """Base class for errors raised by nanobot components."""

    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code


class InputRejected(NanobotError):
    """Raised when request input cannot be turned into a command."""

    status_code = 400


class PersistenceFailure(NanobotError):
    """Raised when an entry cannot be durably appended to storage."""


class MethodNotSupported(NanobotError):
    """Raised when a request matches neither the write nor a read path."""

    status_code = 405


class RobotLinkError(NanobotError):
    """Raised when the robot link cannot produce a telemetry reading."""

    status_code = 502


class UnexpectedFailure(NanobotError):
    """Wraps any other fault surfaced at the outer boundary."""


class ConfigurationError(NanobotError):
    """Raised when the configuration cannot be turned into components."""
