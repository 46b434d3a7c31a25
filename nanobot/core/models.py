"""Domain models for robot commands and telemetry."""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from ..constants import STATUS_PENDING


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _new_command_id() -> str:
    return secrets.token_hex(8)


@dataclass(slots=True, frozen=True)
class Position:
    x: float
    y: float
    z: float

    def as_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Position":
        return cls(float(data["x"]), float(data["y"]), float(data["z"]))


@dataclass(slots=True, frozen=True)
class CommandRecord:
    """A validated request to perform ``operation`` at ``position``.

    Records are immutable once built. Status changes after logging are
    appended to storage as separate status events rather than applied here.
    """

    operation: str
    position: Position
    user_id: int
    status: str = STATUS_PENDING
    timestamp: str = field(default_factory=utc_timestamp)
    command_id: str = field(default_factory=_new_command_id)

    def as_log_entry(self) -> Dict[str, Any]:
        return {
            "command_id": self.command_id,
            "user_id": self.user_id,
            "command": self.operation,
            "x": self.position.x,
            "y": self.position.y,
            "z": self.position.z,
            "timestamp": self.timestamp,
            "status": self.status,
        }


@dataclass(slots=True, frozen=True)
class TelemetryPayload:
    """Reading returned by a robot link, before it is timestamped and logged."""

    status: str
    position: Position
    temperature: float
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "position": self.position.as_dict(),
            "temperature": self.temperature,
            "error": self.error,
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TelemetryPayload":
        error = data.get("error")
        return cls(
            status=str(data["status"]),
            position=Position.from_mapping(data["position"]),
            temperature=float(data["temperature"]),
            error=None if error is None else str(error),
        )


@dataclass(slots=True, frozen=True)
class TelemetryRecord:
    robot_status: str
    position: Position
    temperature: float
    error: Optional[str] = None
    timestamp: str = field(default_factory=utc_timestamp)

    @classmethod
    def from_payload(cls, payload: TelemetryPayload) -> "TelemetryRecord":
        return cls(
            robot_status=payload.status,
            position=payload.position,
            temperature=payload.temperature,
            error=payload.error,
        )

    def as_log_entry(self) -> Dict[str, Any]:
        return {
            "status": self.robot_status,
            "x": self.position.x,
            "y": self.position.y,
            "z": self.position.z,
            "temperature": self.temperature,
            "error": self.error,
            "timestamp": self.timestamp,
        }
