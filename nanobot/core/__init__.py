"""Core primitives for nanobot."""

from .models import (
    CommandRecord,
    Position,
    TelemetryPayload,
    TelemetryRecord,
    utc_timestamp,
)
from .protocols import RobotLink, RobotStorage
from .validation import ValidationResult, normalize_command_input, validate_command_input

__all__ = [
    "CommandRecord",
    "Position",
    "RobotLink",
    "RobotStorage",
    "TelemetryPayload",
    "TelemetryRecord",
    "ValidationResult",
    "normalize_command_input",
    "utc_timestamp",
    "validate_command_input",
]
