"""Input validation for robot commands.

Validation is a gate in front of :class:`~nanobot.core.models.CommandRecord`
construction. It never raises for bad input; callers inspect the returned
:class:`ValidationResult` and decide how to respond.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from ..constants import COORDINATE_MAX, COORDINATE_MIN, VALID_OPERATIONS
from .models import Position

COORDINATE_FIELDS = ("x", "y", "z")
REQUIRED_FIELDS = ("operation",) + COORDINATE_FIELDS

# Older clients post x_pos/y_pos/z_pos.
FIELD_ALIASES = {"x": "x_pos", "y": "y_pos", "z": "z_pos"}


@dataclass(slots=True, frozen=True)
class ValidationResult:
    accepted: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.accepted


_ACCEPTED = ValidationResult(True)


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    value = data.get(name)
    if value is None and name in FIELD_ALIASES:
        value = data.get(FIELD_ALIASES[name])
    return value


def _as_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        # float() takes digit separators, numeric strings do not.
        if "_" in value:
            return None
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def validate_command_input(data: Any) -> ValidationResult:
    """Check that ``data`` describes an acceptable command."""

    if not isinstance(data, Mapping):
        return ValidationResult(False, "body must be an object")

    for name in REQUIRED_FIELDS:
        if _lookup(data, name) is None:
            return ValidationResult(False, f"missing field: {name}")

    operation = _lookup(data, "operation")
    if not isinstance(operation, str) or operation not in VALID_OPERATIONS:
        return ValidationResult(False, f"unsupported operation: {operation!r}")

    for name in COORDINATE_FIELDS:
        number = _as_number(_lookup(data, name))
        if number is None:
            return ValidationResult(False, f"{name} is not numeric")
        if number < COORDINATE_MIN or number > COORDINATE_MAX:
            return ValidationResult(
                False,
                f"{name}={number} outside [{COORDINATE_MIN:g}, {COORDINATE_MAX:g}]",
            )

    return _ACCEPTED


def normalize_command_input(data: Mapping[str, Any]) -> Tuple[str, Position]:
    """Extract ``(operation, position)`` from input already accepted by the validator."""

    coordinates = []
    for name in COORDINATE_FIELDS:
        number = _as_number(_lookup(data, name))
        if number is None:
            raise ValueError(f"{name} is not numeric; validate input first")
        coordinates.append(number)
    return str(_lookup(data, "operation")), Position(*coordinates)
