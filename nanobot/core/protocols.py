"""Protocol definitions for storage and robot link collaborators."""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from .models import CommandRecord, Position, TelemetryPayload, TelemetryRecord


@runtime_checkable
class RobotStorage(Protocol):
    """Append-only log of commands, telemetry and command status events.

    Append methods return ``False`` when the entry could not be durably
    recorded. Implementations must not reorder appends within a sequence,
    and must never lose an append when several run concurrently.
    """

    async def log_command(self, command: CommandRecord) -> bool:
        """Append ``command`` to the command sequence."""
        ...

    async def log_telemetry(self, telemetry: TelemetryRecord) -> bool:
        """Append ``telemetry`` to the telemetry sequence."""
        ...

    async def log_status_change(self, command_id: str, status: str) -> bool:
        """Append a status event for a previously logged command."""
        ...

    async def get_last_position(self) -> Optional[Position]:
        """Return the position of the most recent telemetry entry, or None."""
        ...

    async def history(self) -> list[dict[str, Any]]:
        """Return every logged command entry in append order."""
        ...

    async def telemetry_history(self) -> list[dict[str, Any]]:
        """Return every logged telemetry entry in append order."""
        ...

    async def status_events(self) -> list[dict[str, Any]]:
        """Return every status event in append order."""
        ...


@runtime_checkable
class RobotLink(Protocol):
    """Turns a command into a telemetry reading from the robot."""

    async def invoke(self, command: CommandRecord) -> TelemetryPayload:
        """Execute ``command`` and return the robot's reported state.

        Raises:
            RobotLinkError: If the robot cannot be reached or replies with
                something that is not a telemetry reading.
        """
        ...

    async def aclose(self) -> None:
        """Close any underlying resources."""
        ...
