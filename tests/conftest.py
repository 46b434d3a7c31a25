from pathlib import Path
from typing import Any, Optional

import pytest

from nanobot.core.models import CommandRecord, Position, TelemetryPayload, TelemetryRecord
from nanobot.robot_link import SimulatedRobotLink
from nanobot.storage import FileStorage, MemoryStorage


class FlakyStorage(MemoryStorage):
    """MemoryStorage whose appends can be switched to fail."""

    def __init__(self, *, fail_commands: bool = False, fail_telemetry: bool = False) -> None:
        super().__init__()
        self.fail_commands = fail_commands
        self.fail_telemetry = fail_telemetry

    async def log_command(self, command: CommandRecord) -> bool:
        if self.fail_commands:
            return False
        return await super().log_command(command)

    async def log_telemetry(self, telemetry: TelemetryRecord) -> bool:
        if self.fail_telemetry:
            return False
        return await super().log_telemetry(telemetry)


class RecordingRobotLink:
    """Robot link double that records invocations."""

    def __init__(self, payload: Optional[TelemetryPayload] = None, error: Optional[Exception] = None) -> None:
        self.calls: list[CommandRecord] = []
        self._payload = payload
        self._error = error

    async def invoke(self, command: CommandRecord) -> TelemetryPayload:
        self.calls.append(command)
        if self._error is not None:
            raise self._error
        if self._payload is not None:
            return self._payload
        return TelemetryPayload("completed", command.position, 36.5)

    async def aclose(self) -> None:
        return None


@pytest.fixture
def file_storage(tmp_path: Path) -> FileStorage:
    data = tmp_path / "data"
    return FileStorage(
        data / "robot_commands.json",
        data / "robot_telemetry.json",
        data / "robot_status_events.json",
    )


@pytest.fixture
def instant_link() -> SimulatedRobotLink:
    return SimulatedRobotLink(delay_seconds=0.0)


def make_command(operation: str = "pick", x: float = 10, y: float = 20, z: float = 30, user_id: int = 7) -> CommandRecord:
    return CommandRecord(operation=operation, position=Position(x, y, z), user_id=user_id)


def make_telemetry(x: float = 10, y: float = 20, z: float = 30, **kwargs: Any) -> TelemetryRecord:
    return TelemetryRecord(
        robot_status=kwargs.get("status", "completed"),
        position=Position(x, y, z),
        temperature=kwargs.get("temperature", 36.5),
        error=kwargs.get("error"),
    )
