"""Command pipeline: validation, logging, robot invocation and history reads."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .config import IdentityConfig
from .constants import (
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_TELEMETRY_UNLOGGED,
)
from .core.models import CommandRecord, TelemetryRecord
from .core.protocols import RobotLink, RobotStorage
from .core.validation import normalize_command_input, validate_command_input
from .errors import PersistenceFailure, RobotLinkError

LOGGER = logging.getLogger(__name__)


class PipelineState(str, Enum):
    """Terminal states of a single pipeline execution."""

    REJECTED = "rejected"
    UNAUTHENTICATED = "unauthenticated"
    LOG_FAILED = "log-failed"
    ROBOT_FAILED = "robot-failed"
    COMPLETE = "complete"
    HISTORY_RETURNED = "history-returned"
    POSITION_RETURNED = "position-returned"
    READ_FAILED = "read-failed"
    METHOD_NOT_SUPPORTED = "method-not-supported"


@dataclass(slots=True, frozen=True)
class PipelineOutcome:
    """Result of one request.

    ``command_persisted`` and ``telemetry_persisted`` are reported separately
    because the two appends are independent: a command can be logged while
    its telemetry is not.
    """

    state: PipelineState
    status_code: int
    body: Any
    command_persisted: bool = False
    telemetry_persisted: bool = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def _error(state: PipelineState, status_code: int, message: str, **flags: bool) -> PipelineOutcome:
    return PipelineOutcome(state, status_code, {"error": message}, **flags)


class CommandPipeline:
    """Sequences a robot command from raw input to logged telemetry.

    Write path: validate, log the command, invoke the robot link, log the
    telemetry, respond with the telemetry. Each failure ends the request; no
    step is retried, and nothing already logged is undone.
    """

    def __init__(
        self,
        storage: RobotStorage,
        robot_link: RobotLink,
        *,
        robot_timeout: Optional[float] = None,
        identity: Optional[IdentityConfig] = None,
    ) -> None:
        self._storage = storage
        self._robot_link = robot_link
        self._robot_timeout = robot_timeout or None
        self._identity = identity or IdentityConfig()

    async def dispatch(
        self,
        method: str,
        *,
        action: Optional[str] = None,
        body: Any = None,
        user_id: Optional[int] = None,
    ) -> PipelineOutcome:
        """Route a parsed request to the write path or one of the read paths."""

        verb = method.upper()
        if verb == "POST":
            return await self.submit(body, user_id=user_id)
        if verb == "GET" and action == "history":
            return await self.history()
        if verb == "GET" and action == "position":
            return await self.last_position()
        return _error(PipelineState.METHOD_NOT_SUPPORTED, 405, "Invalid request method")

    async def submit(
        self, data: Any, *, user_id: Optional[int] = None
    ) -> PipelineOutcome:
        resolved_user = self._resolve_user(user_id)
        if resolved_user is None:
            LOGGER.info("Rejected anonymous command")
            return _error(PipelineState.UNAUTHENTICATED, 401, "Authentication required")

        result = validate_command_input(data)
        if not result.accepted:
            LOGGER.info("Rejected command input: %s", result.reason)
            return _error(PipelineState.REJECTED, 400, "Invalid input parameters")

        operation, position = normalize_command_input(data)
        command = CommandRecord(
            operation=operation, position=position, user_id=resolved_user
        )

        if not await self._storage.log_command(command):
            return _error(PipelineState.LOG_FAILED, 500, "Failed to log command")

        LOGGER.info(
            "Command %s logged: %s at (%s, %s, %s) for user %s",
            command.command_id,
            operation,
            position.x,
            position.y,
            position.z,
            resolved_user,
        )

        try:
            payload = await asyncio.wait_for(
                self._robot_link.invoke(command), timeout=self._robot_timeout
            )
        except asyncio.TimeoutError:
            LOGGER.warning(
                "Robot link timed out after %ss for command %s",
                self._robot_timeout,
                command.command_id,
            )
            await self._record_status(command, STATUS_FAILED)
            return _error(
                PipelineState.ROBOT_FAILED,
                504,
                "Robot did not respond in time",
                command_persisted=True,
            )
        except RobotLinkError as exc:
            LOGGER.warning("Robot link failed for command %s: %s", command.command_id, exc)
            await self._record_status(command, STATUS_FAILED)
            return _error(
                PipelineState.ROBOT_FAILED,
                exc.status_code,
                "Robot link failure",
                command_persisted=True,
            )
        except Exception as exc:
            LOGGER.warning(
                "Robot link raised %s for command %s",
                type(exc).__name__,
                command.command_id,
            )
            await self._record_status(command, STATUS_FAILED)
            raise

        telemetry = TelemetryRecord.from_payload(payload)
        telemetry_persisted = await self._storage.log_telemetry(telemetry)
        if telemetry_persisted:
            await self._record_status(command, STATUS_COMPLETED)
        else:
            LOGGER.warning(
                "Telemetry for command %s was not logged; command entry is kept",
                command.command_id,
            )
            await self._record_status(command, STATUS_TELEMETRY_UNLOGGED)

        return PipelineOutcome(
            PipelineState.COMPLETE,
            200,
            payload.as_dict(),
            command_persisted=True,
            telemetry_persisted=telemetry_persisted,
        )

    async def history(self) -> PipelineOutcome:
        try:
            entries = await self._storage.history()
        except PersistenceFailure as exc:
            LOGGER.error("Failed to read command history: %s", exc)
            return _error(PipelineState.READ_FAILED, 500, "Failed to read command history")
        return PipelineOutcome(PipelineState.HISTORY_RETURNED, 200, entries)

    async def last_position(self) -> PipelineOutcome:
        try:
            position = await self._storage.get_last_position()
        except PersistenceFailure as exc:
            LOGGER.error("Failed to read last position: %s", exc)
            return _error(PipelineState.READ_FAILED, 500, "Failed to read last position")
        body = {"position": position.as_dict() if position is not None else None}
        return PipelineOutcome(PipelineState.POSITION_RETURNED, 200, body)

    def _resolve_user(self, user_id: Optional[int]) -> Optional[int]:
        if user_id is not None:
            return user_id
        if self._identity.anonymous_policy == "reject":
            return None
        return self._identity.default_user_id

    async def _record_status(self, command: CommandRecord, status: str) -> None:
        if not await self._storage.log_status_change(command.command_id, status):
            LOGGER.warning(
                "Status change %s for command %s was not logged",
                status,
                command.command_id,
            )
