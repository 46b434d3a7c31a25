"""Append-only storage backends for commands, telemetry and status events."""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import StorageConfig
from .core.models import CommandRecord, Position, TelemetryRecord, utc_timestamp
from .errors import ConfigurationError, PersistenceFailure

LOGGER = logging.getLogger(__name__)


def _status_event(command_id: str, status: str) -> Dict[str, Any]:
    return {"command_id": command_id, "status": status, "timestamp": utc_timestamp()}


def _position_from_entry(entry: Dict[str, Any]) -> Position:
    return Position(float(entry["x"]), float(entry["y"]), float(entry["z"]))


class _JsonSequence:
    """One append-only sequence persisted as a single JSON array document.

    Every append reads the whole document, adds one entry and writes the
    document back. Appends are serialised by a per-sequence lock so two
    concurrent appends can never overwrite each other.
    """

    def __init__(self, name: str, path: Path) -> None:
        self.name = name
        self.path = path
        self._lock = asyncio.Lock()

    async def append(self, entry: Dict[str, Any]) -> None:
        async with self._lock:
            entries = self._read()
            entries.append(entry)
            self._write(entries)

    async def read_all(self) -> List[Dict[str, Any]]:
        async with self._lock:
            return self._read()

    async def last(self) -> Optional[Dict[str, Any]]:
        entries = await self.read_all()
        return entries[-1] if entries else None

    def _read(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as stream:
                content = stream.read()
        except OSError as exc:
            raise PersistenceFailure(
                f"Cannot read {self.name} log at {self.path}: {exc}", code="read_failed"
            ) from exc

        if not content.strip():
            return []
        try:
            document = json.loads(content)
        except json.JSONDecodeError as exc:
            raise PersistenceFailure(
                f"{self.name} log at {self.path} is not valid JSON: {exc}",
                code="corrupt_document",
            ) from exc
        if not isinstance(document, list):
            raise PersistenceFailure(
                f"{self.name} log at {self.path} is not a JSON array",
                code="corrupt_document",
            )
        return document

    def _write(self, entries: List[Dict[str, Any]]) -> None:
        temp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w", encoding="utf-8") as stream:
                json.dump(entries, stream, indent=2)
                stream.flush()
                os.fsync(stream.fileno())
            os.replace(temp_path, self.path)
        except OSError as exc:
            raise PersistenceFailure(
                f"Cannot write {self.name} log at {self.path}: {exc}",
                code="write_failed",
            ) from exc


class FileStorage:
    """Persists commands, telemetry and status events to three JSON files.

    Files are created on the first append; reading a sequence whose file does
    not exist yet yields an empty list.
    """

    def __init__(
        self,
        commands_path: Path,
        telemetry_path: Path,
        status_path: Path,
    ) -> None:
        self._commands = _JsonSequence("command", commands_path)
        self._telemetry = _JsonSequence("telemetry", telemetry_path)
        self._status = _JsonSequence("status", status_path)

    @property
    def commands_path(self) -> Path:
        return self._commands.path

    @property
    def telemetry_path(self) -> Path:
        return self._telemetry.path

    @property
    def status_path(self) -> Path:
        return self._status.path

    async def log_command(self, command: CommandRecord) -> bool:
        return await self._append(self._commands, command.as_log_entry())

    async def log_telemetry(self, telemetry: TelemetryRecord) -> bool:
        return await self._append(self._telemetry, telemetry.as_log_entry())

    async def log_status_change(self, command_id: str, status: str) -> bool:
        return await self._append(self._status, _status_event(command_id, status))

    async def get_last_position(self) -> Optional[Position]:
        entry = await self._telemetry.last()
        if entry is None:
            return None
        return _position_from_entry(entry)

    async def history(self) -> list[dict[str, Any]]:
        return await self._commands.read_all()

    async def telemetry_history(self) -> list[dict[str, Any]]:
        return await self._telemetry.read_all()

    async def status_events(self) -> list[dict[str, Any]]:
        return await self._status.read_all()

    async def _append(self, sequence: _JsonSequence, entry: Dict[str, Any]) -> bool:
        try:
            await sequence.append(entry)
        except PersistenceFailure as exc:
            LOGGER.error("Failed to append %s entry: %s", sequence.name, exc)
            return False
        LOGGER.debug("Appended %s entry to %s", sequence.name, sequence.path)
        return True


class MemoryStorage:
    """Keeps the append-only sequences in process memory."""

    def __init__(self) -> None:
        self._commands: List[Dict[str, Any]] = []
        self._telemetry: List[Dict[str, Any]] = []
        self._status: List[Dict[str, Any]] = []

    async def log_command(self, command: CommandRecord) -> bool:
        self._commands.append(command.as_log_entry())
        return True

    async def log_telemetry(self, telemetry: TelemetryRecord) -> bool:
        self._telemetry.append(telemetry.as_log_entry())
        return True

    async def log_status_change(self, command_id: str, status: str) -> bool:
        self._status.append(_status_event(command_id, status))
        return True

    async def get_last_position(self) -> Optional[Position]:
        if not self._telemetry:
            return None
        return _position_from_entry(self._telemetry[-1])

    async def history(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._commands)

    async def telemetry_history(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._telemetry)

    async def status_events(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._status)


def create_storage(config: StorageConfig) -> FileStorage | MemoryStorage:
    """Build the storage backend named by ``config.backend``."""

    if config.backend == "file":
        return FileStorage(
            config.commands_path, config.telemetry_path, config.status_path
        )
    if config.backend == "memory":
        return MemoryStorage()
    raise ConfigurationError(
        f"Unknown storage backend: {config.backend}", code="invalid_choice"
    )
