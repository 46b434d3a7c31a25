"""Constants used across the nanobot package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "nanobot"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_HOME = Path.home() / f".{APP_NAME}"
DEFAULT_CONFIG_PATH = DEFAULT_HOME / DEFAULT_CONFIG_FILENAME
DEFAULT_DATA_PATH = DEFAULT_HOME / "data"

DEFAULT_COMMANDS_PATH = DEFAULT_DATA_PATH / "robot_commands.json"
DEFAULT_TELEMETRY_PATH = DEFAULT_DATA_PATH / "robot_telemetry.json"
DEFAULT_STATUS_PATH = DEFAULT_DATA_PATH / "robot_status_events.json"

DEFAULT_LOG_PATH = DEFAULT_HOME / "logs" / f"{APP_NAME}.log"

DEFAULT_SERVER_HOST = "127.0.0.1"
DEFAULT_SERVER_PORT = 8080

VALID_OPERATIONS = frozenset({"pick", "place", "weld"})
COORDINATE_MIN = 0.0
COORDINATE_MAX = 100.0

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"
STATUS_TELEMETRY_UNLOGGED = "telemetry-unlogged"
