"""Tests for position, command and telemetry records."""

import dataclasses
from datetime import datetime

import pytest

from nanobot.core.models import (
    CommandRecord,
    Position,
    TelemetryPayload,
    TelemetryRecord,
)


def test_position_is_immutable():
    position = Position(1.0, 2.0, 3.0)

    with pytest.raises(dataclasses.FrozenInstanceError):
        position.x = 5.0  # type: ignore[misc]


def test_position_round_trips_through_mapping():
    position = Position.from_mapping({"x": "1", "y": 2, "z": 3.5})

    assert position == Position(1.0, 2.0, 3.5)
    assert position.as_dict() == {"x": 1.0, "y": 2.0, "z": 3.5}


def test_command_record_defaults():
    command = CommandRecord(operation="pick", position=Position(10, 20, 30), user_id=7)

    assert command.status == "pending"
    assert command.timestamp
    datetime.fromisoformat(command.timestamp)
    assert len(command.command_id) == 16

    with pytest.raises(dataclasses.FrozenInstanceError):
        command.status = "completed"  # type: ignore[misc]


def test_command_records_get_distinct_ids():
    first = CommandRecord("pick", Position(0, 0, 0), 0)
    second = CommandRecord("pick", Position(0, 0, 0), 0)

    assert first.command_id != second.command_id


def test_command_log_entry_shape():
    command = CommandRecord(operation="weld", position=Position(1, 2, 3), user_id=4)

    entry = command.as_log_entry()

    assert entry == {
        "command_id": command.command_id,
        "user_id": 4,
        "command": "weld",
        "x": 1,
        "y": 2,
        "z": 3,
        "timestamp": command.timestamp,
        "status": "pending",
    }


def test_telemetry_record_from_payload():
    payload = TelemetryPayload("completed", Position(10, 20, 30), 36.7)

    record = TelemetryRecord.from_payload(payload)

    assert record.robot_status == "completed"
    assert record.position == Position(10, 20, 30)
    assert record.temperature == 36.7
    assert record.error is None
    assert record.timestamp
    assert record.as_log_entry()["status"] == "completed"
    assert record.as_log_entry()["timestamp"] == record.timestamp


def test_telemetry_payload_response_shape():
    payload = TelemetryPayload.from_mapping(
        {
            "status": "completed",
            "position": {"x": 10, "y": 20, "z": 30},
            "temperature": 36,
            "error": None,
        }
    )

    assert payload.as_dict() == {
        "status": "completed",
        "position": {"x": 10.0, "y": 20.0, "z": 30.0},
        "temperature": 36.0,
        "error": None,
    }


def test_telemetry_payload_requires_fields():
    with pytest.raises(KeyError):
        TelemetryPayload.from_mapping({"status": "completed", "temperature": 1.0})
