"""nanobot: command and telemetry pipeline for a single robot."""

__version__ = "0.1.0"
