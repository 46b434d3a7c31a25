"""Robot link implementations: a simulator and an HTTP controller client."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Optional

import aiohttp

from .config import RobotConfig
from .core.models import CommandRecord, TelemetryPayload
from .errors import ConfigurationError, RobotLinkError

LOGGER = logging.getLogger(__name__)

DEFAULT_SIMULATED_DELAY_SECONDS = 0.1
DEFAULT_BASELINE_TEMPERATURE = 36.5
DEFAULT_TEMPERATURE_JITTER = 1.0


class SimulatedRobotLink:
    """Fabricates a plausible reading for each command.

    The robot always reports ``completed`` at the commanded position, with a
    temperature near ``baseline_temperature`` jittered in 0.1 degree steps.
    """

    def __init__(
        self,
        *,
        delay_seconds: float = DEFAULT_SIMULATED_DELAY_SECONDS,
        baseline_temperature: float = DEFAULT_BASELINE_TEMPERATURE,
        temperature_jitter: float = DEFAULT_TEMPERATURE_JITTER,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._delay = max(0.0, delay_seconds)
        self._baseline = baseline_temperature
        self._jitter_steps = int(round(abs(temperature_jitter) * 10))
        self._rng = rng or random.Random()

    async def invoke(self, command: CommandRecord) -> TelemetryPayload:
        if self._delay:
            await asyncio.sleep(self._delay)

        offset = self._rng.randint(-self._jitter_steps, self._jitter_steps) / 10
        return TelemetryPayload(
            status="completed",
            position=command.position,
            temperature=round(self._baseline + offset, 1),
            error=None,
        )

    async def aclose(self) -> None:
        return None


class HttpRobotLink:
    """Forwards commands to a robot controller over HTTP.

    The controller receives the command entry as JSON and must answer with
    ``{"status", "position": {"x", "y", "z"}, "temperature", "error"}``.
    """

    def __init__(
        self,
        url: str,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 10.0,
    ) -> None:
        if not url:
            raise ConfigurationError("Robot controller URL cannot be empty")
        self._url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout or None)
        self._session = session
        self._owns_session = session is None

    async def invoke(self, command: CommandRecord) -> TelemetryPayload:
        session = self._ensure_session()
        body = command.as_log_entry()

        try:
            async with session.post(self._url, json=body) as response:
                if response.status != 200:
                    detail = await response.text()
                    raise RobotLinkError(
                        f"Robot controller returned {response.status}: {detail.strip()}",
                        code="bad_status",
                    )
                payload: Any = await response.json(content_type=None)
        except aiohttp.ClientError as exc:
            raise RobotLinkError(
                f"Robot controller unreachable: {exc}", code="unreachable"
            ) from exc
        except ValueError as exc:
            raise RobotLinkError(
                f"Robot controller replied with invalid JSON: {exc}",
                code="invalid_payload",
            ) from exc

        if not isinstance(payload, dict):
            raise RobotLinkError(
                "Robot controller reply is not an object", code="invalid_payload"
            )
        try:
            return TelemetryPayload.from_mapping(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise RobotLinkError(
                f"Robot controller reply missing telemetry fields: {exc}",
                code="invalid_payload",
            ) from exc

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
        self._session = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session


def create_robot_link(config: RobotConfig) -> SimulatedRobotLink | HttpRobotLink:
    """Build the robot link named by ``config.link``."""

    if config.link == "simulated":
        return SimulatedRobotLink(
            delay_seconds=config.simulated_delay_seconds,
            baseline_temperature=config.baseline_temperature,
            temperature_jitter=config.temperature_jitter,
        )
    if config.link == "http":
        LOGGER.info("Using robot controller at %s", config.url)
        return HttpRobotLink(config.url or "", timeout=config.timeout_seconds)
    raise ConfigurationError(f"Unknown robot link: {config.link}", code="invalid_choice")
