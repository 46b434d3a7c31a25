"""Main application entry-point for nanobot."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .config import NanobotConfig, load_config
from .core.protocols import RobotLink, RobotStorage
from .logging import configure_logging
from .pipeline import CommandPipeline
from .robot_link import create_robot_link
from .server import CommandServer
from .storage import create_storage

LOGGER = logging.getLogger(__name__)


def build_pipeline(
    config: NanobotConfig,
    *,
    storage: Optional[RobotStorage] = None,
    robot_link: Optional[RobotLink] = None,
) -> CommandPipeline:
    """Wire storage and robot link from ``config`` into a pipeline."""

    return CommandPipeline(
        storage or create_storage(config.storage),
        robot_link or create_robot_link(config.robot),
        robot_timeout=config.robot.timeout_seconds,
        identity=config.identity,
    )


class NanobotApp:
    """Coordinates application startup and shutdown.

    Storage and the robot link can be injected for testing or to plug in a
    different robot controller.
    """

    def __init__(
        self,
        config: Optional[NanobotConfig] = None,
        *,
        storage: Optional[RobotStorage] = None,
        robot_link: Optional[RobotLink] = None,
    ) -> None:
        self._config = config or load_config()
        self._robot_link = robot_link or create_robot_link(self._config.robot)
        self._pipeline = build_pipeline(
            self._config, storage=storage, robot_link=self._robot_link
        )
        self._server: Optional[CommandServer] = None
        self._shutdown_event: Optional[asyncio.Event] = None

    @property
    def pipeline(self) -> CommandPipeline:
        return self._pipeline

    async def run(self) -> None:
        """Serve requests until :meth:`request_shutdown` is called or the task is cancelled."""

        self._shutdown_event = asyncio.Event()
        LOGGER.info("nanobot starting with config: %s", self._config.path)

        self._server = CommandServer(
            self._pipeline, self._config.server.host, self._config.server.port
        )
        try:
            await self._server.start()
            await self._shutdown_event.wait()
        except asyncio.CancelledError:
            LOGGER.info("nanobot received shutdown signal")
            raise
        finally:
            await self._stop_services()

    def request_shutdown(self) -> None:
        if self._shutdown_event is not None:
            self._shutdown_event.set()

    async def _stop_services(self) -> None:
        if self._server is not None:
            await self._server.stop()
            self._server = None
        await self._robot_link.aclose()
        LOGGER.info("nanobot stopped")

    @classmethod
    def start(cls, config: Optional[NanobotConfig] = None) -> None:
        instance = cls(config=config)
        configure_logging(
            instance._config.logging.level,
            log_path=instance._config.logging.path,
            log_network=instance._config.logging.log_network,
        )
        try:
            asyncio.run(instance.run())
        except KeyboardInterrupt:
            LOGGER.info("nanobot received shutdown signal")
