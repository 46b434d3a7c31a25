"""Configuration loader for nanobot."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants
from .errors import ConfigurationError

STORAGE_BACKENDS = ("file", "memory")
ROBOT_LINKS = ("simulated", "http")
ANONYMOUS_POLICIES = ("default", "reject")


@dataclass(slots=True)
class ServerConfig:
    host: str = constants.DEFAULT_SERVER_HOST
    port: int = constants.DEFAULT_SERVER_PORT


@dataclass(slots=True)
class StorageConfig:
    backend: str = "file"
    commands_path: Path = constants.DEFAULT_COMMANDS_PATH
    telemetry_path: Path = constants.DEFAULT_TELEMETRY_PATH
    status_path: Path = constants.DEFAULT_STATUS_PATH


@dataclass(slots=True)
class RobotConfig:
    link: str = "simulated"
    url: Optional[str] = None
    timeout_seconds: float = 10.0
    simulated_delay_seconds: float = 0.1
    baseline_temperature: float = 36.5
    temperature_jitter: float = 1.0


@dataclass(slots=True)
class IdentityConfig:
    # "default" substitutes default_user_id for anonymous callers, "reject" refuses them.
    anonymous_policy: str = "default"
    default_user_id: int = 0


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = constants.DEFAULT_LOG_PATH
    log_network: bool = False


@dataclass(slots=True)
class NanobotConfig:
    server: ServerConfig
    storage: StorageConfig
    robot: RobotConfig
    identity: IdentityConfig
    logging: LoggingConfig
    raw: ConfigParser
    path: Path


def _choice(parser: ConfigParser, section: str, option: str, choices: tuple) -> str:
    value = parser.get(section, option).strip().lower()
    if value not in choices:
        raise ConfigurationError(
            f"[{section}] {option} must be one of {', '.join(choices)}; got {value!r}",
            code="invalid_choice",
        )
    return value


def _optional_path(value: Optional[str]) -> Optional[Path]:
    if value is None or not value.strip():
        return None
    return Path(value.strip()).expanduser()


def load_config(path: Optional[Path] = None) -> NanobotConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "server": {
                "host": constants.DEFAULT_SERVER_HOST,
                "port": str(constants.DEFAULT_SERVER_PORT),
            },
            "storage": {
                "backend": "file",
                "commands_path": str(constants.DEFAULT_COMMANDS_PATH),
                "telemetry_path": str(constants.DEFAULT_TELEMETRY_PATH),
                "status_path": str(constants.DEFAULT_STATUS_PATH),
            },
            "robot": {
                "link": "simulated",
                "timeout_seconds": "10.0",
                "simulated_delay_seconds": "0.1",
                "baseline_temperature": "36.5",
                "temperature_jitter": "1.0",
            },
            "identity": {
                "anonymous_policy": "default",
                "default_user_id": "0",
            },
            "logging": {
                "level": "INFO",
                "path": str(constants.DEFAULT_LOG_PATH),
                "log_network": "false",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    try:
        server = ServerConfig(
            host=parser.get("server", "host"),
            port=parser.getint("server", "port", fallback=constants.DEFAULT_SERVER_PORT),
        )

        storage = StorageConfig(
            backend=_choice(parser, "storage", "backend", STORAGE_BACKENDS),
            commands_path=Path(parser.get("storage", "commands_path")).expanduser(),
            telemetry_path=Path(parser.get("storage", "telemetry_path")).expanduser(),
            status_path=Path(parser.get("storage", "status_path")).expanduser(),
        )

        robot = RobotConfig(
            link=_choice(parser, "robot", "link", ROBOT_LINKS),
            url=parser.get("robot", "url", fallback=None) or None,
            timeout_seconds=max(
                0.0, parser.getfloat("robot", "timeout_seconds", fallback=10.0)
            ),
            simulated_delay_seconds=max(
                0.0, parser.getfloat("robot", "simulated_delay_seconds", fallback=0.1)
            ),
            baseline_temperature=parser.getfloat(
                "robot", "baseline_temperature", fallback=36.5
            ),
            temperature_jitter=abs(
                parser.getfloat("robot", "temperature_jitter", fallback=1.0)
            ),
        )

        identity = IdentityConfig(
            anonymous_policy=_choice(
                parser, "identity", "anonymous_policy", ANONYMOUS_POLICIES
            ),
            default_user_id=max(
                0, parser.getint("identity", "default_user_id", fallback=0)
            ),
        )

        logging_config = LoggingConfig(
            level=parser.get("logging", "level", fallback="INFO"),
            path=_optional_path(
                parser.get("logging", "path", fallback=str(constants.DEFAULT_LOG_PATH))
            ),
            log_network=parser.getboolean("logging", "log_network", fallback=False),
        )
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid value in {config_path}: {exc}", code="invalid_value"
        ) from exc

    if robot.link == "http" and not robot.url:
        raise ConfigurationError(
            "[robot] url is required when link = http", code="missing_url"
        )

    return NanobotConfig(
        server=server,
        storage=storage,
        robot=robot,
        identity=identity,
        logging=logging_config,
        raw=parser,
        path=config_path,
    )


def save_config(config: NanobotConfig) -> None:
    """Persist the current configuration to disk."""

    config_path = config.path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as stream:
        config.raw.write(stream)
