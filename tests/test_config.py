from pathlib import Path

import pytest

from nanobot import constants
from nanobot.config import load_config, save_config
from nanobot.errors import ConfigurationError


def test_load_config_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "nanobot.cfg")

    assert config.server.host == "127.0.0.1"
    assert config.server.port == 8080
    assert config.storage.backend == "file"
    assert config.storage.commands_path == constants.DEFAULT_COMMANDS_PATH
    assert config.robot.link == "simulated"
    assert config.robot.url is None
    assert config.robot.timeout_seconds == 10.0
    assert config.robot.simulated_delay_seconds == 0.1
    assert config.robot.baseline_temperature == 36.5
    assert config.identity.anonymous_policy == "default"
    assert config.identity.default_user_id == 0
    assert config.logging.level == "INFO"
    assert config.logging.log_network is False


def test_load_config_overrides_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "nanobot.cfg"
    config_path.write_text(
        """
[server]
host = 0.0.0.0
port = 9000

[storage]
backend = Memory
commands_path = ~/robot/commands.json

[robot]
link = http
url = http://robot.local/execute
timeout_seconds = 2.5

[identity]
anonymous_policy = reject
default_user_id = -3

[logging]
level = DEBUG
path =
""".strip()
        + "\n",
        encoding="utf-8",
    )

    config = load_config(config_path)

    assert config.server.host == "0.0.0.0"
    assert config.server.port == 9000
    assert config.storage.backend == "memory"
    assert config.storage.commands_path == Path.home() / "robot" / "commands.json"
    assert config.robot.link == "http"
    assert config.robot.url == "http://robot.local/execute"
    assert config.robot.timeout_seconds == 2.5
    assert config.identity.anonymous_policy == "reject"
    assert config.identity.default_user_id == 0
    assert config.logging.level == "DEBUG"
    assert config.logging.path is None


@pytest.mark.parametrize(
    "content",
    [
        "[storage]\nbackend = sqlite\n",
        "[robot]\nlink = carrier-pigeon\n",
        "[robot]\nlink = http\n",
        "[identity]\nanonymous_policy = maybe\n",
        "[server]\nport = eighty\n",
    ],
)
def test_load_config_rejects_invalid_values(tmp_path: Path, content: str) -> None:
    config_path = tmp_path / "nanobot.cfg"
    config_path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(config_path)


def test_save_config_round_trips(tmp_path: Path) -> None:
    config_path = tmp_path / "nested" / "nanobot.cfg"
    config = load_config(config_path)
    config.raw.set("server", "port", "8181")

    save_config(config)

    assert config_path.exists()
    assert load_config(config_path).server.port == 8181
