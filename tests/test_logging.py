import logging
from pathlib import Path

import pytest

from nanobot.logging import NETWORK_LOGGERS, configure_logging


@pytest.fixture
def isolated_root_logger():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    saved_network = {name: logging.getLogger(name).level for name in NETWORK_LOGGERS}
    for handler in saved_handlers:
        root.removeHandler(handler)

    yield root

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)
    for name, level in saved_network.items():
        logging.getLogger(name).setLevel(level)


def test_configure_logging_writes_to_file(isolated_root_logger, tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "nanobot.log"

    configure_logging("debug", log_path=log_path)
    logging.getLogger("nanobot.pipeline").debug("command %s logged", "abc123")
    for handler in isolated_root_logger.handlers:
        handler.flush()

    assert isolated_root_logger.level == logging.DEBUG
    content = log_path.read_text(encoding="utf-8")
    assert "| DEBUG | nanobot.pipeline | command abc123 logged" in content


def test_configure_logging_replaces_previous_handlers(isolated_root_logger, tmp_path: Path) -> None:
    configure_logging("INFO", log_path=tmp_path / "first.log")
    configure_logging("INFO", log_path=tmp_path / "second.log")

    file_handlers = [
        h for h in isolated_root_logger.handlers if isinstance(h, logging.FileHandler)
    ]
    assert len(file_handlers) == 1
    assert Path(file_handlers[0].baseFilename) == tmp_path / "second.log"


def test_network_loggers_follow_log_network(isolated_root_logger) -> None:
    configure_logging("INFO")
    assert all(logging.getLogger(n).level == logging.WARNING for n in NETWORK_LOGGERS)

    configure_logging("INFO", log_network=True)
    assert all(logging.getLogger(n).level == logging.NOTSET for n in NETWORK_LOGGERS)
