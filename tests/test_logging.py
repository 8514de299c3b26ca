from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from codecraft.core.config import ConfigManager
from codecraft.core.logging import configure_logging, logging_options, reset_logging


@pytest.fixture
def root_level():
    previous = logging.getLogger().level
    yield
    reset_logging()
    logging.getLogger().setLevel(previous)


def _rotating_handlers() -> list[RotatingFileHandler]:
    return [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]


def test_configure_logging_targets_requested_file(tmp_path: Path, root_level) -> None:
    log_path = tmp_path / "logs" / "mentor.log"

    handler = configure_logging(logging.DEBUG, log_file=log_path, max_bytes=1024, backup_count=2)
    logging.getLogger("codecraft.tests").info("mentor panel created")
    handler.flush()

    assert _rotating_handlers() == [handler]
    assert Path(handler.baseFilename) == log_path
    assert (handler.maxBytes, handler.backupCount) == (1024, 2)
    assert "mentor panel created" in log_path.read_text(encoding="utf-8")


def test_configure_logging_replaces_its_own_handlers(tmp_path: Path, root_level) -> None:
    first = configure_logging(log_file=tmp_path / "first.log")
    second = configure_logging("warning", log_file=tmp_path / "second.log")

    assert _rotating_handlers() == [second]
    assert first.stream is None
    assert logging.getLogger().level == logging.WARNING


def test_logging_options_from_settings(tmp_path: Path) -> None:
    defaults = logging_options(ConfigManager(user_settings_path=tmp_path / "none.yaml").section("logging"))
    assert defaults == {"level": "INFO", "log_file": None, "max_bytes": 512000, "backup_count": 5}

    custom = logging_options({"level": "debug", "file": str(tmp_path / "m.log"), "backup_count": "2"})
    assert custom["level"] == "debug"
    assert custom["log_file"] == str(tmp_path / "m.log")
    assert custom["backup_count"] == 2

    assert logging_options({"level": "loud"})["level"] == logging.INFO
    assert logging_options({"level": "error"}, verbose=True)["level"] == logging.DEBUG
