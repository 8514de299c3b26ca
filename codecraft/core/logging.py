"""Logging setup for the mentor application.

``configure_logging`` installs one console handler and one rotating file
handler on the root logger. Calling it again replaces the handlers it
installed before and leaves foreign handlers (pytest's capture handler, for
instance) alone. ``logging_options`` reads the ``logging`` section of the
YAML settings.
"""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import os
import sys
from pathlib import Path
from typing import Any, Mapping

LOG_DIR = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "codecraft" / "logs"
LOG_FILE = LOG_DIR / "codecraft.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_installed: list[logging.Handler] = []


def configure_logging(
    level: int | str = logging.INFO,
    log_file: Path | str | None = None,
    max_bytes: int = 512_000,
    backup_count: int = 5,
) -> RotatingFileHandler:
    """Route records to stdout and to ``log_file`` (default ``LOG_FILE``)."""

    target = Path(log_file).expanduser() if log_file else LOG_FILE
    target.parent.mkdir(parents=True, exist_ok=True)

    reset_logging()
    formatter = logging.Formatter(LOG_FORMAT)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    file_handler = RotatingFileHandler(target, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper() if isinstance(level, str) else level)
    for handler in (console_handler, file_handler):
        root_logger.addHandler(handler)
        _installed.append(handler)
    return file_handler


def reset_logging() -> None:
    """Remove and close the handlers installed by ``configure_logging``."""

    root_logger = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root_logger.removeHandler(handler)
        handler.close()


def logging_options(settings: Mapping[str, Any], verbose: bool = False) -> dict[str, Any]:
    """Translate the ``logging`` settings section into ``configure_logging`` kwargs."""

    level = settings.get("level", "INFO")
    if verbose:
        level = logging.DEBUG
    elif not isinstance(logging.getLevelName(str(level).upper()), int):
        level = logging.INFO
    return {
        "level": level,
        "log_file": settings.get("file") or None,
        "max_bytes": int(settings.get("max_bytes", 512_000)),
        "backup_count": int(settings.get("backup_count", 5)),
    }
