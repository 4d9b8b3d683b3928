# n8nflow/utils/logger.py
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler

ROOT_LOGGER = "n8nflow"

_LEVEL_MAP = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARN,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}

_initialized = False


def _env_level(default: str = "INFO") -> int:
    """Read LOG_LEVEL from env, fallback to default."""
    lvl = os.getenv("LOG_LEVEL", default).upper()
    return _LEVEL_MAP.get(lvl, logging.INFO)


def _colorize(level: int, msg: str) -> str:
    if not sys.stderr.isatty():
        return msg
    if level >= logging.ERROR:
        return f"\033[91m{msg}\033[0m"   # red
    if level >= logging.WARNING:
        return f"\033[93m{msg}\033[0m"   # yellow
    return msg


class _ColorFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return _colorize(record.levelno, super().format(record))


def init_logger(
    level: int | None = None,
    log_dir: str | Path | None = None,
    file_name: str = "n8nflow.log",
    file_max_mb: int = 5,
    file_backup: int = 3,
) -> logging.Logger:
    """
    Configure the package logger:
      - colored stream handler on stderr (stdout carries CLI output)
      - rotating file handler when log_dir (or LOG_DIR) is set
    Safe to call repeatedly; handlers are replaced, not stacked.
    """
    global _initialized

    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.propagate = False
    logger.setLevel(level if level is not None else _env_level("INFO"))

    fmt = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(logger.level)
    sh.setFormatter(_ColorFormatter(fmt=fmt, datefmt=datefmt))
    logger.addHandler(sh)

    log_dir = log_dir or os.getenv("LOG_DIR")
    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            filename=str(log_dir / file_name),
            maxBytes=file_max_mb * 1024 * 1024,
            backupCount=file_backup,
            encoding="utf-8",
        )
        fh.setLevel(logger.level)
        fh.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
        logger.addHandler(fh)

    _initialized = True
    return logger


def get_logger(child: str) -> logging.Logger:
    """Create/get a child logger under the package logger."""
    # Library code only attaches handlers once; the CLI re-inits with its own level.
    if not _initialized:
        init_logger()
    return logging.getLogger(ROOT_LOGGER).getChild(child)
