"""Logging configuration with optional daily rotating JSON logs."""

import json
import logging
import logging.handlers
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from .config import Settings

PACKAGE_LOGGER = "deckodds"


class JSONFormatter(logging.Formatter):
    """Custom formatter that outputs structured JSON logs."""

    def format(self, record):
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "function": getattr(record, "function", None),
            "input_params": getattr(record, "input_params", None),
            "execution_time_ms": getattr(record, "execution_time_ms", None),
            "success": getattr(record, "success", None),
            "error": getattr(record, "error", None),
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Remove None values to keep logs clean
        log_data = {k: v for k, v in log_data.items() if v is not None}

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(
    level: Optional[Union[int, str]] = None,
    log_dir: Optional[Union[str, Path]] = None,
    console: bool = True,
) -> logging.Logger:
    """
    Configure the package logger.

    The library never calls this itself; applications embedding it decide
    where logs go.

    Args:
        level: Logging level name or number (None = DECKODDS_LOG_LEVEL)
        log_dir: Directory for daily rotating JSON logs (None = no file log)
        console: Whether to log human-readable lines to stderr

    Returns:
        The configured "deckodds" logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if level is None:
        level = Settings.from_env().log_level
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logger.setLevel(level)

    # Drop handlers from a previous call, keep the NullHandler
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        handler = logging.handlers.TimedRotatingFileHandler(
            filename=str(log_dir / "deckodds.log"),
            when="midnight",
            interval=1,
            backupCount=30,  # Keep 30 days of logs
            encoding="utf-8",
            utc=True,
        )
        # Set filename suffix for rotated files (YYYY-MM-DD)
        handler.suffix = "%Y-%m-%d"
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)

    # Prevent duplicate logs from propagating to root logger
    logger.propagate = False

    return logger
