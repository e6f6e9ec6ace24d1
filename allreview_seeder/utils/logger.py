"""Logging setup: console plus optional rotating run log."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "allreview_seeder"

# httpx logs every request at INFO; a full run makes hundreds of them.
HTTP_LOGGERS = ("httpx", "httpcore")


def setup_logger(
    name: str = LOGGER_NAME,
    level: str = "INFO",
    log_file: str | None = None,
    max_size_mb: int = 10,
    backup_count: int = 5,
) -> logging.Logger:
    """Configure the seeder logger.

    Repeated calls only update the level, so CLI commands can call this on
    every invocation without stacking handlers.
    """
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)
    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    http_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for http_logger in HTTP_LOGGERS:
        logging.getLogger(http_logger).setLevel(http_level)

    if logger.handlers:
        return logger

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    logger.addHandler(console)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=int(max_size_mb) * 1024 * 1024,
            backupCount=int(backup_count),
            encoding="utf-8",
        )
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    return logging.getLogger(name)
