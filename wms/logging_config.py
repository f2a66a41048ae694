"""
Logging setup for the warehouse service.

Everything logs below the ``wms`` logger. ``setup_logging`` attaches a
stdout handler and rotating files in ``settings.log_dir``:

- ``app.log``: everything from DEBUG up
- ``error.log``: ERROR and above
- ``movements.log``: stock postings, stock takes and purchase orders
"""
import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler

from .core.config import settings

ROOT_LOGGER = "wms"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
MOVEMENT_FORMAT = "%(asctime)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers whose INFO records also go to movements.log
MOVEMENT_LOGGERS = ("inventory", "opname", "purchase")


class _MovementFilter(logging.Filter):
    def __init__(self, names):
        super().__init__()
        self.prefixes = tuple(f"{ROOT_LOGGER}.{name}" for name in names)

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name.startswith(self.prefixes)


def _rotating_file(log_dir: Path, filename: str, level: int, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=settings.log_max_bytes,
        backupCount=settings.log_backup_count,
        encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, DATE_FORMAT))
    return handler


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Configure the ``wms`` logger once per process.

    Args:
        log_level: Level name for the root application logger

    Returns:
        The configured ``wms`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.getLevelName(log_level.upper()))

    if logger.handlers:
        return logger

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    movements = _rotating_file(log_dir, "movements.log", logging.INFO, MOVEMENT_FORMAT)
    movements.addFilter(_MovementFilter(MOVEMENT_LOGGERS))

    logger.addHandler(console)
    logger.addHandler(_rotating_file(log_dir, "app.log", logging.DEBUG, LOG_FORMAT))
    logger.addHandler(_rotating_file(log_dir, "error.log", logging.ERROR, LOG_FORMAT))
    logger.addHandler(movements)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for one component, e.g. ``get_logger("inventory")``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
