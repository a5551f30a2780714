"""Root logger setup shared by the API server and the ledger CLI.

Records go to stdout and, when a path is given, to a log file. The level comes
from ``settings.log_level`` (``LOG_LEVEL`` in the environment or ``.env``)
unless the caller passes one explicitly.
"""

import logging
import sys
from pathlib import Path

from src.services.config import settings

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_log_level(level_name: str | None = None) -> int:
    """Resolve a level name to a logging constant.

    Args:
        level_name: Level name such as "DEBUG"; None means settings.log_level

    Returns:
        Logging level constant (unknown names resolve to INFO)
    """
    name = (level_name or settings.log_level).upper()
    return LOG_LEVEL_MAP.get(name, logging.INFO)


def _handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_server_logging(
    log_file: str | None = None, level: str | None = None
) -> None:
    """Replace the root logger's handlers with stdout and an optional file.

    Args:
        log_file: Log file path (parent directories are created), or None
        level: Level name; defaults to settings.log_level
    """
    log_level = get_log_level(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    root_logger.addHandler(_handler(logging.StreamHandler(sys.stdout), log_level, formatter))

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        root_logger.addHandler(_handler(logging.FileHandler(log_path), log_level, formatter))
