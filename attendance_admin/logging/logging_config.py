import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List

from ..config.config import settings

LOG_FORMAT = "%(asctime)s - [%(name)s] - %(levelname)s - %(message)s"
LOG_FILE_NAME = "attendance-admin.log"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def _build_handlers(formatter: logging.Formatter) -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    handlers: List[logging.Handler] = [console]

    # An empty LOG_DIR means console only (containers, tests).
    if settings.LOG_DIR:
        log_dir = Path(settings.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(
            log_dir / LOG_FILE_NAME, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8"
        )
        rotating.setFormatter(formatter)
        handlers.append(rotating)
    return handlers


def setup_logging() -> None:
    """
    Configures the root logger for the API process and the migrate command.

    Safe to call more than once: existing root handlers are closed and replaced.
    Loggers named in QUIET_LOGGERS are held at WARNING so request access lines
    and driver chatter do not drown the service logs.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in _build_handlers(formatter):
        root.addHandler(handler)

    for name in settings.QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
