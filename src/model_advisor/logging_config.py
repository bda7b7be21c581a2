import copy
import logging
import sys
from typing import TextIO

from model_advisor.config import settings

LOG_FORMAT = (
    "%(asctime)s.%(msecs)03d | %(levelname)-8s | "
    "%(name)s | %(module)s.%(funcName)s:%(lineno)d | %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ANSI_RESET = "\033[0m"
ANSI_BY_LEVEL = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}

# Third-party loggers kept at WARNING
QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "httpx", "httpcore", "asyncio")


class ColorFormatter(logging.Formatter):
    """Colors the level name; the record seen by other handlers is left untouched."""

    def format(self, record: logging.LogRecord) -> str:
        color = ANSI_BY_LEVEL.get(record.levelno)
        if color is None:
            return super().format(record)
        tinted = copy.copy(record)
        tinted.levelname = f"{color}{record.levelname}{ANSI_RESET}"
        return super().format(tinted)


def build_handler(stream: TextIO | None = None) -> logging.Handler:
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(ColorFormatter(LOG_FORMAT, DATE_FORMAT))
    return handler


def setup_logging(level: str | None = None, stream: TextIO | None = None):
    """Install the colored handler as the only root handler.

    Uvicorn configures its own handlers on startup, so existing root handlers
    are replaced rather than added to.
    """
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        handlers=[build_handler(stream)],
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
