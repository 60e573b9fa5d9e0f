"""Console logging for portfolio-history.

Logs go to stderr so that ``history --json`` keeps stdout machine readable.
"""

import logging
import os
import sys
from typing import TextIO

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

NOISY_LOGGERS = ("urllib3", "httpx", "uvicorn.access")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Formatter that paints the level name with ANSI codes."""

    LEVEL_COLORS = {
        TRACE: "\033[90m",
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;35m",
    }
    RESET = "\033[0m"

    def __init__(self, *args, use_color: bool = True, **kwargs):
        super().__init__(*args, **kwargs)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if not self.use_color or color is None:
            return super().format(record)

        levelname = record.levelname
        record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _resolve_level(level: str | None) -> tuple[str, int]:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        return "INFO", logging.INFO
    return name, numeric


def setup_logging(level: str | None = None, stream: TextIO | None = None) -> None:
    """Configure root logging.

    Uses ``level`` when given, otherwise LOG_LEVEL (default INFO). Colors are
    only emitted when the target stream is a terminal.

    At DEBUG the HTTP client and access loggers stay at WARNING; TRACE lets
    them through as well.
    """
    name, numeric = _resolve_level(level)
    stream = stream or sys.stderr

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        ColoredFormatter(
            fmt=LOG_FORMAT,
            datefmt=DATE_FORMAT,
            use_color=hasattr(stream, "isatty") and stream.isatty(),
        )
    )
    logging.basicConfig(level=numeric, handlers=[handler], force=True)

    if name == "DEBUG":
        for noisy in NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)
    elif name == "TRACE":
        for noisy in NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(TRACE)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
