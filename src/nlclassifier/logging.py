"""Logging setup for the nlclassifier CLI and library users."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import ConfigError, LoggingConfig

PACKAGE_LOGGER = "nlclassifier"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
MAIN_LOG_NAME = "nlclassifier.log"
DEBUG_LOG_NAME = "debug.log"
_HANDLER_MARKER = "_nlclassifier_handler"


class ConsoleFormatter(logging.Formatter):
    """Prefixes each message with a one-letter level symbol, coloured on a tty."""

    SYMBOLS: dict[int, tuple[str, str]] = {
        logging.DEBUG: ("D", "\x1b[36m"),
        logging.INFO: ("I", "\x1b[32m"),
        logging.WARNING: ("!", "\x1b[33m"),
        logging.ERROR: ("X", "\x1b[31m"),
        logging.CRITICAL: ("X", "\x1b[35m"),
    }

    RESET = "\x1b[0m"

    def __init__(self, use_color: bool) -> None:
        super().__init__("%(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        symbol, color = self.SYMBOLS.get(record.levelno, ("?", "\x1b[37m"))
        message = super().format(record)
        if self.use_color:
            return f"{color}{symbol}{self.RESET} {message}"
        return f"{symbol} {message}"


def configure_logging(
    logging_config: LoggingConfig,
    root_dir: Path | None = None,
    *,
    console: bool = True,
) -> logging.Logger:
    """Attach handlers to the ``nlclassifier`` logger and return it.

    Handlers installed by an earlier call are replaced, so repeated calls do
    not duplicate output. The root logger is left alone.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level_from_string(logging_config.level))
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = []
    if console:
        handlers.append(_build_console_handler())
    if root_dir is not None:
        log_dir = (root_dir / "logs").expanduser()
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(_build_file_handler(log_dir / MAIN_LOG_NAME, level=logging.INFO))
        if logging_config.debug_file:
            handlers.append(_build_file_handler(log_dir / DEBUG_LOG_NAME, level=logging.DEBUG))

    for handler in handlers:
        setattr(handler, _HANDLER_MARKER, True)
        logger.addHandler(handler)
    logger.propagate = not handlers
    return logger


def level_from_string(level: str) -> int:
    normalized = level.strip().upper()
    if normalized == "WARN":
        normalized = "WARNING"
    value = logging.getLevelName(normalized)
    if not isinstance(value, int):
        raise ConfigError(f"Unknown log level: {level}")
    return value


def _build_file_handler(path: Path, level: int) -> logging.Handler:
    handler = RotatingFileHandler(path, maxBytes=5_000_000, backupCount=5, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def _build_console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG)
    stream = getattr(handler, "stream", None)
    use_color = bool(getattr(stream, "isatty", lambda: False)())
    handler.setFormatter(ConsoleFormatter(use_color))
    return handler


__all__ = ["ConsoleFormatter", "configure_logging", "level_from_string"]
