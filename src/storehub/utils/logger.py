import logging
import os

from rich.console import Console
from rich.logging import RichHandler

_log_console: Console | None = None
_debug = bool(os.getenv("DEBUG"))
_loggers: list[logging.Logger] = []


class CenteredFormatter(logging.Formatter):
    longest_name_length = 14  # grows with the longest logger name seen

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=14):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = initial_width

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )
        width = CenteredFormatter.longest_name_length
        record.name = record.name.center(width)
        return super().format(record)


def _console() -> Console:
    """
    Console shared by all handlers.
    The TUI owns the terminal, so STOREHUB_LOG_FILE redirects logs to a file.
    """
    global _log_console
    if _log_console is None:
        log_file = os.getenv("STOREHUB_LOG_FILE")
        if log_file:
            _log_console = Console(file=open(log_file, "a"), width=120)
        else:
            _log_console = Console(stderr=True)
    return _log_console


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger configured with RichHandler for rich output.
    DEBUG in the environment, or set_debug(True), lowers the level to logging.DEBUG.
    """
    if name is None:
        name = "storehub"
    logger = logging.getLogger(name)
    log_level = logging.DEBUG if _debug else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        formatter = CenteredFormatter("[%(name)s]  %(message)s")

        handler = RichHandler(
            console=_console(),
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        logger.addHandler(handler)

        logger.propagate = False
        _loggers.append(logger)
        logger.debug(f"Logger for '{name}' initialized.")

    return logger


def set_debug(enabled: bool) -> None:
    """Switch every logger made by get_logger, and later ones, to DEBUG or INFO."""
    global _debug
    _debug = enabled
    level = logging.DEBUG if enabled else logging.INFO
    for logger in _loggers:
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
