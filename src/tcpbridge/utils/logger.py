"""
Logging helpers built on loguru.

Every module obtains its logger through ``get_logger(__name__)`` so that
records carry the originating module name.
"""

import sys
import traceback

from loguru import logger as _logger

from tcpbridge.models.enums import LogLevel

_LEVEL_MAP = {
    LogLevel.FULL: "TRACE",
    LogLevel.DEBUG: "DEBUG",
    LogLevel.INFO: "INFO",
    LogLevel.WARNING: "WARNING",
}

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)

# Records logged before get_logger() binds a name still need extra[name]
_logger.configure(extra={"name": "tcpbridge"})


def get_logger(name: str):
    """Return the shared loguru logger bound to a module name."""
    return _logger.bind(name=name)


def configure_logging(level: LogLevel = LogLevel.INFO) -> None:
    """
    Replace loguru's default sink with a single stderr sink.

    Args:
        level: Verbosity; FULL enables per-chunk trace records.
    """
    _logger.remove()
    _logger.add(
        sys.stderr,
        level=_LEVEL_MAP.get(level, "INFO"),
        format=_FORMAT,
        backtrace=level == LogLevel.FULL,
        diagnose=False,
    )


def format_traceback(exc: BaseException) -> str:
    """Format an exception with its traceback as a single string."""
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
