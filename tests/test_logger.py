from loguru import logger

from tcpbridge.models.enums import LogLevel
from tcpbridge.utils.logger import configure_logging, format_traceback, get_logger


def test_get_logger_binds_module_name():
    records = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    try:
        get_logger("tcpbridge.relay.pump").info("forwarded")
    finally:
        logger.remove(sink_id)

    assert records[0]["extra"]["name"] == "tcpbridge.relay.pump"
    assert records[0]["message"] == "forwarded"


def test_configure_logging_accepts_every_level():
    for level in LogLevel:
        configure_logging(level)
    configure_logging(LogLevel.INFO)


def test_format_traceback_includes_exception():
    try:
        raise ConnectionResetError("reset by peer")
    except ConnectionResetError as e:
        text = format_traceback(e)

    assert "Traceback" in text
    assert "ConnectionResetError: reset by peer" in text
