import json
import logging
import sys

import pytest

from campaign_dashboard.logging_config import JSONFormatter, configure_logging


def _record(msg="ad set %s deleted", args=("abc",), exc_info=None):
    return logging.LogRecord(
        name="campaign_dashboard.services.hierarchy",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=exc_info,
    )


def test_json_formatter_emits_one_object_per_line():
    line = JSONFormatter().format(_record())

    assert "\n" not in line
    entry = json.loads(line)
    assert set(entry) == {"timestamp", "level", "logger", "message"}
    assert entry["level"] == "WARNING"
    assert entry["logger"] == "campaign_dashboard.services.hierarchy"
    assert entry["message"] == "ad set abc deleted"


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("commit failed")
    except RuntimeError:
        exc_info = sys.exc_info()

    entry = json.loads(JSONFormatter().format(_record("store failure", (), exc_info)))

    assert "RuntimeError: commit failed" in entry["exception"]


@pytest.fixture
def package_logger():
    logger = logging.getLogger("campaign_dashboard")
    saved_handlers, saved_level = logger.handlers[:], logger.level
    logger.handlers.clear()
    yield logger
    logger.handlers[:] = saved_handlers
    logger.setLevel(saved_level)


def test_configure_logging_json_lines(package_logger):
    logger = configure_logging(level="debug", json_lines=True)

    assert logger is package_logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, JSONFormatter)


def test_configure_logging_is_idempotent(package_logger):
    configure_logging(level="info", json_lines=False)
    configure_logging(level="warning", json_lines=True)

    assert len(package_logger.handlers) == 1
    assert not isinstance(package_logger.handlers[0].formatter, JSONFormatter)
    assert package_logger.level == logging.WARNING


def test_configure_logging_reads_settings(package_logger, monkeypatch):
    from campaign_dashboard import logging_config

    monkeypatch.setattr(logging_config.settings, "LOG_JSON", True)
    monkeypatch.setattr(logging_config.settings, "LOG_LEVEL", "ERROR")

    configure_logging()

    assert isinstance(package_logger.handlers[0].formatter, JSONFormatter)
    assert package_logger.level == logging.ERROR
