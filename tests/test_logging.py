import json
import logging

import pytest

from upspin_config.logging import JsonFormatter, configure_logging, get_logger


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord("upspin.config", logging.ERROR, __file__, 1, "bad %s", ("endpoint",), None)
    record.config_key = "dirserver"

    data = json.loads(JsonFormatter().format(record))

    assert data["level"] == "ERROR"
    assert data["logger"] == "upspin.config"
    assert data["message"] == "bad endpoint"
    assert data["config_key"] == "dirserver"
    assert "msg" not in data


def test_configure_logging_sets_upspin_level() -> None:
    configure_logging("debug", "json")

    logger = get_logger("upspin")
    assert logger.level == logging.DEBUG
    assert isinstance(logger.handlers[0].formatter, JsonFormatter)


def test_configure_logging_rejects_unknown_level() -> None:
    with pytest.raises(ValueError, match="log level"):
        configure_logging("chatty")


def test_json_format_writes_json_lines(capsys) -> None:
    configure_logging("INFO", "json")

    get_logger("upspin.config").info("loaded", extra={"config_key": "dirserver"})

    data = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert data["message"] == "loaded"
    assert data["config_key"] == "dirserver"
