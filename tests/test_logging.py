# tests/test_logging.py

import json
import logging

import pytest
import structlog

from calfield import DAY_OF_MONTH, DAY_OF_WEEK, MONTH_OF_YEAR, YEAR, Calendrical, ConversionFailedError
from calfield.core.logging import configure_logging, get_logger


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    level = root.level
    yield
    for h in list(root.handlers):
        if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(h)
    root.setLevel(level)
    structlog.reset_defaults()


def _events(err: str):
    return [json.loads(line) for line in err.splitlines() if line.startswith("{")]


def test_json_events(capsys, restore_logging):
    configure_logging(level="DEBUG", json_format=True, service="calfield-test")
    Calendrical.of(YEAR, 2008, MONTH_OF_YEAR, 6, DAY_OF_MONTH, 30, DAY_OF_WEEK, 3).merge_lenient()

    events = _events(capsys.readouterr().err)
    names = [e["event"] for e in events]
    assert "field_dropped" in names
    assert "merge_completed" in names
    dropped = events[names.index("field_dropped")]
    assert dropped["rule"] == "ISO.DayOfWeek"
    assert dropped["service"] == "calfield-test"
    assert dropped["level"] == "debug"


def test_level_filters(capsys, restore_logging):
    configure_logging(level="WARNING", json_format=True)
    Calendrical.of(YEAR, 2008, MONTH_OF_YEAR, 6, DAY_OF_MONTH, 30).merge_strict()
    assert _events(capsys.readouterr().err) == []


def test_get_logger_binds_values(capsys, restore_logging):
    configure_logging(level="INFO", json_format=True, add_timestamp=False)
    get_logger("calfield.test", request="abc").info("hello")
    (event,) = _events(capsys.readouterr().err)
    assert event["event"] == "hello"
    assert event["request"] == "abc"
    assert event["logger"] == "calfield.test"
    assert "timestamp" not in event


def test_library_is_silent_without_configuration(capsys):
    cal = Calendrical.of(YEAR, 2008, MONTH_OF_YEAR, 6, DAY_OF_MONTH, 30, DAY_OF_WEEK, 3)
    assert cal.merge_lenient().to_local_date().day == 30
    assert cal.remove_derivable() is cal
    with pytest.raises(ConversionFailedError):
        cal.to_local_date()

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""
