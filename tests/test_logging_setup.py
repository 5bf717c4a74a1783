import json
import logging

import pytest

from lib.logging_setup import JsonFormatter, record_context, setup_logging
from main import calculate_insurance, check_claim

from conftest import QUERY_ARGS, FakeHttpGet


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        "main", logging.INFO, __file__, 1, "Insurance Value: %s", (12000,), None,
    )
    record.unit = "calculate_insurance"
    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "Insurance Value: 12000"
    assert payload["level"] == "INFO"
    assert payload["unit"] == "calculate_insurance"


def test_setup_logging_replaces_handlers(restore_root) -> None:
    setup_logging("DEBUG", json_logs=False)
    setup_logging("WARNING", json_logs=True)
    assert len(restore_root.handlers) == 1
    handler = restore_root.handlers[0]
    assert isinstance(handler.formatter, JsonFormatter)
    assert handler.level == logging.WARNING
    assert restore_root.level == logging.WARNING


def test_json_formatter_puts_unit_context_first() -> None:
    record = logging.LogRecord(
        "main", logging.INFO, __file__, 1, "Delay minutes: %s", (200,), None,
    )
    record.request_id = "r-1"
    record.mode = "first_delay"
    record.unit = "check_claim"
    payload = json.loads(JsonFormatter().format(record))
    assert list(payload) == ["ts", "level", "logger", "unit", "mode", "request_id", "msg"]


def test_setup_logging_unknown_level_falls_back_to_warning(restore_root) -> None:
    handler = setup_logging("chatty")
    assert handler.level == logging.WARNING
    assert restore_root.level == logging.WARNING


@pytest.mark.parametrize("args, unit, mode", [
    (["300", "10000", "Delayed"], "calculate_insurance", "status_aware"),
    (["300", "10000", "Cancelled"], "calculate_insurance", "delay_only"),
])
def test_insurance_result_line_carries_unit_context(caplog, args, unit, mode) -> None:
    with caplog.at_level(logging.INFO, logger="main"):
        calculate_insurance(args, mode=mode)
    record = [r for r in caplog.records if r.name == "main"][-1]
    assert (record.unit, record.mode) == (unit, mode)
    assert record_context(record) == {"unit": unit, "mode": mode}


@pytest.mark.parametrize("mode", ["list", "first_delay"])
def test_claim_result_line_carries_unit_context(caplog, three_flight_feed, mode) -> None:
    with caplog.at_level(logging.INFO, logger="main"):
        check_claim(
            QUERY_ARGS, {"flightDataUrl": "https://x"},
            http_get=FakeHttpGet(data=three_flight_feed), mode=mode,
        )
    record = [r for r in caplog.records if r.name == "main"][-1]
    payload = json.loads(JsonFormatter().format(record))
    assert payload["unit"] == "check_claim"
    assert payload["mode"] == mode
