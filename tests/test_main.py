"""Tests for the unit entry points and the local simulation harness."""

import pytest

from lib.config import RequestConfig
from lib.encoding import decode_result
from lib.errors import ValidationError
from lib.fetcher import HttpResponse
from lib.simulator import capture_output, simulate
from main import calculate_insurance, check_claim, simulate_request

from conftest import QUERY_ARGS, FakeHttpGet, make_record


URL_SECRETS = {"flightDataUrl": "https://feed.example/flights"}


# ---------------------------------------------------------------------------
# Endpoint 1: calculate_insurance
# ---------------------------------------------------------------------------

def test_calculate_insurance_uint256():
    payload = calculate_insurance(["300", "10000", "Delayed"])
    assert int.from_bytes(payload, "big") == 12_000


def test_calculate_insurance_cancelled():
    payload = calculate_insurance(["300", "10000", "Cancelled"])
    assert int.from_bytes(payload, "big") == 20_000


def test_calculate_insurance_string_keeps_fraction():
    payload = calculate_insurance(["195", "105", "Delayed"], return_type="string")
    assert float(payload.decode()) == pytest.approx(110.25)


def test_calculate_insurance_uint256_truncates():
    payload = calculate_insurance(["195", "105", "Delayed"])
    assert int.from_bytes(payload, "big") == 110


def test_calculate_insurance_bad_argument_is_invalid_output():
    with pytest.raises(ValidationError, match="invalid output"):
        calculate_insurance(["300", "ten thousand", "Delayed"])


# ---------------------------------------------------------------------------
# Endpoint 2: check_claim
# ---------------------------------------------------------------------------

def test_check_claim_list_mode(three_flight_feed):
    payload = check_claim(QUERY_ARGS, URL_SECRETS, FakeHttpGet(data=three_flight_feed))
    assert payload.decode() == '[{"isClaimable":true,"delayMinutes":200}]'


def test_check_claim_first_delay_mode(three_flight_feed):
    payload = check_claim(
        QUERY_ARGS, URL_SECRETS, FakeHttpGet(data=three_flight_feed), mode="first_delay",
    )
    assert int.from_bytes(payload, "big") == 200
    assert len(payload) == 32


# ---------------------------------------------------------------------------
# Endpoint 3: simulate_request
# ---------------------------------------------------------------------------

def test_simulate_calculate_insurance():
    cfg = RequestConfig.from_dict({
        "unit": "calculate_insurance",
        "args": ["300", "10000", "Delayed"],
        "expected_return_type": "string",
    })
    result = simulate_request(cfg)
    assert result.ok
    assert decode_result(result.response_hex, "string") == "12000"
    assert "Insurance Value: 12000" in result.captured_output


def test_simulate_reports_unit_error_with_prior_output():
    cfg = RequestConfig.from_dict({
        "unit": "calculate_insurance",
        "args": ["300", "abc", "Delayed"],
    })
    result = simulate_request(cfg)
    assert result.response_hex is None
    assert result.error_string.startswith("ValidationError: invalid output")
    assert "Insurance Value: nan" in result.captured_output


def test_simulate_check_claim(three_flight_feed):
    cfg = RequestConfig.from_dict({
        "unit": "check_claim", "args": QUERY_ARGS, "secrets": URL_SECRETS,
    })
    result = simulate_request(cfg, http_get=FakeHttpGet(data=three_flight_feed))
    assert decode_result(result.response_hex, "string") == (
        '[{"isClaimable":true,"delayMinutes":200}]'
    )


def test_simulate_missing_secret_makes_no_request():
    cfg = RequestConfig.from_dict({"unit": "check_claim", "args": QUERY_ARGS})
    http = FakeHttpGet(data=[make_record()])
    result = simulate_request(cfg, http_get=http)
    assert result.error_string == "ConfigError: missing feed URL"
    assert http.calls == []


@pytest.mark.parametrize("mode", ["list", "first_delay"])
def test_simulate_not_found(mode):
    cfg = RequestConfig.from_dict({
        "unit": "check_claim", "args": QUERY_ARGS, "secrets": URL_SECRETS, "mode": mode,
    })
    feed = FakeHttpGet(data=[make_record(flightNumber="ZZ9")])
    result = simulate_request(cfg, http_get=feed)
    assert result.error_string == "NotFoundError: no matching flights"


def test_simulate_upstream_no_payload():
    cfg = RequestConfig.from_dict({
        "unit": "check_claim", "args": QUERY_ARGS, "secrets": URL_SECRETS,
    })
    result = simulate_request(cfg, http_get=FakeHttpGet(response=HttpResponse(status=200)))
    assert result.error_string == "UpstreamError: no data in response"


def test_simulate_propagates_unexpected_errors():
    cfg = RequestConfig.from_dict({
        "unit": "check_claim", "args": QUERY_ARGS, "secrets": URL_SECRETS,
    })
    with pytest.raises(RuntimeError):
        simulate_request(cfg, http_get=FakeHttpGet(error=RuntimeError("boom")))


# ---------------------------------------------------------------------------
# Capture helper
# ---------------------------------------------------------------------------

def test_capture_output_restores_root_level():
    import logging

    root = logging.getLogger()
    before = root.level
    with capture_output() as lines:
        logging.getLogger("some.module").info("hello %s", "world")
    assert lines == ["hello world"]
    assert root.level == before


def test_simulate_wraps_plain_callable():
    result = simulate(lambda: b"\x00\x01")
    assert result.response_hex == "0x0001"
    assert result.captured_output == ""
