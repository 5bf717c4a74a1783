"""
Flight Delay Insurance Oracle - unit entry points.

Three endpoint functions:
    1. calculate_insurance() - adjusted payout from delay / status arguments
    2. check_claim()         - fetch flight feed + derive claim eligibility
    3. simulate_request()    - run a request configuration locally and
                               capture what an oracle node would report
"""

from __future__ import annotations

import logging
from typing import Optional

from lib.claims import MODE_LIST, check_claim as _check_claim, claim_results_to_json
from lib.config import (
    UNIT_CALCULATE_INSURANCE,
    UNIT_CHECK_CLAIM,
    RequestConfig,
)
from lib.encoding import RETURN_STRING, RETURN_UINT256, encode_result
from lib.errors import ConfigError
from lib.fetcher import HttpGet, RequestsHttpGet
from lib.insurance_math import (
    MODE_STATUS_AWARE,
    calculate_insurance_value,
    parse_insurance_args,
)
from lib.models import ClaimQuery
from lib.simulator import SimulationResult, simulate

logger = logging.getLogger(__name__)


# ── Endpoint 1: Insurance value ──────────────────────────────────────

def calculate_insurance(
    args: list[str],
    mode: str = MODE_STATUS_AWARE,
    return_type: str = RETURN_UINT256,
) -> bytes:
    """
    Compute the adjusted insurance value and encode it.

    Parameters
    ----------
    args : list of str
        [delay_minutes, base_value, status], as passed to the oracle.
    mode : str
        "status_aware" (default) or the superseded "delay_only".
    return_type : str
        "uint256" (truncated integer) or "string" (full decimal value).

    Returns
    -------
    bytes, the encoded value.  A NaN value (unparseable argument) raises
    ValidationError at encoding time.
    """
    delay, base_value, status = parse_insurance_args(args)
    value = calculate_insurance_value(base_value, delay, status, mode=mode)
    logger.info(
        "Insurance Value: %s", value,
        extra={"unit": UNIT_CALCULATE_INSURANCE, "mode": mode},
    )
    return encode_result(value, return_type)


# ── Endpoint 2: Claim check ──────────────────────────────────────────

def check_claim(
    args: list[str],
    secrets: dict,
    http_get: Optional[HttpGet] = None,
    mode: str = MODE_LIST,
) -> bytes:
    """
    Look the flight up in the feed named by ``secrets["flightDataUrl"]``.

    Parameters
    ----------
    args : list of str
        Flight number, airline, departure airport, departure datetime,
        arrival airport, arrival datetime.
    secrets : dict
        Must carry a non-empty ``flightDataUrl``.
    http_get : HttpGet, optional
        Fetch capability; defaults to a live ``RequestsHttpGet``.
    mode : str
        "list" -> JSON text of [{isClaimable, delayMinutes}, ...] (string).
        "first_delay" -> delay of the first match (uint256).
    """
    query = ClaimQuery.from_args(args)
    if http_get is None:
        http_get = RequestsHttpGet()

    result = _check_claim(query, secrets.get("flightDataUrl", ""), http_get, mode=mode)
    context = {"unit": UNIT_CHECK_CLAIM, "mode": mode}

    if mode == MODE_LIST:
        text = claim_results_to_json(result)
        logger.info("Claim results: %s", text, extra=context)
        return encode_result(text, RETURN_STRING)

    logger.info("Delay minutes: %s", result, extra=context)
    return encode_result(result, RETURN_UINT256)


# ── Endpoint 3: Local simulation ─────────────────────────────────────

def simulate_request(
    config: RequestConfig,
    http_get: Optional[HttpGet] = None,
) -> SimulationResult:
    """
    Run one request configuration the way an oracle node would.

    Unit failures (ConfigError, UpstreamError, NotFoundError,
    ValidationError) are reported in ``error_string`` together with the
    output captured before the failure.  Anything else propagates.
    """
    if config.unit == UNIT_CALCULATE_INSURANCE:
        def unit() -> bytes:
            return calculate_insurance(
                config.args, mode=config.mode, return_type=config.expected_return_type,
            )
    elif config.unit == UNIT_CHECK_CLAIM:
        def unit() -> bytes:
            return check_claim(
                config.args, config.secrets, http_get=http_get, mode=config.mode,
            )
    else:
        raise ConfigError(f"Unknown unit: '{config.unit}'")

    logger.debug("simulating %s (%s mode)", config.unit, config.mode)
    return simulate(unit)
