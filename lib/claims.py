"""Claim eligibility check against an external flight-status feed."""

from __future__ import annotations

import json
import logging
import math

from lib.errors import ConfigError, NotFoundError, UpstreamError, ValidationError
from lib.fetcher import JSON_HEADERS, HttpGet
from lib.models import CANCELLED_STATUS, DELAY_THRESHOLD_MINUTES, ClaimQuery

logger = logging.getLogger(__name__)


# ── Output modes ──────────────────────────────────────────────────────

# Mode A: one {isClaimable, delayMinutes} entry per matching flight.
MODE_LIST = "list"
# Mode B: delayMinutes of the first matching flight only.
MODE_FIRST_DELAY = "first_delay"

CLAIM_MODES = (MODE_LIST, MODE_FIRST_DELAY)


# ── Eligibility ───────────────────────────────────────────────────────

def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def is_claimable(delay_minutes, status) -> bool:
    """A claim is payable for a delay of 180+ minutes or a cancellation."""
    if status == CANCELLED_STATUS:
        return True
    return _is_number(delay_minutes) and delay_minutes >= DELAY_THRESHOLD_MINUTES


def claim_entry(record: dict) -> dict:
    """Eligibility entry; delayMinutes is left out when the record has none."""
    delay = record.get("delayMinutes")
    entry = {"isClaimable": is_claimable(delay, record.get("status"))}
    if "delayMinutes" in record:
        entry["delayMinutes"] = delay
    return entry


def first_delay(record: dict) -> int:
    """Validated delayMinutes of a single matched record."""
    delay = record.get("delayMinutes")
    if not _is_number(delay) or math.isinf(delay) or delay < 0:
        raise ValidationError("invalid delayMinutes")
    return int(delay)


def claim_results_to_json(results: list[dict]) -> str:
    """Compact JSON text, the wire form of a mode A result.

    NaN and Infinity have no JSON spelling, so a feed delay like that is
    rejected instead of being written out as bare text.
    """
    try:
        return json.dumps(results, separators=(",", ":"), allow_nan=False)
    except ValueError as exc:
        raise ValidationError("invalid delayMinutes") from exc


# ── Feed filtering ────────────────────────────────────────────────────

def filter_flights(records: list, query: ClaimQuery) -> list[dict]:
    """Records matching all six query fields, in feed order."""
    return [r for r in records if isinstance(r, dict) and query.matches(r)]


def check_claim(
    query: ClaimQuery,
    feed_url: str,
    http_get: HttpGet,
    mode: str = MODE_LIST,
):
    """
    Fetch the flight feed once and derive the claim result for ``query``.

    Parameters
    ----------
    query : ClaimQuery
        Flight to look up.
    feed_url : str
        Feed location, normally the ``flightDataUrl`` secret.
    http_get : HttpGet
        Fetch capability; timeouts and transport errors are its concern.
    mode : str
        "list" -> list of {isClaimable, delayMinutes} dicts.
        "first_delay" -> int delay of the first match.

    Raises
    ------
    ConfigError      feed_url is empty (raised before any request).
    UpstreamError    fetch failed or returned no payload.
    NotFoundError    no record matches all six fields.
    ValidationError  first_delay mode and the match has a bad delayMinutes.
    """
    if mode not in CLAIM_MODES:
        raise ConfigError(
            f"Unknown claim mode: '{mode}'. Choose from: {list(CLAIM_MODES)}"
        )
    if not feed_url:
        raise ConfigError("missing feed URL")

    response = http_get.get(feed_url, dict(JSON_HEADERS))

    if response is None or response.data is None:
        raise UpstreamError("no data in response")
    if not isinstance(response.data, list):
        raise UpstreamError(
            f"unexpected payload type in response: {type(response.data).__name__}"
        )

    matches = filter_flights(response.data, query)
    logger.debug("matched %d of %d feed records", len(matches), len(response.data))

    if not matches:
        raise NotFoundError("no matching flights")

    if mode == MODE_FIRST_DELAY:
        return first_delay(matches[0])
    return [claim_entry(r) for r in matches]
