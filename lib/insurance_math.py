"""Insurance payout adjustment: delay surcharge and cancellation doubling."""

from __future__ import annotations

import logging
import math
import re

from lib.errors import ConfigError
from lib.models import (
    CANCELLED_STATUS,
    DELAY_THRESHOLD_MINUTES,
    SURCHARGE_INTERVAL_MINUTES,
    SURCHARGE_RATE,
)

logger = logging.getLogger(__name__)


# ── Calculation modes ─────────────────────────────────────────────────

MODE_STATUS_AWARE = "status_aware"
# Superseded: ignores cancellations.  Kept so old deployments can be replayed.
MODE_DELAY_ONLY = "delay_only"

INSURANCE_MODES = (MODE_STATUS_AWARE, MODE_DELAY_ONLY)


# ── Argument parsing ──────────────────────────────────────────────────

# ASCII digits only; a "0x" prefix switches to base 16.
_INT_PREFIX = re.compile(r"([+-]?)(?:(0[xX])([0-9a-fA-F]*)|([0-9]*))")


def parse_int_arg(raw) -> float:
    """Parse the leading integer of a string argument.

    Leading whitespace and trailing junk are ignored ("300min" -> 300) and
    "0x1E" reads as hexadecimal (30).  Anything without leading digits,
    including a missing argument or a bare "0x", becomes NaN; callers surface
    that as an invalid output instead of raising here.
    """
    if raw is None:
        return math.nan
    sign, hex_prefix, hex_digits, dec_digits = _INT_PREFIX.match(str(raw).lstrip()).groups()
    digits, base = (hex_digits, 16) if hex_prefix else (dec_digits, 10)
    if not digits:
        return math.nan
    value = int(digits, base)
    return -value if sign == "-" else value


def parse_insurance_args(args: list[str]) -> tuple:
    """Return (delay_minutes, base_value, status) from the argument vector."""
    delay = parse_int_arg(args[0] if len(args) > 0 else None)
    base_value = parse_int_arg(args[1] if len(args) > 1 else None)
    status = args[2] if len(args) > 2 else None
    return delay, base_value, status


# ── Payout adjustment ─────────────────────────────────────────────────

def surcharge_intervals(delay: float) -> int:
    """Started 30-minute intervals beyond the 180-minute threshold."""
    if not delay >= DELAY_THRESHOLD_MINUTES:
        return 0
    return math.ceil((delay - DELAY_THRESHOLD_MINUTES) / SURCHARGE_INTERVAL_MINUTES)


def calculate_insurance_value(
    base_value: float,
    delay: float,
    status: str | None,
    mode: str = MODE_STATUS_AWARE,
) -> float:
    """
    Adjust the base insurance value for a flight's delay or cancellation.

    Parameters
    ----------
    base_value : int
        Insured amount before adjustment (>= 0).
    delay : int
        Arrival delay in minutes (>= 0).
    status : str
        Flight status; only "Cancelled" changes the outcome.
    mode : str
        "status_aware" (default) or the superseded "delay_only".

    Returns
    -------
    float or int
        base_value * 2 for a cancelled flight (status-aware mode only),
        base_value plus 5% per started 30-minute interval beyond 180 minutes
        for a long delay, otherwise base_value unchanged.
    """
    if mode not in INSURANCE_MODES:
        raise ConfigError(
            f"Unknown insurance mode: '{mode}'. Choose from: {list(INSURANCE_MODES)}"
        )

    if status == CANCELLED_STATUS:
        if mode == MODE_STATUS_AWARE:
            return base_value * 2
        logger.warning("delay_only mode ignores status %r", status)

    if delay >= DELAY_THRESHOLD_MINUTES:
        intervals = surcharge_intervals(delay)
        return base_value + intervals * base_value * SURCHARGE_RATE

    return base_value
