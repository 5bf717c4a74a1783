"""Flight claim query, feed field names and the thresholds both units share."""

from __future__ import annotations

from dataclasses import dataclass

from lib.errors import ConfigError


# ── Policy constants ──────────────────────────────────────────────────

DELAY_THRESHOLD_MINUTES = 180
SURCHARGE_INTERVAL_MINUTES = 30
SURCHARGE_RATE = 0.05
CANCELLED_STATUS = "Cancelled"


# ── Feed schema ───────────────────────────────────────────────────────

# (ClaimQuery attribute, feed record key), in argument-vector order.
QUERY_FIELDS = (
    ("flight_number", "flightNumber"),
    ("airline", "airline"),
    ("departure_airport", "departureAirport"),
    ("departure_datetime", "departureTime"),
    ("arrival_airport", "arrivalAirport"),
    ("arrival_datetime", "arrivalTime"),
)


@dataclass(frozen=True)
class ClaimQuery:
    """Six exact-match fields identifying one scheduled flight.

    Matching is a logical AND over all six fields, using plain string
    equality: case-sensitive, no trimming, no partial matches.
    """

    flight_number: str
    airline: str
    departure_airport: str
    departure_datetime: str
    arrival_airport: str
    arrival_datetime: str

    @classmethod
    def from_args(cls, args: list[str]) -> "ClaimQuery":
        """Build a query from the positional argument vector (positions 0-5)."""
        if len(args) < len(QUERY_FIELDS):
            raise ConfigError(
                f"check_claim expects {len(QUERY_FIELDS)} arguments, got {len(args)}"
            )
        return cls(*args[: len(QUERY_FIELDS)])

    def matches(self, record: dict) -> bool:
        return all(
            record.get(feed_key) == getattr(self, attr)
            for attr, feed_key in QUERY_FIELDS
        )

    def as_record(self) -> dict:
        """Feed-shaped dict carrying the six query fields."""
        return {feed_key: getattr(self, attr) for attr, feed_key in QUERY_FIELDS}
