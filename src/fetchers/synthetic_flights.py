"""
Synthetic flight-status feed for demos / offline simulation.

Produces a deterministic list of feed records from a seeded numpy
Generator, so the same seed always yields the same feed.  A claim query can
be planted so that exactly one record is guaranteed to match it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

import numpy as np

from lib.fetcher import HttpResponse
from lib.models import CANCELLED_STATUS, ClaimQuery

logger = logging.getLogger(__name__)


AIRLINES = [
    ("AF", "Air France"),
    ("AC", "Air Canada"),
    ("LH", "Lufthansa"),
    ("BA", "British Airways"),
    ("KL", "KLM Royal Dutch Airlines"),
]

AIRPORTS = [
    "Charles de Gaulle Airport",
    "Toronto Pearson International Airport",
    "Frankfurt Airport",
    "London Heathrow Airport",
    "Amsterdam Airport Schiphol",
    "Montreal-Trudeau International Airport",
]

STATUSES = ["On Time", "Delayed", CANCELLED_STATUS]
STATUS_WEIGHTS = [0.6, 0.3, 0.1]

# mean of the exponential delay distribution for delayed flights (minutes)
MEAN_DELAY_MINUTES = 120.0


class SyntheticFlightFeed:
    """Generate synthetic flight-status records.

    Parameters
    ----------
    n_records : int
        Number of random flights (default 50), excluding a planted one.
    seed : int
        Seed for ``numpy.random.default_rng`` (default 42).
    day : str
        ISO date the flights depart on (default ``"2025-01-05"``).
    planted : ClaimQuery, optional
        If given, one extra record with exactly these six fields is inserted
        at a seeded position.
    planted_delay, planted_status : optional
        Override the planted record's delayMinutes / status.
    """

    def __init__(
        self,
        n_records: int = 50,
        seed: int = 42,
        day: str = "2025-01-05",
        planted: Optional[ClaimQuery] = None,
        planted_delay: Optional[int] = None,
        planted_status: Optional[str] = None,
    ):
        self.n_records = n_records
        self.seed = seed
        self.day = day
        self.planted = planted
        self.planted_delay = planted_delay
        self.planted_status = planted_status

    @staticmethod
    def _draw_status(rng: np.random.Generator) -> tuple[str, int]:
        status = STATUSES[int(rng.choice(len(STATUSES), p=STATUS_WEIGHTS))]
        if status == "Delayed":
            delay = int(rng.exponential(MEAN_DELAY_MINUTES)) + 15
        else:
            delay = 0
        return status, delay

    def records(self) -> list[dict]:
        """Return the deterministic list of synthetic feed records."""
        rng = np.random.default_rng(self.seed)
        base = datetime.fromisoformat(self.day)

        flights: list[dict] = []
        for _ in range(self.n_records):
            code, airline = AIRLINES[int(rng.integers(len(AIRLINES)))]
            dep_idx, arr_idx = rng.choice(len(AIRPORTS), size=2, replace=False)
            departure = base + timedelta(minutes=30 * int(rng.integers(10, 44)))
            arrival = departure + timedelta(minutes=30 * int(rng.integers(2, 20)))
            status, delay = self._draw_status(rng)

            flights.append({
                "flightNumber": f"{code}{int(rng.integers(100, 1000))}",
                "airline": airline,
                "departureAirport": AIRPORTS[int(dep_idx)],
                "departureTime": departure.isoformat(),
                "arrivalAirport": AIRPORTS[int(arr_idx)],
                "arrivalTime": arrival.isoformat(),
                "delayMinutes": delay,
                "status": status,
            })

        if self.planted is not None:
            status, delay = self._draw_status(rng)
            record = self.planted.as_record()
            record["delayMinutes"] = delay if self.planted_delay is None else self.planted_delay
            record["status"] = status if self.planted_status is None else self.planted_status
            flights.insert(int(rng.integers(len(flights) + 1)), record)

        logger.debug("generated %d synthetic flight records", len(flights))
        return flights

    def get(self, url: str, headers: dict) -> HttpResponse:
        """Serve the synthetic feed for any URL."""
        return HttpResponse(status=200, data=self.records())
