"""Shared fixtures: an in-memory HTTP GET capability and a small flight feed."""

import pytest

from lib.fetcher import HttpResponse
from lib.models import ClaimQuery


QUERY_ARGS = [
    "AF456",
    "Air France",
    "Charles de Gaulle Airport",
    "2025-01-05T19:00:00",
    "Toronto Pearson International Airport",
    "2025-01-05T22:30:00",
]


def make_record(delay=200, status="Delayed", **overrides):
    record = {
        "flightNumber": "AF456",
        "airline": "Air France",
        "departureAirport": "Charles de Gaulle Airport",
        "departureTime": "2025-01-05T19:00:00",
        "arrivalAirport": "Toronto Pearson International Airport",
        "arrivalTime": "2025-01-05T22:30:00",
        "delayMinutes": delay,
        "status": status,
    }
    record.update(overrides)
    return record


class FakeHttpGet:
    """Records every call and answers with a fixed response (or raises)."""

    def __init__(self, data=None, response="default", error=None):
        if response == "default":
            response = HttpResponse(status=200, data=data)
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, headers):
        self.calls.append((url, headers))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def query():
    return ClaimQuery.from_args(QUERY_ARGS)


@pytest.fixture
def three_flight_feed():
    """Three records, only the first matches QUERY_ARGS on all six fields."""
    return [
        make_record(delay=200, status="Delayed"),
        make_record(delay=0, status="On Time", flightNumber="AF457"),
        make_record(delay=400, status="Cancelled", arrivalTime="2025-01-05T22:31:00"),
    ]
