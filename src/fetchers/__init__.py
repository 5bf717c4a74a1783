"""
Pluggable flight feeds.

Each feed implements the HTTP GET capability the claim checker consumes::

    get(url: str, headers: dict) -> HttpResponse

``live`` performs a real request; ``file`` and ``synthetic`` answer locally
so a request configuration can be simulated without network access.
"""

from lib.fetcher import RequestsHttpGet
from src.fetchers.json_file import JsonFileFeed
from src.fetchers.synthetic_flights import SyntheticFlightFeed

FEED_REGISTRY: dict[str, type] = {
    "live": RequestsHttpGet,
    "file": JsonFileFeed,
    "synthetic": SyntheticFlightFeed,
}


def get_feed(name: str, **kwargs):
    """Instantiate a feed by name."""
    if name not in FEED_REGISTRY:
        raise KeyError(
            f"Unknown feed '{name}'. Available: {sorted(FEED_REGISTRY)}"
        )
    return FEED_REGISTRY[name](**kwargs)
