"""Flight feed fetching: the HTTP GET capability handed to the claim checker."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import requests

from lib.errors import UpstreamError

logger = logging.getLogger(__name__)


JSON_HEADERS = {"accept": "application/json"}
DEFAULT_TIMEOUT = 9.0
_RETRYABLE_STATUS = (429, 500, 502, 503, 504)


@dataclass(frozen=True)
class HttpResponse:
    """Decoded response: HTTP status plus the parsed JSON body."""

    status: int
    data: Any = None


class HttpGet(Protocol):
    """Anything with get(url, headers) -> HttpResponse | None."""
    def get(self, url: str, headers: dict) -> Optional[HttpResponse]: ...


# ── Live feed over HTTP ───────────────────────────────────────────────

class RequestsHttpGet:
    """GET a JSON document with ``requests``.

    Parameters
    ----------
    timeout : float
        Per-request timeout in seconds (default 9).
    max_retries : int
        Extra attempts on 429/5xx or connection errors, with exponential
        backoff.  Defaults to 0: the oracle node makes exactly one request.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, max_retries: int = 0):
        self.timeout = timeout
        self.max_retries = max_retries

    def get(self, url: str, headers: dict) -> HttpResponse:
        """GET ``url``; only the first try counts unless ``max_retries`` > 0."""
        attempt = 0
        while True:
            try:
                r = requests.get(url, headers=headers, timeout=self.timeout)
            except requests.exceptions.RequestException as exc:
                if attempt >= self.max_retries:
                    raise UpstreamError(f"request failed: {exc}") from exc
                logger.warning("request to %s failed (%s), retrying", url, exc)
                time.sleep(2 ** (attempt + 1))
                attempt += 1
                continue

            if r.status_code in _RETRYABLE_STATUS and attempt < self.max_retries:
                logger.warning("HTTP %d from %s, retrying", r.status_code, url)
                time.sleep(2 ** (attempt + 1))
                attempt += 1
                continue
            if not 200 <= r.status_code < 300:
                raise UpstreamError(f"HTTP {r.status_code} from {url}")

            try:
                data = r.json()
            except ValueError as exc:
                raise UpstreamError(f"invalid JSON from {url}") from exc
            return HttpResponse(status=r.status_code, data=data)
