"""Flight feed served from a local JSON file (offline simulation)."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from lib.errors import UpstreamError
from lib.fetcher import HttpResponse

logger = logging.getLogger(__name__)


class JsonFileFeed:
    """Answer every GET with the contents of ``path``.

    The file holds exactly what the live feed would return: a JSON array of
    flight records.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def get(self, url: str, headers: dict) -> HttpResponse:
        logger.debug("serving %s for %s", self.path, url)
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise UpstreamError(f"cannot read feed file {self.path}: {exc}") from exc
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise UpstreamError(f"feed file {self.path} is not valid JSON") from exc
        return HttpResponse(status=200, data=data)
