"""Logging configuration for the CLI runner.

Unit entry points tag their result lines with ``extra={"unit": ..., "mode": ...}``;
the JSON formatter lifts those tags to the top of each line so node logs can be
grouped per unit.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone


TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Tags set by the unit entry points, emitted first and in this order.
CONTEXT_FIELDS = ("unit", "mode")

# Attributes every LogRecord carries; anything else arrived through extra=.
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


def record_context(record: logging.LogRecord) -> dict:
    """Fields a caller attached with ``extra=``, context tags first."""
    context = {key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)}
    for key, val in record.__dict__.items():
        if key in _STANDARD_ATTRS or key in context or key.startswith("_"):
            continue
        context[key] = val
    return context


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line.

    Example:
    {"ts":"2025-01-05T22:30:00Z","level":"INFO","logger":"main","unit":"calculate_insurance","mode":"status_aware","msg":"Insurance Value: 12000"}
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname,
            "logger": record.name,
        }
        payload.update(record_context(record))
        payload["msg"] = record.getMessage()

        if record.exc_info:
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def setup_logging(level: str = "WARNING", json_logs: bool = False) -> logging.Handler:
    """
    Install a single stderr handler on the root logger and return it.

    The handler keeps ``level`` on itself: the simulator lowers the root level
    while capturing unit output, and those INFO lines must not leak to stderr.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if json_logs else logging.Formatter(TEXT_FORMAT))

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING
    handler.setLevel(numeric_level)

    root = logging.getLogger()
    root.setLevel(numeric_level)
    # drop handlers from earlier calls so lines are not duplicated
    root.handlers.clear()
    root.addHandler(handler)
    return handler
