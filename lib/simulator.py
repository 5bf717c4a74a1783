"""Local simulation of an oracle request: run a unit, capture its output."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from lib.encoding import to_hex
from lib.errors import OracleError


@dataclass(frozen=True)
class SimulationResult:
    """What an oracle node would report back for one request.

    Exactly one of ``response_hex`` / ``error_string`` is set.
    """

    response_hex: Optional[str]
    error_string: Optional[str]
    captured_output: str

    @property
    def ok(self) -> bool:
        return self.error_string is None


class _CaptureHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.INFO)
        self.setFormatter(logging.Formatter("%(message)s"))
        self.lines: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.lines.append(self.format(record))


@contextmanager
def capture_output() -> Iterator[list[str]]:
    """Collect INFO+ log lines emitted anywhere while the block runs."""
    root = logging.getLogger()
    handler = _CaptureHandler()
    previous_level = root.level
    if previous_level == logging.NOTSET or previous_level > logging.INFO:
        root.setLevel(logging.INFO)
    root.addHandler(handler)
    try:
        yield handler.lines
    finally:
        root.removeHandler(handler)
        root.setLevel(previous_level)


def simulate(unit: Callable[[], bytes]) -> SimulationResult:
    """
    Run ``unit`` (a zero-argument callable returning encoded bytes).

    OracleError failures become ``error_string``; anything else propagates
    as an uncaught top-level failure.
    """
    with capture_output() as lines:
        try:
            payload = unit()
        except OracleError as exc:
            return SimulationResult(
                response_hex=None,
                error_string=f"{type(exc).__name__}: {exc}",
                captured_output="\n".join(lines),
            )
    return SimulationResult(
        response_hex=to_hex(payload),
        error_string=None,
        captured_output="\n".join(lines),
    )
