"""Environment settings and request configurations for the oracle units."""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from lib.claims import CLAIM_MODES, MODE_FIRST_DELAY, MODE_LIST
from lib.encoding import RETURN_STRING, RETURN_TYPES, RETURN_UINT256
from lib.errors import ConfigError
from lib.fetcher import DEFAULT_TIMEOUT
from lib.insurance_math import INSURANCE_MODES, MODE_STATUS_AWARE


# ── Environment ───────────────────────────────────────────────────────

_DOTENV_LINE = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$")


def _dotenv_value(raw: str) -> str:
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "\"'":
        return raw[1:-1]
    # unquoted values end at an inline " #" comment
    return raw.split(" #", 1)[0].rstrip()


def load_dotenv(path: str = ".env") -> list[str]:
    """
    Fill unset environment variables from a dotenv file.

    Accepts ``KEY=value`` and ``export KEY=value`` lines; quoted values are
    taken verbatim.  Variables already in the environment win, so a secret
    exported by the node is never replaced by a local file.  Returns the
    keys that were set.
    """
    env_path = Path(path)
    if not env_path.exists():
        return []

    loaded = []
    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        m = _DOTENV_LINE.match(raw_line.strip())
        if m is None:
            continue
        key, value = m.group(1), _dotenv_value(m.group(2))
        if key not in os.environ:
            os.environ[key] = value
            loaded.append(key)
    return loaded


def _parse_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class Settings:
    flight_data_url: str
    http_timeout: float
    log_level: str
    json_logs: bool
    synthetic_seed: int

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            flight_data_url=os.getenv("FLIGHT_DATA_URL", ""),
            http_timeout=float(os.getenv("HTTP_TIMEOUT", str(DEFAULT_TIMEOUT))),
            log_level=os.getenv("LOG_LEVEL", "WARNING").upper(),
            json_logs=_parse_bool("LOG_FORMAT_JSON", False),
            synthetic_seed=int(os.getenv("SYNTHETIC_SEED", "42")),
        )


# ── Request configurations ────────────────────────────────────────────

UNIT_CALCULATE_INSURANCE = "calculate_insurance"
UNIT_CHECK_CLAIM = "check_claim"

UNIT_CONFIG = {
    UNIT_CALCULATE_INSURANCE: {
        "modes": INSURANCE_MODES,
        "default_mode": MODE_STATUS_AWARE,
        "return_types": {mode: RETURN_TYPES for mode in INSURANCE_MODES},
    },
    UNIT_CHECK_CLAIM: {
        "modes": CLAIM_MODES,
        "default_mode": MODE_LIST,
        "return_types": {
            MODE_LIST: (RETURN_STRING,),
            MODE_FIRST_DELAY: (RETURN_UINT256,),
        },
    },
}

_ENV_REF = re.compile(r"^\$\{([A-Za-z_][A-Za-z0-9_]*)\}$")


def expand_secret(value) -> str:
    """Resolve a "${ENV_VAR}" reference; unset variables become ""."""
    m = _ENV_REF.match(str(value))
    if m is None:
        return str(value)
    return os.getenv(m.group(1), "")


@dataclass(frozen=True)
class RequestConfig:
    """One oracle request: which unit, its arguments and how to encode the answer."""

    unit: str
    args: list[str]
    expected_return_type: str
    mode: str
    secrets: dict = field(default_factory=dict)
    feed: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict) -> "RequestConfig":
        unit = raw.get("unit")
        if unit not in UNIT_CONFIG:
            raise ConfigError(
                f"Unknown unit: '{unit}'. Choose from: {sorted(UNIT_CONFIG)}"
            )
        cfg = UNIT_CONFIG[unit]

        mode = raw.get("mode", cfg["default_mode"])
        if mode not in cfg["modes"]:
            raise ConfigError(
                f"Unknown mode '{mode}' for {unit}. Choose from: {list(cfg['modes'])}"
            )

        allowed = cfg["return_types"][mode]
        return_type = raw.get("expected_return_type", allowed[0])
        if return_type not in allowed:
            raise ConfigError(
                f"{unit} in '{mode}' mode returns {list(allowed)}, not '{return_type}'"
            )

        args = raw.get("args", [])
        if not isinstance(args, list):
            raise ConfigError("'args' must be a list of strings")

        secrets = {k: expand_secret(v) for k, v in raw.get("secrets", {}).items()}

        return cls(
            unit=unit,
            args=[str(a) for a in args],
            expected_return_type=return_type,
            mode=mode,
            secrets=secrets,
            feed=dict(raw.get("feed", {})),
        )

    def with_mode(self, mode: str) -> "RequestConfig":
        """Copy with another output mode, re-deriving the default return type."""
        raw = {
            "unit": self.unit,
            "args": self.args,
            "mode": mode,
            "secrets": self.secrets,
            "feed": self.feed,
        }
        if self.expected_return_type in UNIT_CONFIG[self.unit]["return_types"].get(mode, ()):
            raw["expected_return_type"] = self.expected_return_type
        return RequestConfig.from_dict(raw)


def load_request_config(path: str) -> RequestConfig:
    """Load and validate a request configuration JSON file."""
    with open(path) as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"{path}: invalid JSON ({exc})") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: expected a JSON object")
    return RequestConfig.from_dict(raw)
