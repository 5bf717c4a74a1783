#!/usr/bin/env python3
"""
Local simulation runner for the flight insurance oracle units.

Usage:
    python run_simulation.py simulate --config configs/check_claim.json
    python run_simulation.py simulate --config configs/check_claim.json --feed synthetic
    python run_simulation.py simulate --config configs/check_claim.json \\
        --feed file --feed-path data/sample_flights.json --mode first_delay
    python run_simulation.py calculate 300 10000 Delayed --return-type string

The request config JSON controls:
  - which unit runs (calculate_insurance / check_claim)
  - the positional argument vector
  - secrets (``${ENV_VAR}`` references are expanded, e.g. FLIGHT_DATA_URL)
  - output mode and expected return type
  - the feed used by check_claim (live / file / synthetic)
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from typing import Optional

from lib.config import (
    UNIT_CALCULATE_INSURANCE,
    UNIT_CHECK_CLAIM,
    RequestConfig,
    Settings,
    load_dotenv,
    load_request_config,
)
from lib.encoding import RETURN_TYPES, RETURN_UINT256, decode_result
from lib.errors import ConfigError
from lib.insurance_math import INSURANCE_MODES, MODE_STATUS_AWARE
from lib.logging_setup import setup_logging
from lib.models import QUERY_FIELDS, ClaimQuery
from lib.simulator import SimulationResult
from main import simulate_request
from src.fetchers import FEED_REGISTRY, get_feed


# ============================================================================
# Feed selection
# ============================================================================

OFFLINE_FEED_URL = {
    "file": "file://{path}",
    "synthetic": "synthetic://flights",
}


def build_feed(
    config: RequestConfig,
    settings: Settings,
    feed_name: Optional[str] = None,
    feed_path: Optional[str] = None,
):
    """Resolve the fetch capability for a check_claim request.

    Returns (feed, config); offline feeds get a placeholder flightDataUrl
    when the secret is unset so the request can run without network access.
    """
    if config.unit != UNIT_CHECK_CLAIM:
        return None, config

    name = feed_name or config.feed.get("name", "live")
    params = {}
    if name == config.feed.get("name", "live"):
        params = dict(config.feed.get("params", {}))

    if name == "live":
        params.setdefault("timeout", settings.http_timeout)
    elif name == "file":
        if feed_path:
            params["path"] = feed_path
        if not params.get("path"):
            raise ConfigError("file feed needs a path (--feed-path or feed.params.path)")
    elif name == "synthetic":
        params.setdefault("seed", settings.synthetic_seed)
        plant = params.pop("plant_query", True)
        if plant and len(config.args) >= len(QUERY_FIELDS):
            params["planted"] = ClaimQuery.from_args(config.args)

    try:
        feed = get_feed(name, **params)
    except KeyError as exc:
        raise ConfigError(exc.args[0]) from exc
    except TypeError as exc:
        raise ConfigError(f"bad parameters for '{name}' feed: {exc}") from exc

    if not config.secrets.get("flightDataUrl"):
        if name == "live":
            url = settings.flight_data_url
        else:
            url = OFFLINE_FEED_URL[name].format(path=params.get("path", ""))
        config = dataclasses.replace(
            config, secrets={**config.secrets, "flightDataUrl": url},
        )
    return feed, config


# ============================================================================
# Reporting
# ============================================================================

def print_result(result: SimulationResult, return_type: str, as_json: bool = False) -> None:
    decoded = None
    if result.response_hex:
        decoded = decode_result(result.response_hex, return_type)

    if as_json:
        print(json.dumps({
            "response_hex": result.response_hex,
            "response": decoded,
            "error": result.error_string,
            "captured_output": result.captured_output,
        }, indent=2))
        return

    print(f"{result.captured_output}\n")
    if result.response_hex:
        print(f"Response returned by script during local simulation: {decoded}\n")
    if result.error_string:
        print(f"Error returned by simulated script:\n{result.error_string}\n")


# ============================================================================
# Main pipeline
# ============================================================================

def run(
    config: RequestConfig,
    settings: Settings,
    feed_name: Optional[str] = None,
    feed_path: Optional[str] = None,
    as_json: bool = False,
) -> SimulationResult:
    feed, config = build_feed(config, settings, feed_name, feed_path)
    result = simulate_request(config, http_get=feed)
    print_result(result, config.expected_return_type, as_json=as_json)
    return result


# ============================================================================
# CLI entry point
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Simulate flight insurance oracle requests locally."
    )
    parser.add_argument(
        "--env-file", default=".env",
        help="dotenv file read before settings (default: .env).",
    )
    parser.add_argument(
        "--json", action="store_true", dest="as_json",
        help="Print the simulation result as JSON.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sim = sub.add_parser("simulate", help="Run a request configuration file.")
    sim.add_argument(
        "--config", required=True,
        help="Path to request configuration JSON file.",
    )
    sim.add_argument(
        "--feed", choices=sorted(FEED_REGISTRY),
        help="Override the flight feed used by check_claim.",
    )
    sim.add_argument("--feed-path", help="JSON file served by the 'file' feed.")
    sim.add_argument("--mode", help="Override the unit's output mode.")

    calc = sub.add_parser("calculate", help="Compute an insurance value directly.")
    calc.add_argument("delay", help="Delay in minutes.")
    calc.add_argument("base_value", help="Insurance value before adjustment.")
    calc.add_argument("status", help='Flight status, e.g. "Delayed" or "Cancelled".')
    calc.add_argument(
        "--mode", choices=INSURANCE_MODES, default=MODE_STATUS_AWARE,
    )
    calc.add_argument(
        "--return-type", choices=RETURN_TYPES, default=RETURN_UINT256,
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    load_dotenv(args.env_file)
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.json_logs)

    try:
        if args.command == "simulate":
            config = load_request_config(args.config)
            if args.mode:
                config = config.with_mode(args.mode)
            run(config, settings, args.feed, args.feed_path, as_json=args.as_json)
        else:
            config = RequestConfig.from_dict({
                "unit": UNIT_CALCULATE_INSURANCE,
                "args": [args.delay, args.base_value, args.status],
                "mode": args.mode,
                "expected_return_type": args.return_type,
            })
            run(config, settings, as_json=args.as_json)
    except (ConfigError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
