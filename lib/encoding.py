"""Return-value encoding for oracle responses (uint256 / string)."""

from __future__ import annotations

import math

from lib.errors import ConfigError, ValidationError


RETURN_UINT256 = "uint256"
RETURN_STRING = "string"
RETURN_TYPES = (RETURN_UINT256, RETURN_STRING)

UINT256_BYTES = 32
UINT256_MAX = 2 ** 256 - 1


def _check_return_type(return_type: str) -> None:
    if return_type not in RETURN_TYPES:
        raise ConfigError(
            f"Unknown return type: '{return_type}'. Choose from: {list(RETURN_TYPES)}"
        )


def _check_finite(value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"invalid output: expected a number, got {type(value).__name__}")
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        raise ValidationError(f"invalid output: {value}")


def encode_uint256(value) -> bytes:
    """32-byte big-endian unsigned integer; fractional values are truncated."""
    _check_finite(value)
    n = math.trunc(value)
    if n < 0 or n > UINT256_MAX:
        raise ValidationError(f"invalid output: {value} is out of uint256 range")
    return n.to_bytes(UINT256_BYTES, "big")


def format_number(value) -> str:
    """Decimal text of a number; integral floats lose their '.0'."""
    _check_finite(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def encode_string(value: str) -> bytes:
    return value.encode("utf-8")


def encode_result(value, return_type: str) -> bytes:
    """Encode a unit's return value; strings pass through, numbers are formatted."""
    _check_return_type(return_type)
    if return_type == RETURN_UINT256:
        return encode_uint256(value)
    if isinstance(value, str):
        return encode_string(value)
    return encode_string(format_number(value))


def to_hex(payload: bytes) -> str:
    return "0x" + payload.hex()


def decode_result(response_hex: str, return_type: str):
    """Reverse encode_result for a 0x-prefixed hex string."""
    _check_return_type(return_type)
    raw = response_hex[2:] if response_hex.startswith("0x") else response_hex
    payload = bytes.fromhex(raw)
    if return_type == RETURN_UINT256:
        if len(payload) != UINT256_BYTES:
            raise ValidationError(
                f"uint256 response must be {UINT256_BYTES} bytes, got {len(payload)}"
            )
        return int.from_bytes(payload, "big")
    return payload.decode("utf-8")
