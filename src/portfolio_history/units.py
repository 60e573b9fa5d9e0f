from __future__ import annotations

import re
from decimal import Decimal

from .constants import DEFAULT_TOKEN_DECIMALS, MAX_TOKEN_DECIMALS

_NON_DIGITS = re.compile(r"\D")


def clamp_decimals(decimals: int | None) -> int:
    """Clamp token decimals into the supported range.

    ``None`` falls back to the native coin precision (8).
    """
    if decimals is None:
        return DEFAULT_TOKEN_DECIMALS
    return max(0, min(MAX_TOKEN_DECIMALS, int(decimals)))


def format_units(value: object, decimals: int | None) -> Decimal:
    """Convert a raw smallest-unit amount to a human-unit Decimal.

    Args:
        value: Raw amount as returned by the indexer (string or int). Any
            non-digit characters, including a sign, are discarded.
        decimals: Decimal places of the asset.

    Returns:
        The unsigned amount shifted by ``decimals`` places.
    """
    digits = _NON_DIGITS.sub("", str(value if value is not None else "0"))
    if not digits or set(digits) == {"0"}:
        return Decimal(0)
    return Decimal(digits).scaleb(-clamp_decimals(decimals))


def parse_signed_raw(value: object) -> int:
    """Parse a raw amount that may carry a leading minus sign."""
    text = str(value if value is not None else "0").strip()
    negative = text.startswith("-")
    digits = _NON_DIGITS.sub("", text)
    if not digits:
        return 0
    amount = int(digits)
    return -amount if negative else amount
