from __future__ import annotations

import re

from ..domain import Timeframe

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


class RequestValidationError(Exception):
    """Raised when a history request is malformed. No upstream call is made."""

    def __init__(self, message: str):
        super().__init__(message)


def normalize_address(address: object) -> str:
    """Validate an account address and return its long form.

    Addresses are accepted in short (``0x1``) or long form and returned
    lower-cased and zero-padded to 64 hex characters, which is how the
    indexer stores owners.

    Raises:
        RequestValidationError: If the address is missing or not hex.
    """
    if not isinstance(address, str) or not address.strip():
        raise RequestValidationError("Missing address")
    candidate = address.strip()
    if not _ADDRESS_RE.match(candidate):
        raise RequestValidationError("Invalid address")
    return "0x" + candidate[2:].lower().rjust(64, "0")


def parse_timeframe(timeframe: object) -> Timeframe:
    """Parse a timeframe label (``7D``, ``30D`` or ``90D``)."""
    if not isinstance(timeframe, str) or not timeframe.strip():
        raise RequestValidationError("Missing timeframe")
    try:
        return Timeframe(timeframe.strip().upper())
    except ValueError:
        allowed = ", ".join(t.value for t in Timeframe)
        raise RequestValidationError(
            f"Invalid timeframe '{timeframe}'. Expected one of: {allowed}"
        ) from None


def validate_request(address: object, timeframe: object) -> tuple[str, Timeframe]:
    """Validate a raw request, returning the normalized address and timeframe."""
    return normalize_address(address), parse_timeframe(timeframe)
