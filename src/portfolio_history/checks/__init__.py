from __future__ import annotations

from .request_checks import (
    RequestValidationError,
    normalize_address,
    parse_timeframe,
    validate_request,
)

__all__ = [
    "RequestValidationError",
    "normalize_address",
    "parse_timeframe",
    "validate_request",
]
