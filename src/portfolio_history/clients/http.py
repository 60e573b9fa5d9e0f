"""Retry policy and JSON GET shared by every upstream HTTP call."""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import backoff
import requests

from ..constants import RETRYABLE_STATUS_CODES


def should_giveup(exc: Exception) -> bool:
    """Stop retrying on HTTP errors whose status is not transient."""
    return (
        isinstance(exc, requests.exceptions.HTTPError)
        and exc.response is not None
        and exc.response.status_code not in RETRYABLE_STATUS_CODES
    )


def retrying(
    max_tries: int,
    exceptions: tuple[type[Exception], ...] = (requests.exceptions.RequestException,),
) -> Callable:
    """Exponential backoff with full jitter, giving up on non-retryable statuses."""
    return backoff.on_exception(
        backoff.expo,
        exceptions,
        max_tries=max(1, max_tries),
        giveup=should_giveup,
        jitter=backoff.full_jitter,
    )


async def get_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float,
    max_tries: int,
) -> Any:
    """GET ``url`` in a worker thread and decode the JSON body.

    Raises:
        requests.exceptions.RequestException: After the last failed attempt
        ValueError: If the body is not JSON
    """

    @retrying(max_tries)
    async def _fetch() -> Any:
        response = await asyncio.to_thread(
            requests.get,
            url,
            params=params,
            headers=headers,
            timeout=timeout,
        )
        response.raise_for_status()
        return response.json()

    return await _fetch()
