"""Pydantic schemas for the history endpoint."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field


class HistoryRequest(BaseModel):
    """Request body for POST /portfolio-history.

    Both fields are optional at the schema level so that a missing value is
    reported by the request checks with a 400 instead of a schema error.
    """

    address: str | None = Field(default=None, description="Aptos account address")
    timeframe: str | None = Field(default=None, description="One of 7D, 30D, 90D")


class HistoryPointResponse(BaseModel):
    date: dt.date
    value: float


class ErrorResponse(BaseModel):
    error: str
