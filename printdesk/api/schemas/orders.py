"""Pydantic v2 request/response envelopes for the orders and files APIs.

Orders and files themselves are returned as the record types from
``printdesk.stores.types``.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel


class OrderStatusUpdate(BaseModel):
    status: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


class ImportResponse(BaseModel):
    message: str
    count: int


class ErrorResponse(BaseModel):
    """Body of every ProjectError response."""

    error: str
    code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


def error_responses(*statuses: int) -> Dict[int, Dict[str, Any]]:
    """OpenAPI ``responses=`` entries documenting ErrorResponse for each status."""
    return {code: {"model": ErrorResponse} for code in statuses}
