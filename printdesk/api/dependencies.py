"""FastAPI dependency providers."""
from __future__ import annotations

from fastapi import Request

from printdesk.services import FileService, OrderService


def get_order_service(request: Request) -> OrderService:
    """The OrderService built at startup for the configured backend."""
    return request.app.state.order_service


def get_file_service(request: Request) -> FileService:
    return request.app.state.file_service
