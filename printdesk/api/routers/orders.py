"""Orders API: create, list, get, status counts, status update, delete all, export/import.

Lookups use query parameters (``?orderId=``, ``?stats=1``,
``?orderId=&action=status``) on the single ``/api/orders`` resource.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from printdesk.api.dependencies import get_order_service
from printdesk.api.schemas.orders import (
    ImportResponse,
    MessageResponse,
    OrderStatusUpdate,
    error_responses,
)
from printdesk.core.exceptions import NotFoundError, PersistenceError, ValidationError
from printdesk.services import OrderService
from printdesk.stores.types import Order, OrderDraft

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/orders", tags=["orders"], responses=error_responses(500))

EXPORT_FILENAME = "orders-export.json"


@router.get("", responses=error_responses(404))
async def get_orders(
    order_id: Optional[str] = Query(None, alias="orderId"),
    stats: Optional[str] = None,
    svc: OrderService = Depends(get_order_service),
):
    """One order (``?orderId=``), counts by status (``?stats=1``) or every order newest first."""
    if order_id:
        order = await svc.get_order(order_id)
        if order is None:
            raise NotFoundError("Order not found", details={"orderId": order_id})
        return order
    if stats:
        return await svc.count_by_status()
    return await svc.list_orders()


@router.post("", response_model=Order, status_code=status.HTTP_201_CREATED)
async def create_order(
    body: OrderDraft,
    svc: OrderService = Depends(get_order_service),
):
    order = await svc.create_order(body)
    if order is None:
        raise PersistenceError("Failed to save order")
    return order


@router.patch("", response_model=Order, responses=error_responses(400, 404))
async def update_order_status(
    order_id: Optional[str] = Query(None, alias="orderId"),
    action: Optional[str] = None,
    body: Optional[OrderStatusUpdate] = None,
    svc: OrderService = Depends(get_order_service),
):
    """``PATCH /api/orders?orderId=X&action=status`` with body ``{"status": "..."}``."""
    if not order_id or action != "status" or body is None or not body.status:
        raise ValidationError("Invalid request: orderId, action=status and a status are required")
    if await svc.get_order(order_id) is None:
        raise NotFoundError("Order not found", details={"orderId": order_id})
    order = await svc.update_status(order_id, body.status)
    if order is None:
        raise PersistenceError("Failed to update order")
    return order


@router.delete("", response_model=MessageResponse)
async def delete_all_orders(svc: OrderService = Depends(get_order_service)):
    if not await svc.delete_all_orders():
        raise PersistenceError("Failed to delete orders")
    return MessageResponse(message="All orders deleted")


@router.get("/export")
async def export_orders(svc: OrderService = Depends(get_order_service)):
    """Download every order as a JSON file (backup / move between backends)."""
    payload = await svc.export_orders()
    return Response(
        content=payload,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@router.post("/import", response_model=ImportResponse, responses=error_responses(400))
async def import_orders(
    request: Request,
    svc: OrderService = Depends(get_order_service),
):
    """Replace all orders with the JSON array in the request body."""
    raw = await request.body()
    try:
        payload = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValidationError("Orders file must be UTF-8 JSON", cause=exc) from exc
    orders = svc.parse_orders(payload)
    if orders is None:
        raise ValidationError("Invalid orders file")
    count = await svc.replace_orders(orders)
    if count is None:
        raise PersistenceError("Failed to import orders")
    return ImportResponse(message="Orders imported", count=count)
