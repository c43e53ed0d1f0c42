"""OrderService: the stable interface the API and admin CLI use, whatever backend is active."""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from printdesk.core.exceptions import ProjectError
from printdesk.stores.base import Clock, OrderStore, generate_order_id, utc_now_iso
from printdesk.stores.types import Order, OrderDraft

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]

_ORDER_LIST = TypeAdapter(List[Order])


class OrderService:
    """Wrap an OrderStore, stamp new orders and turn store failures into plain results.

    Failures never propagate: the caller gets ``None`` / ``False`` / an empty
    collection, the error is logged and ``notify`` receives a short message
    fit for showing to the operator.

    Usage::

        svc = OrderService(JsonFileOrderStore("data/orders.json"))
        order = await svc.create_order(draft)
        await svc.update_status(order.order_id, "printing")
        counts = await svc.count_by_status()
    """

    def __init__(
        self,
        store: OrderStore,
        *,
        notify: Optional[Notifier] = None,
        clock: Optional[Clock] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self.store = store
        self._notify = notify
        self._clock = clock or utc_now_iso
        self._id_factory = id_factory or generate_order_id

    @property
    def backend(self) -> str:
        return self.store.backend

    def _fail(self, message: str, exc: BaseException) -> None:
        logger.error("OrderService: %s (%s)", message, exc, exc_info=exc)
        if self._notify is not None:
            self._notify(message)

    # ── Create ──

    async def create_order(self, draft: OrderDraft) -> Optional[Order]:
        now = self._clock()
        order = Order(
            **draft.model_dump(),
            id=self._id_factory(),
            created_at=now,
            updated_at=now,
        )
        try:
            saved = await self.store.add(order)
        except ProjectError as exc:
            self._fail("Failed to save order", exc)
            return None
        logger.info("OrderService: created order %s (%s)", saved.order_id, saved.id)
        return saved

    # ── Read ──

    async def list_orders(self) -> List[Order]:
        try:
            return await self.store.list_orders()
        except ProjectError as exc:
            self._fail("Failed to load orders", exc)
            return []

    async def get_order(self, order_id: str) -> Optional[Order]:
        try:
            return await self.store.get_order(order_id)
        except ProjectError as exc:
            self._fail("Failed to load order", exc)
            return None

    async def count_by_status(self) -> Dict[str, int]:
        try:
            return await self.store.count_by_status()
        except ProjectError as exc:
            self._fail("Failed to load order counts", exc)
            return {}

    # ── Update / delete ──

    async def update_status(self, order_id: str, status: str) -> Optional[Order]:
        try:
            order = await self.store.update_status(order_id, status)
        except ProjectError as exc:
            self._fail("Failed to update order status", exc)
            return None
        if order is None:
            logger.info("OrderService: status update for unknown order %s", order_id)
        else:
            logger.info("OrderService: order %s -> %s", order_id, status)
        return order

    async def delete_all_orders(self) -> bool:
        try:
            await self.store.delete_all()
        except ProjectError as exc:
            self._fail("Failed to delete orders", exc)
            return False
        logger.warning("OrderService: all orders deleted (%s backend)", self.backend)
        return True

    # ── Export / import ──

    async def export_orders(self) -> str:
        """Pretty-printed JSON array of all orders, newest first."""
        orders = await self.list_orders()
        return json.dumps([o.to_json_dict() for o in orders], indent=2, ensure_ascii=False)

    def parse_orders(self, payload: str) -> Optional[List[Order]]:
        """Validate an exported orders file. ``None`` if it is not a JSON array of orders."""
        try:
            raw: Any = json.loads(payload)
            return _ORDER_LIST.validate_python(raw)
        except (ValueError, PydanticValidationError) as exc:
            self._fail("Invalid orders file", exc)
            return None

    async def replace_orders(self, orders: List[Order]) -> Optional[int]:
        """Overwrite the collection with ``orders``. Returns the count, ``None`` if the store fails."""
        try:
            await self.store.replace_all(orders)
        except ProjectError as exc:
            self._fail("Failed to import orders", exc)
            return None
        logger.info("OrderService: imported %d orders", len(orders))
        return len(orders)

    async def import_orders(self, payload: str) -> Optional[int]:
        """Replace every stored order with the JSON array in ``payload``.

        Returns the number of imported orders, or ``None`` if the payload is
        not a valid order array or the store rejects it. An invalid payload
        leaves the store untouched.
        """
        orders = self.parse_orders(payload)
        if orders is None:
            return None
        return await self.replace_orders(orders)
