"""Read-modify-write base for backends that keep every order in one document."""
from __future__ import annotations

import asyncio
import json
import logging
from abc import abstractmethod
from typing import Any, Callable, ClassVar, List, Optional, TypeVar

from pydantic import ValidationError as PydanticValidationError

from printdesk.core.exceptions import PersistenceError
from printdesk.stores.base import OrderStore, sort_orders
from printdesk.stores.types import Order

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CollectionOrderStore(OrderStore):
    """Implements the contract on top of "read the whole list" / "write the whole list".

    There is no locking: two concurrent writers both read, both modify and the
    last write wins.
    """

    # Run _read_raw/_write_raw in the default executor instead of on the event loop
    blocking_io: ClassVar[bool] = False

    @abstractmethod
    def _read_raw(self) -> Optional[str]:
        """Return the serialized collection, or None if nothing was ever written."""

    @abstractmethod
    def _write_raw(self, payload: str) -> None:
        ...

    def _clear(self) -> None:
        self._write_raw(self._dump([]))

    async def _io(self, fn: Callable[..., T], *args: Any) -> T:
        if not self.blocking_io:
            return fn(*args)
        return await asyncio.get_event_loop().run_in_executor(None, fn, *args)

    @staticmethod
    def _dump(orders: List[Order]) -> str:
        return json.dumps([o.to_json_dict() for o in orders], indent=2, ensure_ascii=False)

    def _load(self) -> List[Order]:
        """Orders in insertion order."""
        try:
            raw = self._read_raw()
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Could not read orders ({self.backend})", cause=exc) from exc
        if not raw or not raw.strip():
            return []
        try:
            items: Any = json.loads(raw)
            if not isinstance(items, list):
                raise ValueError(f"expected a JSON array, got {type(items).__name__}")
            return [Order.model_validate(item) for item in items]
        except (ValueError, PydanticValidationError) as exc:
            raise PersistenceError(f"Stored orders are corrupt ({self.backend})", cause=exc) from exc

    def _save(self, orders: List[Order]) -> None:
        try:
            self._write_raw(self._dump(orders))
        except OSError as exc:
            raise PersistenceError(f"Could not write orders ({self.backend})", cause=exc) from exc

    def _delete(self) -> None:
        try:
            self._clear()
        except OSError as exc:
            raise PersistenceError(f"Could not delete orders ({self.backend})", cause=exc) from exc

    async def add(self, order: Order) -> Order:
        orders = await self._io(self._load)
        orders.append(order)
        await self._io(self._save, orders)
        logger.debug("%s: added order %s (%d total)", self.backend, order.order_id, len(orders))
        return order

    async def list_orders(self) -> List[Order]:
        return sort_orders(await self._io(self._load))

    async def get_order(self, order_id: str) -> Optional[Order]:
        for order in await self._io(self._load):
            if order.order_id == order_id:
                return order
        return None

    async def update_status(self, order_id: str, status: str) -> Optional[Order]:
        orders = await self._io(self._load)
        for index, order in enumerate(orders):
            if order.order_id == order_id:
                updated = order.model_copy(update={"status": status, "updated_at": self._clock()})
                orders[index] = updated
                await self._io(self._save, orders)
                return updated
        return None

    async def delete_all(self) -> None:
        await self._io(self._delete)

    async def replace_all(self, orders: List[Order]) -> None:
        await self._io(self._save, list(orders))
