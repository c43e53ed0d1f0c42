"""OrderStore contract and the helpers every backend shares."""
from __future__ import annotations

import secrets
import time
from abc import ABC, abstractmethod
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, ClassVar, Dict, Iterable, List, Optional, Tuple

from printdesk.stores.types import Order

Clock = Callable[[], str]

_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def utc_now_iso() -> str:
    """Current UTC time as ``2024-01-01T10:00:00.000Z``."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_order_id() -> str:
    """Internal id: ``order_<epoch-millis>_<9 base36 chars>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"order_{time.time_ns() // 1_000_000}_{suffix}"


def _parse_order_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def order_date_key(order: Order) -> Tuple[int, float]:
    """Sort key putting the newest ``order_date`` first and unparseable dates last."""
    parsed = _parse_order_date(order.order_date)
    if parsed is None:
        return (1, 0.0)
    return (0, -parsed.timestamp())


def sort_orders(orders: Iterable[Order]) -> List[Order]:
    # sorted() is stable: equal dates keep insertion order
    return sorted(orders, key=order_date_key)


def tally_statuses(orders: Iterable[Order]) -> Dict[str, int]:
    return dict(Counter(o.status for o in orders))


class OrderStore(ABC):
    """Persistence contract implemented by the file, key-value and database backends.

    Every failure of the underlying medium is raised as
    :class:`~printdesk.core.exceptions.PersistenceError`. A missing order is
    not a failure: lookups return ``None``.
    """

    backend: ClassVar[str]

    def __init__(self, *, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or utc_now_iso

    async def initialize(self) -> None:
        """Prepare the medium (create file, tables, ...). Safe to call repeatedly."""
        return None

    async def close(self) -> None:
        return None

    @abstractmethod
    async def add(self, order: Order) -> Order:
        """Persist an already stamped order. Duplicate ``order_id`` is not checked here."""

    @abstractmethod
    async def list_orders(self) -> List[Order]:
        """All orders, newest ``order_date`` first."""

    @abstractmethod
    async def get_order(self, order_id: str) -> Optional[Order]:
        ...

    @abstractmethod
    async def update_status(self, order_id: str, status: str) -> Optional[Order]:
        """Overwrite ``status`` and refresh ``updated_at``. ``None`` if no order matches."""

    @abstractmethod
    async def delete_all(self) -> None:
        ...

    @abstractmethod
    async def replace_all(self, orders: List[Order]) -> None:
        """Overwrite the whole collection with ``orders``."""

    async def count_by_status(self) -> Dict[str, int]:
        return tally_statuses(await self.list_orders())
