"""Order backend keeping one row per order in an SQL table (PostgreSQL in production).

Uniqueness of ``order_id``, durability and concurrency are left to the
database. Each operation runs in its own session and commits once.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from printdesk.config import DatabaseConfig
from printdesk.core.exceptions import PersistenceError
from printdesk.infra.database.engine import (
    build_engine,
    build_session_factory,
    ensure_database_exists,
    init_db,
)
from printdesk.infra.database.models import OrderRecord
from printdesk.infra.database.repositories import OrderRepository
from printdesk.stores.base import Clock, OrderStore, sort_orders
from printdesk.stores.types import Order

logger = logging.getLogger(__name__)

_COLUMNS = tuple(Order.model_fields)


def _to_order(record: OrderRecord) -> Order:
    return Order.model_validate({name: getattr(record, name) for name in _COLUMNS})


def _to_row(order: Order) -> dict:
    return order.model_dump(mode="json")


class DatabaseOrderStore(OrderStore):
    backend = "database"

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        config: Optional[DatabaseConfig] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(clock=clock)
        self._engine = engine
        self._config = config
        self._session_factory: async_sessionmaker[AsyncSession] = build_session_factory(engine)

    @classmethod
    def from_config(cls, config: DatabaseConfig, **kwargs) -> "DatabaseOrderStore":
        return cls(build_engine(config), config=config, **kwargs)

    @asynccontextmanager
    async def _repo(self) -> AsyncIterator[OrderRepository]:
        async with self._session_factory() as session:
            try:
                yield OrderRepository(session)
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise PersistenceError("Database operation failed", cause=exc) from exc

    async def initialize(self) -> None:
        try:
            if self._config is not None:
                await ensure_database_exists(self._config)
            await init_db(self._engine)
        except SQLAlchemyError as exc:
            raise PersistenceError("Could not initialise database", cause=exc) from exc

    async def close(self) -> None:
        await self._engine.dispose()
        logger.info("database: engine disposed")

    async def add(self, order: Order) -> Order:
        async with self._repo() as repo:
            record = await repo.insert(_to_row(order))
            return _to_order(record)

    async def list_orders(self) -> List[Order]:
        async with self._repo() as repo:
            records = await repo.all_in_insertion_order()
            return sort_orders(_to_order(r) for r in records)

    async def get_order(self, order_id: str) -> Optional[Order]:
        async with self._repo() as repo:
            record = await repo.find(order_id)
            return _to_order(record) if record is not None else None

    async def update_status(self, order_id: str, status: str) -> Optional[Order]:
        async with self._repo() as repo:
            record = await repo.set_status(order_id, status, self._clock())
            return _to_order(record) if record is not None else None

    async def delete_all(self) -> None:
        async with self._repo() as repo:
            removed = await repo.purge()
        logger.info("database: deleted %d orders", removed)

    async def replace_all(self, orders: List[Order]) -> None:
        # Single transaction: either the old rows or the new ones survive
        async with self._repo() as repo:
            await repo.purge()
            await repo.insert_many(_to_row(o) for o in orders)

    async def count_by_status(self) -> Dict[str, int]:
        async with self._repo() as repo:
            return await repo.status_counts()
