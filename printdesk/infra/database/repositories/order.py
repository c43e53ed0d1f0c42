"""Order repository: every SQL statement the database order backend issues."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from printdesk.infra.database.models.order import OrderRecord


class OrderRepository:
    """Thin query layer over ``orders``. Never commits; the caller owns the session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def all_in_insertion_order(self) -> List[OrderRecord]:
        result = await self.session.execute(select(OrderRecord).order_by(OrderRecord.pk))
        return list(result.scalars().all())

    async def find(self, order_id: str) -> Optional[OrderRecord]:
        stmt = select(OrderRecord).where(OrderRecord.order_id == order_id).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def insert(self, row: Dict[str, Any]) -> OrderRecord:
        record = OrderRecord(**row)
        self.session.add(record)
        await self.session.flush()
        return record

    async def insert_many(self, rows: Iterable[Dict[str, Any]]) -> int:
        rows = list(rows)
        if rows:
            await self.session.execute(insert(OrderRecord), rows)
        return len(rows)

    async def set_status(self, order_id: str, status: str, updated_at: str) -> Optional[OrderRecord]:
        record = await self.find(order_id)
        if record is None:
            return None
        record.status = status
        record.updated_at = updated_at
        await self.session.flush()
        return record

    async def purge(self) -> int:
        """DELETE every row, no filter. Returns the number removed."""
        result = await self.session.execute(delete(OrderRecord))
        return result.rowcount or 0

    async def status_counts(self) -> Dict[str, int]:
        stmt = select(OrderRecord.status, func.count(OrderRecord.pk)).group_by(OrderRecord.status)
        result = await self.session.execute(stmt)
        return {status: count for status, count in result.all()}
