from __future__ import annotations

from typing import List

from sqlalchemy import column, select, table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from core.domain.entities.order_book_entity import OrderBookAction, OrderBookEventEntity
from core.domain.errors import DataSourceUnavailable
from core.repositories.order_book_repository import OrderBookRepository


def book_table(name: str):
    return table(name, column("id"), column("timestamp"), column("action"), column("order_id"), column("amount"))


def to_event(row) -> OrderBookEventEntity:
    # 0 = remove; the recorder writes 1 for upserts but anything else is treated the same
    action = OrderBookAction.REMOVE if int(row["action"]) == 0 else OrderBookAction.UPSERT
    return OrderBookEventEntity(
        timestamp_ms=int(row["timestamp"]),
        action=action,
        order_id=int(row["order_id"]),
        amount=float(row["amount"]),
    )


class OrderBookRepositorySQL(OrderBookRepository):
    """
    SQL implementation over per-market delta tables:

      book_<exchange>_<base>_<quote>(id, timestamp BIGINT ms, action TINYINT, order_id BIGINT, amount DOUBLE)
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine

    async def list_recent_events(self, table: str, limit: int) -> List[OrderBookEventEntity]:
        t = book_table(table)
        stmt = (
            select(t.c.timestamp, t.c.action, t.c.order_id, t.c.amount)
            .order_by(t.c.timestamp.desc(), t.c.id.desc())
            .limit(int(limit))
        )
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt)
                rows = result.mappings().all()
        except SQLAlchemyError as exc:
            raise DataSourceUnavailable(f"order book query on {table} failed: {exc}") from exc

        return [to_event(r) for r in rows]
