from __future__ import annotations

from typing import List

from sqlalchemy import column, select, table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from core.domain.entities.price_tick_entity import PriceTickEntity
from core.domain.entities.trade_entity import PriceObservationEntity
from core.domain.errors import DataSourceUnavailable
from core.repositories.price_tick_repository import PriceTickRepository


def price_table(name: str):
    return table(name, column("id"), column("timestamp"), column("price"))


class PriceTickRepositorySQL(PriceTickRepository):
    """
    SQL implementation over per-market price tables:

      price_<exchange>_<base>_<quote>(id, timestamp BIGINT ms, price DOUBLE)

    Table names come from MarketKeyService, never from request input.
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine

    async def list_ticks_in_range(self, table: str, start_ms: int, end_ms: int, limit: int) -> List[PriceTickEntity]:
        t = price_table(table)
        stmt = (
            select(t.c.timestamp, t.c.price)
            .where(t.c.timestamp >= int(start_ms), t.c.timestamp < int(end_ms))
            .order_by(t.c.timestamp.asc())
            .limit(int(limit))
        )
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt)
                rows = result.mappings().all()
        except SQLAlchemyError as exc:
            raise DataSourceUnavailable(f"price query on {table} failed: {exc}") from exc

        return [PriceTickEntity(timestamp_ms=int(r["timestamp"]), price=float(r["price"])) for r in rows]

    async def list_recent_observations(
        self, table: str, start_ms: int, end_ms: int, limit: int
    ) -> List[PriceObservationEntity]:
        t = price_table(table)
        stmt = (
            select(t.c.id, t.c.timestamp, t.c.price)
            .where(t.c.timestamp >= int(start_ms), t.c.timestamp < int(end_ms))
            .order_by(t.c.timestamp.desc())
            .limit(int(limit))
        )
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt)
                rows = result.mappings().all()
        except SQLAlchemyError as exc:
            raise DataSourceUnavailable(f"trade query on {table} failed: {exc}") from exc

        return [
            PriceObservationEntity(id=r["id"], timestamp=int(r["timestamp"]) // 1000, price=float(r["price"]))
            for r in rows
        ]
