from __future__ import annotations

from typing import List

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from core.domain.entities.price_tick_entity import PriceTickEntity
from core.domain.entities.trade_entity import PriceObservationEntity
from core.domain.errors import DataSourceUnavailable
from core.repositories.price_tick_repository import PriceTickRepository


class PriceTickRepositoryMongoDB(PriceTickRepository):
    """
    MongoDB repository for price ticks.

    One collection per market, named like the SQL table
    (e.g. "price_bitmex_xbt_usd"), documents shaped {timestamp, price, id?}.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self._db = db

    async def ensure_indexes(self, collection: str) -> None:
        await self._db[collection].create_index([("timestamp", 1)])

    async def list_ticks_in_range(self, table: str, start_ms: int, end_ms: int, limit: int) -> List[PriceTickEntity]:
        col = self._db[table]
        try:
            cur = (
                col.find({"timestamp": {"$gte": int(start_ms), "$lt": int(end_ms)}})
                .sort("timestamp", 1)
                .limit(int(limit))
            )
            docs = await cur.to_list(length=int(limit))
        except PyMongoError as exc:
            raise DataSourceUnavailable(f"price query on {table} failed: {exc}") from exc
        return [PriceTickEntity.from_mongo(d) for d in docs if d]

    async def list_recent_observations(
        self, table: str, start_ms: int, end_ms: int, limit: int
    ) -> List[PriceObservationEntity]:
        col = self._db[table]
        try:
            cur = (
                col.find({"timestamp": {"$gte": int(start_ms), "$lt": int(end_ms)}})
                .sort("timestamp", -1)
                .limit(int(limit))
            )
            docs = await cur.to_list(length=int(limit))
        except PyMongoError as exc:
            raise DataSourceUnavailable(f"trade query on {table} failed: {exc}") from exc
        return [
            PriceObservationEntity(id=d.get("id"), timestamp=int(d["timestamp"]) // 1000, price=float(d["price"]))
            for d in docs
            if d
        ]
