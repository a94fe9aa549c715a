from __future__ import annotations

from typing import List

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from adapters.external.database.order_book_repository_sql import to_event
from core.domain.entities.order_book_entity import OrderBookEventEntity
from core.domain.errors import DataSourceUnavailable
from core.repositories.order_book_repository import OrderBookRepository


class OrderBookRepositoryMongoDB(OrderBookRepository):
    """
    MongoDB repository for order-book deltas, one collection per market
    (e.g. "book_bitmex_xbt_usd"), documents shaped {timestamp, action, order_id, amount}.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self._db = db

    async def ensure_indexes(self, collection: str) -> None:
        await self._db[collection].create_index([("timestamp", -1), ("_id", -1)])

    async def list_recent_events(self, table: str, limit: int) -> List[OrderBookEventEntity]:
        col = self._db[table]
        try:
            cur = col.find({}).sort([("timestamp", -1), ("_id", -1)]).limit(int(limit))
            docs = await cur.to_list(length=int(limit))
        except PyMongoError as exc:
            raise DataSourceUnavailable(f"order book query on {table} failed: {exc}") from exc
        return [to_event(d) for d in docs if d]
