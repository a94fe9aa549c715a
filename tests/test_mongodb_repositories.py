import asyncio

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from adapters.external.database.order_book_repository_mongodb import OrderBookRepositoryMongoDB
from adapters.external.database.price_tick_repository_mongodb import PriceTickRepositoryMongoDB
from core.domain.entities.order_book_entity import OrderBookAction
from core.domain.errors import DataSourceUnavailable


class FakeCursor:
    def __init__(self, docs, error=None):
        self.docs = docs
        self.error = error
        self.sort_args = None
        self.limit_n = None

    def sort(self, *args):
        self.sort_args = args
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    async def to_list(self, length):
        if self.error is not None:
            raise self.error
        return list(self.docs)[:length]


class FakeCollection:
    def __init__(self, docs, error=None):
        self.cursor = FakeCursor(docs, error)
        self.filters = []

    def find(self, flt):
        self.filters.append(flt)
        return self.cursor


class FakeDb(dict):
    pass


class TestPriceTickRepositoryMongoDB:
    def test_ticks_query_shape(self):
        col = FakeCollection([{"_id": "x", "timestamp": 1_000, "price": 1.5}])
        repo = PriceTickRepositoryMongoDB(FakeDb(price_bitmex_xbt_usd=col))

        out = asyncio.run(repo.list_ticks_in_range("price_bitmex_xbt_usd", 1_000, 2_000, 10))

        assert [(t.timestamp_ms, t.price) for t in out] == [(1_000, 1.5)]
        assert col.filters == [{"timestamp": {"$gte": 1_000, "$lt": 2_000}}]
        assert col.cursor.sort_args == ("timestamp", 1)
        assert col.cursor.limit_n == 10

    def test_observations_in_seconds(self):
        col = FakeCollection([{"_id": "a", "id": 7, "timestamp": 5_999, "price": 2.0}])
        repo = PriceTickRepositoryMongoDB(FakeDb(price_bitmex_xbt_usd=col))

        out = asyncio.run(repo.list_recent_observations("price_bitmex_xbt_usd", 0, 10_000, 5))

        assert [(o.id, o.timestamp, o.price) for o in out] == [(7, 5, 2.0)]
        assert col.cursor.sort_args == ("timestamp", -1)

    def test_driver_error_is_data_source_unavailable(self):
        col = FakeCollection([], error=ServerSelectionTimeoutError("no servers"))
        repo = PriceTickRepositoryMongoDB(FakeDb(price_bitmex_xbt_usd=col))
        with pytest.raises(DataSourceUnavailable):
            asyncio.run(repo.list_ticks_in_range("price_bitmex_xbt_usd", 0, 1, 1))


class TestOrderBookRepositoryMongoDB:
    def test_events_mapped(self):
        col = FakeCollection(
            [
                {"_id": "b", "timestamp": 2_000, "action": 0, "order_id": 100, "amount": 0},
                {"_id": "a", "timestamp": 1_000, "action": 1, "order_id": 100, "amount": 4},
            ]
        )
        repo = OrderBookRepositoryMongoDB(FakeDb(book_bitmex_xbt_usd=col))

        out = asyncio.run(repo.list_recent_events("book_bitmex_xbt_usd", 1000))

        assert [(e.action, e.order_id, e.amount) for e in out] == [
            (OrderBookAction.REMOVE, 100, 0.0),
            (OrderBookAction.UPSERT, 100, 4.0),
        ]
        assert col.cursor.sort_args == ([("timestamp", -1), ("_id", -1)],)
