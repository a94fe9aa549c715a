"""
Shared fixtures: in-memory row store doubles and tick builders.
"""
import asyncio
from typing import Dict, List, Tuple

import pytest

from core.domain.entities.order_book_entity import OrderBookAction, OrderBookEventEntity
from core.domain.entities.price_tick_entity import PriceTickEntity
from core.domain.entities.trade_entity import PriceObservationEntity, TradeEventEntity
from core.repositories.order_book_repository import OrderBookRepository
from core.repositories.price_tick_repository import PriceTickRepository
from core.repositories.trade_feed import TradeFeed
from core.usecases.unified_market_data_use_case import UnifiedMarketDataUseCase

NOW = 1_699_999_200  # multiple of 3600 -> 2023-11-14T22:00:00Z


class InMemoryPriceRepo(PriceTickRepository):
    """rows: table -> list of (id, timestamp_ms, price)."""

    def __init__(self, rows: Dict[str, List[Tuple[int, int, float]]] | None = None, delay_s: float = 0.0):
        self.rows = rows or {}
        self.delay_s = delay_s
        self.calls: List[tuple] = []

    async def list_ticks_in_range(self, table, start_ms, end_ms, limit):
        self.calls.append(("ticks", table, start_ms, end_ms, limit))
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        rows = sorted((r for r in self.rows.get(table, []) if start_ms <= r[1] < end_ms), key=lambda r: r[1])
        return [PriceTickEntity(timestamp_ms=ts, price=p) for _, ts, p in rows[:limit]]

    async def list_recent_observations(self, table, start_ms, end_ms, limit):
        self.calls.append(("observations", table, start_ms, end_ms, limit))
        rows = sorted(
            (r for r in self.rows.get(table, []) if start_ms <= r[1] < end_ms), key=lambda r: r[1], reverse=True
        )
        return [PriceObservationEntity(id=i, timestamp=ts // 1000, price=p) for i, ts, p in rows[:limit]]


class InMemoryBookRepo(OrderBookRepository):
    """rows: table -> list of (id, timestamp_ms, action, order_id, amount)."""

    def __init__(self, rows=None, error: Exception | None = None):
        self.rows = rows or {}
        self.error = error
        self.calls: List[tuple] = []

    async def list_recent_events(self, table, limit):
        self.calls.append(("events", table, limit))
        if self.error is not None:
            raise self.error
        rows = sorted(self.rows.get(table, []), key=lambda r: (r[1], r[0]), reverse=True)[:limit]
        return [
            OrderBookEventEntity(timestamp_ms=ts, action=OrderBookAction(a), order_id=oid, amount=amt)
            for _, ts, a, oid, amt in rows
        ]


class ListTradeFeed(TradeFeed):
    """Returns queued batches, one per fetch_new() call."""

    def __init__(self, batches=None):
        self.batches = list(batches or [])
        self.closed = False

    async def fetch_new(self):
        if not self.batches:
            return []
        return [TradeEventEntity(**t) for t in self.batches.pop(0)]

    async def aclose(self):
        self.closed = True


def ticks(*pairs):
    """ticks((sec, price), ...) -> PriceTickEntity list with ms timestamps."""
    return [PriceTickEntity(timestamp_ms=int(t * 1000), price=p) for t, p in pairs]


@pytest.fixture
def price_repo():
    return InMemoryPriceRepo(
        {
            "price_bitmex_xbt_usd": [
                (1, (NOW - 3600) * 1000, 100.0),
                (2, (NOW - 3590) * 1000, 105.0),
                (3, (NOW - 3000) * 1000, 102.0),
                (4, (NOW - 120) * 1000, 110.0),
                (5, (NOW - 59) * 1000, 108.0),
                (6, (NOW - 30) * 1000, 109.0),
            ]
        }
    )


@pytest.fixture
def book_repo():
    return InMemoryBookRepo(
        {
            "book_bitmex_xbt_usd": [
                (1, (NOW - 5) * 1000, 1, 100, 5.0),
                (2, (NOW - 4) * 1000, 1, 90, 3.0),
                (3, (NOW - 3) * 1000, 1, 120, -2.0),
                (4, (NOW - 2) * 1000, 0, 100, 0.0),
            ]
        }
    )


@pytest.fixture
def market_data(price_repo, book_repo):
    return UnifiedMarketDataUseCase(
        price_repository=price_repo,
        order_book_repository=book_repo,
        query_timeout_s=1.0,
        clock=lambda: float(NOW),
    )
