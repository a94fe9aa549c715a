from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar

from core.domain.entities.candle_entity import CandleEntity
from core.domain.entities.order_book_entity import OrderBookSnapshotEntity
from core.domain.entities.trade_entity import SyntheticTradeEntity
from core.domain.errors import DataSourceUnavailable, MalformedInput
from core.repositories.order_book_repository import OrderBookRepository
from core.repositories.price_tick_repository import PriceTickRepository
from core.services.candle_aggregation_service import CandleAggregationService
from core.services.indicator_calculation_service import IndicatorCalculationService
from core.services.market_key_service import MarketKeyService
from core.services.order_book_service import OrderBookReconstructionService
from core.services.period_calendar_service import PERIOD_SECONDS, PeriodCalendarService
from core.services.trade_synthesis_service import TradeSynthesisService

T = TypeVar("T")


class UnifiedMarketDataUseCase:
    """
    Single entry point for candle, order book and trade-tape queries.

    - Market and period ids are validated before any row-store call.
    - Every row-store call is bounded by query_timeout_s; timeouts and
      connection failures surface as DataSourceUnavailable, never as empty data.
    - Holds no per-request state, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        *,
        price_repository: PriceTickRepository,
        order_book_repository: OrderBookRepository,
        query_timeout_s: float = 10.0,
        orderbook_window: int = 1000,
        max_price_rows: int = 100_000,
        clock: Callable[[], float] = time.time,
        logger: logging.Logger | None = None,
    ) -> None:
        self._prices = price_repository
        self._book = order_book_repository
        self._timeout = float(query_timeout_s)
        self._orderbook_window = int(orderbook_window)
        self._max_price_rows = int(max_price_rows)
        self._clock = clock
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    def now_sec(self) -> int:
        return int(self._clock())

    async def _query(self, what: str, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except asyncio.TimeoutError:
            self._logger.warning("Row store query timed out: %s timeout_s=%s", what, self._timeout)
            raise DataSourceUnavailable(f"{what} timed out after {self._timeout}s") from None
        except OSError as exc:
            self._logger.warning("Row store query failed: %s: %s", what, exc)
            raise DataSourceUnavailable(f"{what} failed: {exc}") from exc

    @staticmethod
    def _require_positive(name: str, value: int) -> int:
        value = int(value)
        if value <= 0:
            raise MalformedInput(f"{name} must be positive, got {value}")
        return value

    @staticmethod
    def list_markets() -> Dict[str, Any]:
        return {
            "markets": [m.upper() for m in MarketKeyService.supported_markets()],
            "periods": list(PERIOD_SECONDS),
            "periodSeconds": dict(PERIOD_SECONDS),
        }

    async def get_candles(
        self,
        market: str,
        period: str,
        limit: int = 100,
        start_sec: Optional[int] = None,
        end_sec: Optional[int] = None,
        *,
        fill_gaps: bool = False,
    ) -> List[CandleEntity]:
        """
        Aggregate raw ticks into the `limit` most recent candles.

        The default range is [now - width * limit, now).
        """
        tables = MarketKeyService.resolve(market)
        width = PeriodCalendarService.width_seconds(period)
        limit = self._require_positive("limit", limit)

        now = self.now_sec()
        start = int(start_sec) if start_sec is not None else now - width * limit
        end = int(end_sec) if end_sec is not None else now
        if end <= start:
            return []

        ticks = await self._query(
            f"ticks {tables.price_table}",
            self._prices.list_ticks_in_range(tables.price_table, start * 1000, end * 1000, self._max_price_rows),
        )
        if len(ticks) >= self._max_price_rows:
            self._logger.warning(
                "Tick query hit row cap market=%s period=%s cap=%s", tables.market, period, self._max_price_rows
            )

        candles = CandleAggregationService.aggregate(ticks, width)
        if fill_gaps:
            candles = CandleAggregationService.fill_gaps(candles, width, end_sec=end)
        return candles[-limit:]

    async def get_orderbook(self, market: str, depth: int = 25) -> OrderBookSnapshotEntity:
        """
        Best-effort snapshot rebuilt from the newest `orderbook_window` deltas.
        """
        tables = MarketKeyService.resolve(market)
        depth = self._require_positive("depth", depth)

        events = await self._query(
            f"order book {tables.book_table}",
            self._book.list_recent_events(tables.book_table, self._orderbook_window),
        )
        events.reverse()  # newest-first -> replay order
        return OrderBookReconstructionService.reconstruct(events, depth)

    async def get_trades(self, market: str, period: str = "1h", limit: int = 100) -> List[SyntheticTradeEntity]:
        """
        Synthesized trade tape over the trailing `period`, chronological.
        """
        tables = MarketKeyService.resolve(market)
        width = PeriodCalendarService.width_seconds(period)
        limit = self._require_positive("limit", limit)

        now = self.now_sec()
        rows = await self._query(
            f"trades {tables.price_table}",
            self._prices.list_recent_observations(tables.price_table, (now - width) * 1000, now * 1000, limit),
        )
        rows.reverse()
        return TradeSynthesisService.synthesize(rows)[-limit:]

    async def get_indicators(
        self,
        market: str,
        period: str,
        limit: int = 200,
        *,
        ema_periods: Sequence[int] = (20, 50),
        bb_period: int = 20,
        bb_std: float = 2.0,
    ) -> Dict[str, Any]:
        candles = await self.get_candles(market, period, limit)
        return {
            "ema": {str(p): IndicatorCalculationService.ema(candles, p) for p in ema_periods},
            "bollinger": IndicatorCalculationService.bollinger_bands(candles, bb_period, bb_std),
            "count": len(candles),
        }
