from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorClient
from sqlalchemy.ext.asyncio import AsyncEngine

from adapters.external.bot.trade_feed_http_client import BotTradeFeedHttpClient
from adapters.external.bot.trade_log_file_feed import TradeLogFileFeed
from adapters.external.database.mongodb_client import get_mongo_client
from adapters.external.database.order_book_repository_mongodb import OrderBookRepositoryMongoDB
from adapters.external.database.order_book_repository_sql import OrderBookRepositorySQL
from adapters.external.database.price_tick_repository_mongodb import PriceTickRepositoryMongoDB
from adapters.external.database.price_tick_repository_sql import PriceTickRepositorySQL
from adapters.external.database.sql_client import get_sql_engine
from config.settings import settings
from core.domain.entities.candle_entity import CandleEntity
from core.repositories.trade_feed import TradeFeed
from core.services.live_candle_service import LiveCandleRegistry, LiveCandleUpdater
from core.services.market_key_service import MarketKeyService
from core.services.period_calendar_service import PeriodCalendarService
from core.usecases.start_polling_trades_use_case import StartPollingTradesUseCase
from core.usecases.unified_market_data_use_case import UnifiedMarketDataUseCase

FeedFactory = Callable[[str], TradeFeed]


class MarketDataSupervisor:
    """
    High-level supervisor for api-market-view.

    Responsibilities:
    - Open the row store (SQL engine or Mongo client) and build repositories.
    - Expose the UnifiedMarketDataUseCase used by the HTTP layer.
    - Own the live candle registry and one trade poller per (market, period)
      subscription; pollers stop when the last subscriber leaves.
    """

    def __init__(
        self,
        *,
        market_data: UnifiedMarketDataUseCase | None = None,
        feed_factory: FeedFactory | None = None,
    ) -> None:
        self._logger = logging.getLogger(self.__class__.__name__)
        self._engine: AsyncEngine | None = None
        self._mongo_client: AsyncIOMotorClient | None = None

        self._market_data = market_data
        self._feed_factory = feed_factory or self._default_feed
        self._registry = LiveCandleRegistry()
        self._pollers: Dict[Tuple[str, str], StartPollingTradesUseCase] = {}

    @property
    def market_data(self) -> UnifiedMarketDataUseCase:
        if self._market_data is None:
            raise RuntimeError("MarketDataSupervisor.start() has not been called")
        return self._market_data

    @property
    def registry(self) -> LiveCandleRegistry:
        return self._registry

    async def start(self) -> None:
        """
        Connect to the configured row store and build the query façade.
        """
        if self._market_data is not None:
            return

        backend = settings.ROW_STORE_BACKEND
        if backend == "mongodb":
            self._mongo_client = get_mongo_client()
            db = self._mongo_client[settings.MONGODB_DB_NAME]
            price_repo = PriceTickRepositoryMongoDB(db)
            book_repo = OrderBookRepositoryMongoDB(db)
        else:
            if backend != "sql":
                self._logger.warning("Unknown ROW_STORE_BACKEND=%s, falling back to sql", backend)
            self._engine = get_sql_engine()
            price_repo = PriceTickRepositorySQL(self._engine)
            book_repo = OrderBookRepositorySQL(self._engine)

        self._market_data = UnifiedMarketDataUseCase(
            price_repository=price_repo,
            order_book_repository=book_repo,
            query_timeout_s=settings.QUERY_TIMEOUT_S,
            orderbook_window=settings.ORDERBOOK_WINDOW,
            max_price_rows=settings.MAX_PRICE_ROWS,
        )
        self._logger.info("Market data supervisor started backend=%s", backend)

    async def stop(self) -> None:
        """
        Stop pollers and close the row store.
        """
        for poller in list(self._pollers.values()):
            with contextlib.suppress(Exception):
                await poller.stop()
        self._pollers.clear()

        if self._engine is not None:
            with contextlib.suppress(Exception):
                await self._engine.dispose()
            self._engine = None

        if self._mongo_client is not None:
            self._mongo_client.close()
            self._mongo_client = None

    @staticmethod
    def _default_feed(market: str) -> TradeFeed:
        if settings.TRADE_FEED_SOURCE == "file":
            return TradeLogFileFeed(path=Path(settings.TRADES_DIR) / settings.MARKET_TRADES_FILE)
        return BotTradeFeedHttpClient(base_url=settings.BOT_FEED_BASE_URL, market=market)

    async def subscribe(self, market: str, period: str) -> LiveCandleUpdater:
        """
        Attach a subscriber to the live candle of (market, period).

        The first subscriber seeds the forming candle from history and starts
        the trade poller. If seeding fails or is cancelled the pair is dropped,
        including subscribers that joined while history was loading. If the
        pair was torn down while history was loading, no poller is started.
        """
        tables = MarketKeyService.resolve(market)
        period = PeriodCalendarService.normalize(period)

        updater, created = self._registry.acquire(tables.market, period)
        if not created:
            return updater

        try:
            history = await self.market_data.get_candles(tables.market, period, limit=2)
        except BaseException:
            if self._registry.get(tables.market, period) is updater:
                self._registry.discard(tables.market, period)
            raise

        if self._registry.get(tables.market, period) is not updater:
            self._logger.info(
                "Subscription torn down while loading history market=%s period=%s", tables.market, period
            )
            return updater

        updater.init_from_history(history, self.market_data.now_sec())

        poller = StartPollingTradesUseCase(
            market=tables.market,
            feed=self._feed_factory(tables.market),
            updater=updater,
            poll_every_s=settings.TRADE_POLL_EVERY_S,
            on_candle_closed=self._make_closed_logger(tables.market, period),
        )
        self._pollers[(tables.market, period)] = poller
        poller.start()
        return updater

    async def unsubscribe(self, market: str, period: str) -> bool:
        """
        Detach a subscriber. Returns True when the pair was torn down.
        """
        tables = MarketKeyService.resolve(market)
        period = PeriodCalendarService.normalize(period)

        if not self._registry.release(tables.market, period):
            return False

        poller = self._pollers.pop((tables.market, period), None)
        if poller is not None:
            await poller.stop()
        return True

    def forming_candle(self, market: str, period: str) -> Optional[CandleEntity]:
        tables = MarketKeyService.resolve(market)
        updater = self._registry.get(tables.market, period)
        return updater.forming if updater is not None else None

    def _make_closed_logger(self, market: str, period: str):
        async def _on_closed(candle: CandleEntity) -> None:
            self._logger.info("Candle closed market=%s period=%s candle=%s", market, period, candle.to_dict())

        return _on_closed
