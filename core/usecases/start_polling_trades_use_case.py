# core/usecases/start_polling_trades_use_case.py
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from core.domain.entities.candle_entity import CandleEntity
from core.domain.errors import MalformedInput
from core.repositories.trade_feed import TradeFeed
from core.services.live_candle_service import LiveCandleUpdater

CandleClosedCallback = Callable[[CandleEntity], Awaitable[None]]


class StartPollingTradesUseCase:
    """
    Polls a trade feed on a fixed interval and drives one LiveCandleUpdater.

    The loop is the only writer of its updater. A cycle never overlaps the
    previous one: the next poll starts only after the current batch is applied.
    """

    def __init__(
        self,
        *,
        market: str,
        feed: TradeFeed,
        updater: LiveCandleUpdater,
        poll_every_s: float = 1.0,
        on_candle_closed: Optional[CandleClosedCallback] = None,
        logger: logging.Logger | None = None,
    ):
        self._market = market
        self._feed = feed
        self._updater = updater
        self._poll_every_s = float(poll_every_s)
        self._on_candle_closed = on_candle_closed
        self._logger = logger or logging.getLogger(self.__class__.__name__)

        self._task: asyncio.Task | None = None
        self._stop = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the polling loop in background."""
        if self._task is None:
            self._stop.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the polling loop gracefully and close the feed."""
        self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None
        await self._feed.aclose()

    async def poll_once(self) -> int:
        """
        Fetch and apply one batch of trades.

        Malformed trades are logged and skipped; the rest of the batch is
        still applied.

        Returns:
            Number of trades applied.
        """
        trades = await self._feed.fetch_new()
        if not trades:
            return 0

        trades.sort(key=lambda t: t.timestamp)
        applied = 0
        for trade in trades:
            try:
                closed = self._updater.on_trade(trade.price, trade.timestamp, trade.amount)
            except MalformedInput as exc:
                self._logger.warning("Skipping malformed trade market=%s: %s", self._market, exc)
                continue
            applied += 1
            if closed is not None and self._on_candle_closed is not None:
                await self._on_candle_closed(closed)
        return applied

    async def _run(self) -> None:
        while not self._stop.is_set():
            try:
                await self.poll_once()
            except Exception as exc:
                self._logger.exception(
                    "Trade poll loop error market=%s period=%s: %s",
                    self._market,
                    self._updater.period,
                    exc,
                )

            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._poll_every_s)
            except asyncio.TimeoutError:
                pass
