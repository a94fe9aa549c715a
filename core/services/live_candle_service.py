from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from core.domain.entities.candle_entity import CandleEntity
from core.domain.errors import MalformedInput
from core.services.period_calendar_service import PeriodCalendarService


class LiveCandleState(str, Enum):
    EMPTY = "EMPTY"
    OPEN = "OPEN"


class LiveCandleUpdater:
    """
    Keeps the single forming candle for one (market, period) pair.

    Not thread-safe: each pair must have exactly one writer (one trade feed
    loop). Policies:
      - rollover does not back-fill empty buckets between the old and new candle;
      - trades older than the forming bucket are dropped.
    """

    def __init__(self, *, period: str, logger: logging.Logger | None = None) -> None:
        self._period = PeriodCalendarService.normalize(period)
        self._width = PeriodCalendarService.width_seconds(self._period)
        self._forming: Optional[CandleEntity] = None
        self._logger = logger or logging.getLogger(self.__class__.__name__)
        self.dropped_late_trades = 0

    @property
    def period(self) -> str:
        return self._period

    @property
    def state(self) -> LiveCandleState:
        return LiveCandleState.EMPTY if self._forming is None else LiveCandleState.OPEN

    @property
    def forming(self) -> Optional[CandleEntity]:
        """
        Copy of the forming candle; mutating it does not affect the updater.
        """
        return self._forming.model_copy() if self._forming is not None else None

    def on_trade(self, price: float, timestamp_sec: int, amount: float = 0.0) -> Optional[CandleEntity]:
        """
        Apply one trade.

        Returns:
            The candle that was just finalized when this trade opened a new
            bucket, otherwise None.

        Raises:
            MalformedInput: non-finite price, negative/non-finite amount or
            negative timestamp. The forming candle is left untouched.
        """
        price = float(price)
        amount = float(amount or 0.0)
        if not math.isfinite(price):
            raise MalformedInput(f"non-finite trade price at ts={timestamp_sec}")
        if not math.isfinite(amount) or amount < 0:
            raise MalformedInput(f"invalid trade amount {amount} at ts={timestamp_sec}")
        if int(timestamp_sec) < 0:
            raise MalformedInput(f"negative trade timestamp {timestamp_sec}")
        bucket = PeriodCalendarService.bucket_start_for_width(timestamp_sec, self._width)
        forming = self._forming

        if forming is None:
            self._forming = CandleEntity.flat(time=bucket, price=price, volume=amount)
            return None

        if bucket == forming.time:
            if price > forming.high:
                forming.high = price
            if price < forming.low:
                forming.low = price
            forming.close = price
            forming.volume += amount
            return None

        if bucket > forming.time:
            self._forming = CandleEntity.flat(time=bucket, price=price, volume=amount)
            self._logger.debug("Period rolled over period=%s closed=%s new=%s", self._period, forming.time, bucket)
            return forming

        self.dropped_late_trades += 1
        self._logger.debug(
            "Dropping late trade period=%s bucket=%s forming=%s", self._period, bucket, forming.time
        )
        return None

    def init_from_history(self, candles: Sequence[CandleEntity], now_sec: int) -> None:
        """
        Seed the forming candle from loaded history.

        If the last candle is in the current bucket it is adopted (copied);
        otherwise a flat zero-volume candle at the current bucket is opened at
        the last close. Empty history leaves the updater untouched.
        """
        if not candles:
            return

        last = candles[-1]
        current_bucket = PeriodCalendarService.bucket_start_for_width(now_sec, self._width)

        if last.time == current_bucket:
            self._forming = last.model_copy()
        else:
            self._forming = CandleEntity.flat(time=current_bucket, price=float(last.close), volume=0.0)


class LiveCandleRegistry:
    """
    Owns one LiveCandleUpdater per (market, period).

    Updaters are created on the first acquire() and dropped when the last
    subscriber releases them.
    """

    def __init__(self) -> None:
        self._updaters: Dict[Tuple[str, str], LiveCandleUpdater] = {}
        self._refs: Dict[Tuple[str, str], int] = {}
        self._logger = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def _key(market: str, period: str) -> Tuple[str, str]:
        return (market or "").strip().lower(), PeriodCalendarService.normalize(period)

    def acquire(self, market: str, period: str) -> Tuple[LiveCandleUpdater, bool]:
        """
        Returns:
            (updater, created) where created is True for a brand-new updater.
        """
        key = self._key(market, period)
        updater = self._updaters.get(key)
        created = updater is None
        if created:
            updater = LiveCandleUpdater(period=key[1])
            self._updaters[key] = updater
            self._refs[key] = 0
            self._logger.info("Live candle updater created market=%s period=%s", *key)
        self._refs[key] += 1
        return updater, created

    def release(self, market: str, period: str) -> bool:
        """
        Returns:
            True when this release tore the updater down.
        """
        key = self._key(market, period)
        if key not in self._refs:
            return False
        self._refs[key] -= 1
        if self._refs[key] > 0:
            return False
        self._refs.pop(key, None)
        self._updaters.pop(key, None)
        self._logger.info("Live candle updater released market=%s period=%s", *key)
        return True

    def discard(self, market: str, period: str) -> None:
        """
        Drop the pair regardless of how many subscribers still hold it.
        """
        key = self._key(market, period)
        self._refs.pop(key, None)
        if self._updaters.pop(key, None) is not None:
            self._logger.info("Live candle updater discarded market=%s period=%s", *key)

    def get(self, market: str, period: str) -> Optional[LiveCandleUpdater]:
        return self._updaters.get(self._key(market, period))

    def keys(self) -> List[Tuple[str, str]]:
        return list(self._updaters)
