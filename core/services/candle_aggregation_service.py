from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence

from core.domain.entities.candle_entity import CandleEntity
from core.domain.entities.price_tick_entity import PriceTickEntity
from core.domain.errors import MalformedInput
from core.services.period_calendar_service import PeriodCalendarService


class CandleAggregationService:
    """
    Builds OHLCV candles from price ticks.

    Behavior:
      - Ticks must already be sorted by timestamp; out-of-order input raises
        MalformedInput instead of being re-sorted.
      - One candle per populated bucket. Empty buckets are NOT synthesized here;
        use fill_gaps() as an explicit second pass.
      - Volume stays 0 (the price table carries no size).
    """

    @staticmethod
    def aggregate(ticks: Iterable[PriceTickEntity], width_seconds: int) -> List[CandleEntity]:
        width_ms = int(width_seconds) * 1000
        if width_ms <= 0:
            raise MalformedInput(f"width_seconds must be positive, got {width_seconds}")

        candles: List[CandleEntity] = []
        current: Optional[CandleEntity] = None
        current_bucket_ms: Optional[int] = None
        prev_ts: Optional[int] = None

        for tick in ticks:
            ts = int(tick.timestamp_ms)
            price = float(tick.price)

            if ts < 0:
                raise MalformedInput(f"negative tick timestamp {ts}")
            if not math.isfinite(price):
                raise MalformedInput(f"non-finite tick price at ts={ts}")
            if prev_ts is not None and ts < prev_ts:
                raise MalformedInput(f"ticks not sorted: ts={ts} after ts={prev_ts}")
            prev_ts = ts

            bucket_ms = (ts // width_ms) * width_ms
            if bucket_ms != current_bucket_ms:
                if current is not None:
                    candles.append(current)
                current_bucket_ms = bucket_ms
                current = CandleEntity.flat(time=bucket_ms // 1000, price=price)
            else:
                if price > current.high:
                    current.high = price
                if price < current.low:
                    current.low = price
                current.close = price

        if current is not None:
            candles.append(current)

        return candles

    @staticmethod
    def fill_gaps(
        candles: Sequence[CandleEntity],
        width_seconds: int,
        end_sec: Optional[int] = None,
    ) -> List[CandleEntity]:
        """
        Insert flat candles carried at the previous close for empty buckets.

        Filling starts at the first real candle (there is no close to carry
        before it) and, when end_sec is given, extends to the bucket holding
        end_sec - 1 (end is exclusive).
        """
        width = int(width_seconds)
        out: List[CandleEntity] = []
        for candle in candles:
            if out:
                prev = out[-1]
                t = prev.time + width
                while t < candle.time:
                    out.append(CandleEntity.flat(time=t, price=prev.close))
                    t += width
            out.append(candle)

        if out and end_sec is not None:
            last_bucket = PeriodCalendarService.bucket_start_for_width(int(end_sec) - 1, width)
            t = out[-1].time + width
            close = out[-1].close
            while t <= last_bucket:
                out.append(CandleEntity.flat(time=t, price=close))
                t += width

        return out

    @staticmethod
    def merge(existing: Sequence[CandleEntity], incoming: Sequence[CandleEntity]) -> List[CandleEntity]:
        """
        Merge a page of candles (e.g. older history) into an existing series.

        Candles already present win on duplicate bucket times; the result is
        ascending by time.
        """
        by_time = {c.time: c for c in incoming}
        by_time.update({c.time: c for c in existing})
        return [by_time[t] for t in sorted(by_time)]
