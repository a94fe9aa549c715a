import math

import pytest

from conftest import ticks
from core.domain.entities.candle_entity import CandleEntity
from core.domain.entities.price_tick_entity import PriceTickEntity
from core.domain.errors import MalformedInput
from core.services.candle_aggregation_service import CandleAggregationService


def ohlc(c):
    return (c.time, c.open, c.high, c.low, c.close)


class TestAggregate:
    def test_two_buckets_scenario(self):
        out = CandleAggregationService.aggregate(ticks((0, 100), (30, 105), (61, 102)), 60)
        assert [ohlc(c) for c in out] == [(0, 100, 105, 100, 105), (60, 102, 102, 102, 102)]
        assert all(c.volume == 0 for c in out)

    def test_empty_input(self):
        assert CandleAggregationService.aggregate([], 60) == []

    def test_single_tick(self):
        out = CandleAggregationService.aggregate(ticks((125, 7.5)), 60)
        assert [ohlc(c) for c in out] == [(120, 7.5, 7.5, 7.5, 7.5)]

    def test_identical_timestamps_make_one_candle(self):
        out = CandleAggregationService.aggregate(ticks((10, 3), (10, 1), (10, 2)), 60)
        assert [ohlc(c) for c in out] == [(0, 3, 3, 1, 2)]

    def test_bucket_boundary_is_left_aligned(self):
        # 59.999s belongs to bucket 0, 60.000s opens bucket 60
        data = [PriceTickEntity(timestamp_ms=59_999, price=1.0), PriceTickEntity(timestamp_ms=60_000, price=2.0)]
        out = CandleAggregationService.aggregate(data, 60)
        assert [c.time for c in out] == [0, 60]

    def test_gaps_are_not_synthesized(self):
        out = CandleAggregationService.aggregate(ticks((0, 1), (600, 2)), 60)
        assert [c.time for c in out] == [0, 600]

    def test_invariants_hold(self):
        prices = [100, 99.5, 101, 98, 103, 102.5, 97, 104, 100, 100.1]
        data = ticks(*[(i * 37, p) for i, p in enumerate(prices)])
        out = CandleAggregationService.aggregate(data, 60)

        times = [c.time for c in out]
        assert times == sorted(set(times))
        assert len(out) <= len({(t.timestamp_ms // 60_000) for t in data})
        for c in out:
            assert c.low <= min(c.open, c.close) <= max(c.open, c.close) <= c.high
            assert c.time % 60 == 0

    def test_deterministic(self):
        data = ticks((0, 1), (20, 3), (70, 2), (130, 5))
        a = CandleAggregationService.aggregate(data, 60)
        b = CandleAggregationService.aggregate(data, 60)
        assert [c.model_dump() for c in a] == [c.model_dump() for c in b]

    def test_unsorted_input_fails_closed(self):
        with pytest.raises(MalformedInput):
            CandleAggregationService.aggregate(ticks((61, 1), (30, 2)), 60)

    def test_non_finite_price_rejected(self):
        with pytest.raises(MalformedInput):
            CandleAggregationService.aggregate(ticks((1, math.nan)), 60)


class TestFillGaps:
    def test_carries_previous_close(self):
        candles = CandleAggregationService.aggregate(ticks((0, 1), (10, 4), (180, 2)), 60)
        out = CandleAggregationService.fill_gaps(candles, 60)
        assert [ohlc(c) for c in out] == [
            (0, 1, 4, 1, 4),
            (60, 4, 4, 4, 4),
            (120, 4, 4, 4, 4),
            (180, 2, 2, 2, 2),
        ]

    def test_extends_to_exclusive_end(self):
        candles = [CandleEntity.flat(time=0, price=5)]
        out = CandleAggregationService.fill_gaps(candles, 60, end_sec=180)
        assert [c.time for c in out] == [0, 60, 120]

    def test_empty_stays_empty(self):
        assert CandleAggregationService.fill_gaps([], 60, end_sec=600) == []


class TestMerge:
    def test_existing_wins_and_result_sorted(self):
        existing = [CandleEntity.flat(time=120, price=2), CandleEntity.flat(time=180, price=3)]
        older = [CandleEntity.flat(time=60, price=1), CandleEntity.flat(time=120, price=99)]
        out = CandleAggregationService.merge(existing, older)
        assert [(c.time, c.close) for c in out] == [(60, 1), (120, 2), (180, 3)]
