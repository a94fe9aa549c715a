import pytest

from core.domain.entities.order_book_entity import OrderBookAction, OrderBookEventEntity
from core.domain.errors import MalformedInput
from core.services.order_book_service import OrderBookReconstructionService


def ev(ts, action, oid, amount=0.0):
    return OrderBookEventEntity(timestamp_ms=ts, action=action, order_id=oid, amount=amount)


UP, RM = OrderBookAction.UPSERT, OrderBookAction.REMOVE


def levels(side):
    return [(lvl.price, lvl.amount) for lvl in side]


class TestReconstruct:
    def test_remove_after_upsert_scenario(self):
        events = [ev(1000, UP, 100, 5), ev(2000, UP, 90, 3), ev(3000, RM, 100)]
        snap = OrderBookReconstructionService.reconstruct(events, 5)
        assert levels(snap.bids) == [(90, 3)]
        assert snap.asks == []
        assert snap.timestamp == 3

    def test_sign_selects_side_and_sorting(self):
        events = [
            ev(1000, UP, 101, -1),
            ev(1000, UP, 99, 2),
            ev(1000, UP, 103, -4),
            ev(1000, UP, 97, 6),
            ev(1000, UP, 102, 0),
        ]
        snap = OrderBookReconstructionService.reconstruct(events, 10)
        assert levels(snap.bids) == [(99, 2), (97, 6)]
        assert levels(snap.asks) == [(101, 1), (102, 0), (103, 4)]

    def test_depth_truncates_each_side(self):
        events = [ev(1, UP, p, 1) for p in range(10, 20)] + [ev(1, UP, p, -1) for p in range(20, 30)]
        snap = OrderBookReconstructionService.reconstruct(events, 3)
        assert [lvl.price for lvl in snap.bids] == [19, 18, 17]
        assert [lvl.price for lvl in snap.asks] == [20, 21, 22]

    def test_upsert_replaces_amount(self):
        snap = OrderBookReconstructionService.reconstruct([ev(1, UP, 50, 1), ev(2, UP, 50, 7)], 5)
        assert levels(snap.bids) == [(50, 7)]

    def test_orphan_remove_is_noop(self):
        snap = OrderBookReconstructionService.reconstruct([ev(1, RM, 42), ev(2, UP, 10, 1)], 5)
        assert levels(snap.bids) == [(10, 1)]

    def test_replay_is_idempotent(self):
        events = [ev(1, UP, 100, 5), ev(2, UP, 90, 3), ev(3, UP, 110, -2)]
        once = OrderBookReconstructionService.reconstruct(events, 5)
        twice = OrderBookReconstructionService.reconstruct(events + events, 5)
        assert once.model_dump() == twice.model_dump()

    def test_no_data_is_empty_book(self):
        snap = OrderBookReconstructionService.reconstruct([], 25)
        assert snap.bids == [] and snap.asks == [] and snap.timestamp == 0

    def test_invalid_depth(self):
        with pytest.raises(MalformedInput):
            OrderBookReconstructionService.reconstruct([], 0)
