from core.domain.entities.trade_entity import PriceObservationEntity, TradeSide
from core.services.trade_synthesis_service import DEFAULT_SIDE, TradeSynthesisService


def obs(*rows):
    return [PriceObservationEntity(id=i, timestamp=t, price=p) for i, (t, p) in enumerate(rows, start=1)]


class TestSynthesize:
    def test_compare_to_next_scenario(self):
        trades = TradeSynthesisService.synthesize(obs((1, 10), (2, 12), (3, 9)))
        assert [t.side for t in trades] == [TradeSide.BUY, TradeSide.SELL, TradeSide.SELL]
        assert [t.timestamp for t in trades] == [1, 2, 3]
        assert [t.id for t in trades] == [1, 2, 3]

    def test_last_defaults_to_sell(self):
        assert DEFAULT_SIDE == TradeSide.SELL
        trades = TradeSynthesisService.synthesize(obs((1, 5)))
        assert [t.side for t in trades] == [TradeSide.SELL]

    def test_flat_price_is_sell(self):
        trades = TradeSynthesisService.synthesize(obs((1, 5), (2, 5)))
        assert [t.side for t in trades] == [TradeSide.SELL, TradeSide.SELL]

    def test_empty(self):
        assert TradeSynthesisService.synthesize([]) == []

    def test_serialized_side(self):
        trade = TradeSynthesisService.synthesize(obs((1, 1), (2, 2)))[0]
        assert trade.to_dict() == {"id": 1, "timestamp": 1, "price": 1.0, "side": "buy"}

    def test_newest_trade_relabelled_when_next_arrives(self):
        before = TradeSynthesisService.synthesize(obs((1, 10), (2, 12)))
        after = TradeSynthesisService.synthesize(obs((1, 10), (2, 12), (3, 15)))
        assert before[-1].side == TradeSide.SELL
        assert after[1].side == TradeSide.BUY
        assert after[0].side == before[0].side == TradeSide.BUY
