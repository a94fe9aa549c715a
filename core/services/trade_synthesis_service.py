from __future__ import annotations

from typing import List, Sequence

from core.domain.entities.trade_entity import PriceObservationEntity, SyntheticTradeEntity, TradeSide

DEFAULT_SIDE = TradeSide.SELL


class TradeSynthesisService:
    """
    Derives a buy/sell tape from sequential price observations.

    Rule (chronological input): observation i is labelled by the *next*
    price, "buy" when the next observation is priced higher, otherwise
    "sell". The newest trade on the tape has no successor and is therefore
    always DEFAULT_SIDE ("sell"); the oldest trade gets a real label. A
    newly arriving observation can relabel the previously newest trade.

    The side is a heuristic inferred from price movement, not an
    exchange-reported aggressor side.
    """

    @staticmethod
    def synthesize(observations: Sequence[PriceObservationEntity]) -> List[SyntheticTradeEntity]:
        n = len(observations)
        trades: List[SyntheticTradeEntity] = []
        for i, obs in enumerate(observations):
            side = DEFAULT_SIDE
            if i < n - 1 and float(observations[i + 1].price) > float(obs.price):
                side = TradeSide.BUY
            trades.append(
                SyntheticTradeEntity(
                    id=obs.id,
                    timestamp=int(obs.timestamp),
                    price=float(obs.price),
                    side=side,
                )
            )
        return trades
