from __future__ import annotations

import math
from typing import Dict, Iterable

from core.domain.entities.order_book_entity import (
    OrderBookAction,
    OrderBookEventEntity,
    OrderBookSnapshotEntity,
    OrderLevelEntity,
)
from core.domain.errors import MalformedInput


class OrderBookReconstructionService:
    """
    Rebuilds a leveled order book by replaying incremental delta rows.

    This is a heuristic, not an exact book:
      - the side is inferred from the sign of the amount (positive = bid,
        zero or negative = ask), which may not hold on every exchange;
      - order ids double as prices, as stored by the upstream recorder;
      - only a bounded window of recent deltas is replayed, so levels created
        before the window are missing.
    Callers should treat the snapshot as a plausible approximation.
    """

    @staticmethod
    def reconstruct(events: Iterable[OrderBookEventEntity], depth: int) -> OrderBookSnapshotEntity:
        """
        Replay events (oldest first) and return the top `depth` levels per side.
        """
        if int(depth) <= 0:
            raise MalformedInput(f"depth must be positive, got {depth}")

        bids: Dict[int, OrderLevelEntity] = {}
        asks: Dict[int, OrderLevelEntity] = {}
        latest_ms = 0

        for ev in events:
            latest_ms = max(latest_ms, int(ev.timestamp_ms))
            oid = int(ev.order_id)

            if ev.action == OrderBookAction.REMOVE:
                # side unknown at removal time
                bids.pop(oid, None)
                asks.pop(oid, None)
                continue

            amount = float(ev.amount)
            if not math.isfinite(amount):
                raise MalformedInput(f"non-finite amount for order_id={oid}")

            if amount > 0:
                bids[oid] = OrderLevelEntity(price=oid, amount=amount)
            else:
                asks[oid] = OrderLevelEntity(price=oid, amount=abs(amount))

        top_bids = sorted(bids.values(), key=lambda lvl: lvl.price, reverse=True)[: int(depth)]
        top_asks = sorted(asks.values(), key=lambda lvl: lvl.price)[: int(depth)]

        return OrderBookSnapshotEntity(
            timestamp=latest_ms // 1000,
            bids=top_bids,
            asks=top_asks,
        )
