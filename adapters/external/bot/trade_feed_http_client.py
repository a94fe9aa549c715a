from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from core.domain.entities.trade_entity import TradeEventEntity
from core.repositories.trade_feed import TradeFeed


class BotTradeFeedHttpClient(TradeFeed):
    """
    Polls the bot's trade-delta endpoint.

    GET {base_url}/api/trades/deltas?market=xbtusd&since=<ms>
      -> {"trades": [{"t": ms, "p": price, "a": amount, "s": side}, ...],
          "latestTimestamp": ms}

    The `since` cursor advances to latestTimestamp (or the newest trade seen).
    """

    def __init__(
        self,
        *,
        base_url: str,
        market: str,
        since_ms: Optional[int] = None,
        timeout_s: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = str(base_url).rstrip("/")
        self._market = str(market).strip().lower()
        self._since = since_ms
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_s, connect=2.0))
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def since_ms(self) -> Optional[int]:
        return self._since

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_new(self) -> List[TradeEventEntity]:
        params: Dict[str, Any] = {"market": self._market}
        if self._since is not None:
            params["since"] = int(self._since)

        r = await self._client.get(f"{self._base_url}/api/trades/deltas", params=params)
        r.raise_for_status()
        data = r.json() or {}

        raw = data.get("trades") or []
        trades = [
            TradeEventEntity(timestamp=int(t["t"]), price=float(t["p"]), amount=t.get("a"))
            for t in raw
            if t.get("t") is not None and t.get("p") is not None
        ]

        latest = data.get("latestTimestamp")
        if latest is None and raw:
            latest = max(int(t["t"]) for t in raw if t.get("t") is not None)
        if latest is not None:
            self._since = int(latest)

        return trades
