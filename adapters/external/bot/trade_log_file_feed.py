from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from core.domain.entities.trade_entity import TradeEventEntity
from core.repositories.trade_feed import TradeFeed


class TradeLogFileFeed(TradeFeed):
    """
    Reads trades from the bot's `--log-trades` JSON file.

    The bot rewrites the whole file as {"trades": [{"ts": ms, "price": p,
    "size": s, "action": "OPEN"|"CLOSE", "dir": ...}, ...]}; entries past the
    last seen count are new. A missing or half-written file yields nothing
    and is retried on the next poll.
    """

    def __init__(self, *, path: str | Path) -> None:
        self._path = Path(path)
        self._seen = 0
        self._logger = logging.getLogger(self.__class__.__name__)

    def _read(self) -> List[Dict[str, Any]]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as exc:
            self._logger.debug("Trade log not readable yet path=%s: %s", self._path, exc)
            return []
        return list((data or {}).get("trades") or [])

    async def fetch_new(self) -> List[TradeEventEntity]:
        entries = await asyncio.to_thread(self._read)
        if len(entries) < self._seen:
            # file was truncated / restarted by a new bot session
            self._logger.info("Trade log shrank, restarting cursor path=%s", self._path)
            self._seen = 0

        fresh = entries[self._seen :]
        self._seen = len(entries)

        return [
            TradeEventEntity(timestamp=int(e["ts"]), price=float(e["price"]), amount=e.get("size"))
            for e in fresh
            if e.get("ts") is not None and e.get("price") is not None
        ]
