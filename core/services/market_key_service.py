from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from core.domain.errors import UnsupportedMarket

MARKET_TABLE_MAP: Dict[str, str] = {
    "xbtusd": "bitmex_xbt_usd",
    "ethusd": "bitmex_eth_usd",
    "solusd": "bitmex_sol_usd",
    "xrpusd": "bitmex_xrp_usd",
    "dogeusd": "bitmex_doge_usd",
}


@dataclass(frozen=True)
class MarketTables:
    market: str
    price_table: str
    book_table: str


class MarketKeyService:
    """
    Resolves instrument identifiers to physical table names.

    Rules:
    - Market ids are trimmed and lowercased ("XBTUSD" -> "xbtusd").
    - Tables are "{data_type}_{suffix}", e.g. "price_bitmex_xbt_usd" and
      "book_bitmex_xbt_usd".
    - Table names only ever come from MARKET_TABLE_MAP, never from caller input.
    """

    @staticmethod
    def supported_markets() -> List[str]:
        return list(MARKET_TABLE_MAP)

    @staticmethod
    def resolve(market: str) -> MarketTables:
        key = (market or "").strip().lower()
        suffix = MARKET_TABLE_MAP.get(key)
        if suffix is None:
            raise UnsupportedMarket(
                f"Unsupported market: {market}. Supported: {', '.join(MARKET_TABLE_MAP)}"
            )
        return MarketTables(
            market=key,
            price_table=f"price_{suffix}",
            book_table=f"book_{suffix}",
        )
