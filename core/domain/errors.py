from __future__ import annotations

from typing import Any, Dict


class MarketDataError(Exception):
    """
    Base error for the market-data core.

    Every error carries a stable `kind` tag so the HTTP layer can pick a status
    code without inspecting the message.
    """

    kind: str = "market_data_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class UnsupportedMarket(MarketDataError):
    kind = "unsupported_market"


class UnsupportedPeriod(MarketDataError):
    kind = "unsupported_period"


class DataSourceUnavailable(MarketDataError):
    """Row store unreachable, query failed or timed out."""

    kind = "data_source_unavailable"


class MalformedInput(MarketDataError):
    """Non-finite prices, bad amounts or unsorted input given to a strict component."""

    kind = "malformed_input"
