from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from core.domain.errors import DataSourceUnavailable, MarketDataError
from core.usecases.unified_market_data_use_case import UnifiedMarketDataUseCase

from .deps import get_market_data, to_http_error
from .dtos.candle_dtos import CandleOutDTO, CandlesOutDTO, TimeRangeDTO
from .dtos.market_dtos import MarketsOutDTO
from .dtos.orderbook_dtos import OrderBookOutDTO
from .dtos.trade_dtos import TradeOutDTO, TradesOutDTO

router = APIRouter(prefix="/api", tags=["market-data"])


@router.get("/prices", response_model=CandlesOutDTO)
async def get_prices(
    market: str = Query(..., description="e.g. xbtusd"),
    period: str = Query("1h"),
    limit: int = Query(100, ge=1, le=5000),
    start: Optional[int] = Query(None, description="Range start, unix seconds"),
    end: Optional[int] = Query(None, description="Range end (exclusive), unix seconds"),
    fill_gaps: bool = Query(False, description="Carry the previous close into empty buckets"),
    uc: UnifiedMarketDataUseCase = Depends(get_market_data),
) -> CandlesOutDTO:
    """
    OHLCV candles aggregated from raw price ticks.
    """
    try:
        candles = await uc.get_candles(market, period, limit, start, end, fill_gaps=fill_gaps)
    except MarketDataError as exc:
        raise to_http_error(exc) from exc

    return CandlesOutDTO(
        market=market.upper(),
        period=period,
        count=len(candles),
        candles=[CandleOutDTO.model_validate(c.model_dump()) for c in candles],
        timeRange=TimeRangeDTO(
            start=candles[0].time if candles else None,
            end=candles[-1].time if candles else None,
        ),
    )


@router.get("/orderbook", response_model=OrderBookOutDTO)
async def get_orderbook(
    market: str = Query(..., description="e.g. xbtusd"),
    depth: int = Query(25, ge=1, le=500),
    uc: UnifiedMarketDataUseCase = Depends(get_market_data),
) -> OrderBookOutDTO:
    """
    Best-effort order book rebuilt from recent deltas.

    When the row store is unavailable an empty book is returned with `error`
    set, so the UI can keep polling.
    """
    try:
        book = await uc.get_orderbook(market, depth)
    except DataSourceUnavailable as exc:
        return OrderBookOutDTO(
            success=False,
            market=market.upper(),
            timestamp=int(time.time()),
            bids=[],
            asks=[],
            error=exc.message,
        )
    except MarketDataError as exc:
        raise to_http_error(exc) from exc

    out = OrderBookOutDTO.model_validate({"market": market.upper(), **book.to_dict()})
    if not out.bids and not out.asks:
        out.message = "No orderbook data available"
        if not out.timestamp:
            out.timestamp = int(time.time())
    return out


@router.get("/trades", response_model=TradesOutDTO)
async def get_trades(
    market: str = Query(..., description="e.g. xbtusd"),
    period: str = Query("1h"),
    limit: int = Query(100, ge=1, le=5000),
    uc: UnifiedMarketDataUseCase = Depends(get_market_data),
) -> TradesOutDTO:
    """
    Synthesized trade tape over the trailing period, oldest first.
    """
    try:
        trades = await uc.get_trades(market, period, limit)
    except MarketDataError as exc:
        raise to_http_error(exc) from exc

    return TradesOutDTO(
        market=market.upper(),
        period=period,
        count=len(trades),
        trades=[TradeOutDTO.model_validate(t.to_dict()) for t in trades],
    )


@router.get("/markets", response_model=MarketsOutDTO)
async def list_markets() -> MarketsOutDTO:
    return MarketsOutDTO(**UnifiedMarketDataUseCase.list_markets())


@router.get("/indicators")
async def get_indicators(
    market: str = Query(..., description="e.g. xbtusd"),
    period: str = Query("1h"),
    limit: int = Query(200, ge=1, le=5000),
    ema: List[int] = Query([20, 50], description="EMA periods"),
    bb_period: int = Query(20, ge=1),
    bb_std: float = Query(2.0, gt=0),
    uc: UnifiedMarketDataUseCase = Depends(get_market_data),
) -> Dict[str, Any]:
    """
    EMA and Bollinger overlays over the same candles /prices returns.
    """
    try:
        data = await uc.get_indicators(market, period, limit, ema_periods=ema, bb_period=bb_period, bb_std=bb_std)
    except MarketDataError as exc:
        raise to_http_error(exc) from exc
    return {"success": True, "market": market.upper(), "period": period, **data}
