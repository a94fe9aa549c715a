from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from core.domain.errors import MarketDataError
from workers.market_data_supervisor import MarketDataSupervisor

from .deps import get_supervisor, to_http_error
from .dtos.candle_dtos import CandleOutDTO, FormingCandleOutDTO
from .dtos.market_dtos import SubscriptionDTO

router = APIRouter(prefix="/api/live", tags=["live"])


@router.post("/subscriptions", response_model=FormingCandleOutDTO)
async def subscribe(
    dto: SubscriptionDTO,
    supervisor: MarketDataSupervisor = Depends(get_supervisor),
) -> FormingCandleOutDTO:
    """
    Start (or join) the live forming candle for a market and period.
    """
    try:
        updater = await supervisor.subscribe(dto.market, dto.period)
    except MarketDataError as exc:
        raise to_http_error(exc) from exc

    forming = updater.forming
    return FormingCandleOutDTO(
        market=dto.market.upper(),
        period=updater.period,
        candle=CandleOutDTO.model_validate(forming.model_dump()) if forming else None,
    )


@router.delete("/subscriptions")
async def unsubscribe(
    market: str = Query(...),
    period: str = Query("1m"),
    supervisor: MarketDataSupervisor = Depends(get_supervisor),
) -> Dict[str, Any]:
    try:
        stopped = await supervisor.unsubscribe(market, period)
    except MarketDataError as exc:
        raise to_http_error(exc) from exc
    return {"success": True, "stopped": stopped}


@router.get("/candle", response_model=FormingCandleOutDTO)
async def forming_candle(
    market: str = Query(...),
    period: str = Query("1m"),
    supervisor: MarketDataSupervisor = Depends(get_supervisor),
) -> FormingCandleOutDTO:
    """
    Current forming candle; null when nobody subscribed or no trade arrived yet.
    """
    try:
        forming = supervisor.forming_candle(market, period)
    except MarketDataError as exc:
        raise to_http_error(exc) from exc
    return FormingCandleOutDTO(
        market=market.upper(),
        period=period.lower(),
        candle=CandleOutDTO.model_validate(forming.model_dump()) if forming else None,
    )
