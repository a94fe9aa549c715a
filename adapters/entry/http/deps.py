from __future__ import annotations

from fastapi import HTTPException, Request, status

from core.domain.errors import MarketDataError
from core.usecases.unified_market_data_use_case import UnifiedMarketDataUseCase
from workers.market_data_supervisor import MarketDataSupervisor


def get_supervisor(request: Request) -> MarketDataSupervisor:
    return request.app.state.supervisor


def get_market_data(request: Request) -> UnifiedMarketDataUseCase:
    return request.app.state.supervisor.market_data


def to_http_error(exc: MarketDataError) -> HTTPException:
    """
    Map core error kinds to HTTP status codes.
    """
    code = (
        status.HTTP_503_SERVICE_UNAVAILABLE
        if exc.kind == "data_source_unavailable"
        else status.HTTP_400_BAD_REQUEST
    )
    return HTTPException(status_code=code, detail=exc.to_dict())
