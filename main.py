import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from adapters.entry.http.live_router import router as live_router
from adapters.entry.http.market_data_router import router as market_data_router
from config.settings import settings
from workers.market_data_supervisor import MarketDataSupervisor


def _setup_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


supervisor = MarketDataSupervisor()


@asynccontextmanager
async def lifespan(app: FastAPI):
    _setup_logging()
    logging.getLogger(__name__).info("Starting api-market-view (lifespan startup)...")

    await supervisor.start()

    try:
        yield
    finally:
        logging.getLogger(__name__).info("Shutting down api-market-view (lifespan shutdown)...")
        await supervisor.stop()


app = FastAPI(title="api-market-view", version="0.1.0", lifespan=lifespan)
app.state.supervisor = supervisor

app.include_router(market_data_router)
app.include_router(live_router)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}
