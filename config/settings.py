"""
Application configuration for api-market-view.

Centralizes environment variables using python-dotenv.

Note:
- The row store is read-only from this service; credentials live in .env.
- Supported markets and periods are static (see core/services), not configurable.
"""

import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """
    Configuration settings for the api-market-view service.
    """

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    APP_NAME: str = os.getenv("APP_NAME", "api-market-view")

    # Row store: "sql" (MySQL tables) or "mongodb" (collections with the same names)
    ROW_STORE_BACKEND: str = os.getenv("ROW_STORE_BACKEND", "sql").lower()

    DATABASE_URL: str = os.getenv("DATABASE_URL", "mysql+aiomysql://bitbot@localhost:3306/bitbot_markets")
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "5"))

    MONGODB_URL: str = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
    MONGODB_DB_NAME: str = os.getenv("MONGODB_DB_NAME", "bitbot_markets")

    # Query limits
    QUERY_TIMEOUT_S: float = float(os.getenv("QUERY_TIMEOUT_S", "10"))
    ORDERBOOK_WINDOW: int = int(os.getenv("ORDERBOOK_WINDOW", "1000"))
    MAX_PRICE_ROWS: int = int(os.getenv("MAX_PRICE_ROWS", "100000"))

    # Live trade feed from the bot: "http" (delta endpoint) or "file" (--log-trades JSON)
    TRADE_FEED_SOURCE: str = os.getenv("TRADE_FEED_SOURCE", "http").lower()
    BOT_FEED_BASE_URL: str = os.getenv("BOT_FEED_BASE_URL", "http://localhost:3001")
    TRADES_DIR: str = os.getenv("TRADES_DIR", "./trades")
    MARKET_TRADES_FILE: str = os.getenv("MARKET_TRADES_FILE", "market_trades.json")
    TRADE_POLL_EVERY_S: float = float(os.getenv("TRADE_POLL_EVERY_S", "1.0"))


settings = Settings()
