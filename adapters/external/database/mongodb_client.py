from __future__ import annotations

from motor.motor_asyncio import AsyncIOMotorClient

from config.settings import settings


def get_mongo_client(url: str | None = None) -> AsyncIOMotorClient:
    return AsyncIOMotorClient(url or settings.MONGODB_URL, serverSelectionTimeoutMS=5000)
