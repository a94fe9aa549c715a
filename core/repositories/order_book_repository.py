from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List
from core.domain.entities.order_book_entity import OrderBookEventEntity


class OrderBookRepository(ABC):
    """Read-only access to a market's order-book delta table."""

    @abstractmethod
    async def list_recent_events(self, table: str, limit: int) -> List[OrderBookEventEntity]:
        """Newest `limit` delta rows, newest first (timestamp DESC, id DESC)."""
        ...
