from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict

E = TypeVar("E", bound="MarketDataEntity")


class MarketDataEntity(BaseModel):
    """
    Base entity for rows read from the market-data store.

    - Maps Mongo's `_id` away (row stores expose their own `id` column).
    - Ignores unknown columns so schema additions in the store don't break reads.
    """

    model_config = ConfigDict(
        extra="ignore",
        use_enum_values=False,
    )

    @classmethod
    def from_row(cls: Type[E], row: Mapping[str, Any]) -> E:
        """
        Convert a SQL result mapping into a strongly-typed entity.

        Args:
            row: Column name -> value mapping (e.g. `Result.mappings()` item).

        Returns:
            An entity instance.
        """
        return cls.model_validate(dict(row))

    @classmethod
    def from_mongo(cls: Type[E], doc: Optional[dict[str, Any]]) -> Optional[E]:
        """
        Convert a MongoDB document into a strongly-typed entity.

        Args:
            doc: Raw MongoDB dict (may include `_id`).

        Returns:
            An entity instance or None if doc is falsy.
        """
        if not doc:
            return None
        data = dict(doc)
        data.pop("_id", None)
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-safe dict for HTTP payloads and logging.
        """
        return self.model_dump(mode="json")
