"""Abstract interfaces for the Movement Record Store and the Reference Store."""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

Row = dict[str, Any]


class QueryFilters(BaseModel):
    """Equality, membership and inclusive range predicates applied by the store."""

    eq: dict[str, Any] = Field(default_factory=dict)
    isin: dict[str, list[Any]] = Field(default_factory=dict)
    gte: dict[str, Any] = Field(default_factory=dict)
    lte: dict[str, Any] = Field(default_factory=dict)


class IMovementStore(ABC):
    """Read capability over the per-category movement tables."""

    @abstractmethod
    async def fetch(
        self,
        table: str,
        filters: QueryFilters | None = None,
        columns: str = "*",
    ) -> list[Row]:
        """
        Fetch every row of a movement table matching the filters.

        Implementations page through results internally and raise
        BackendFetchError on any upstream failure.
        """
        pass


class IReferenceStore(ABC):
    """Read capability over static reference tables."""

    @abstractmethod
    async def fetch_all(self, table: str) -> list[Row]:
        """Fetch every row of a reference table (materials, products, ...)."""
        pass
