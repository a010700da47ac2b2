"""Abstract interface for report result caching."""

from abc import ABC, abstractmethod
from collections.abc import Hashable
from typing import Any


class IReportCache(ABC):
    """
    Caches computed reports.

    Keys must cover the full filter tuple (window, branch, entity) so that
    results of different filters never mix.
    """

    @abstractmethod
    def get(self, key: Hashable) -> Any | None:
        """Get a cached report, or None when absent or expired."""
        pass

    @abstractmethod
    def set(self, key: Hashable, value: Any, ttl: int | None = None) -> None:
        """Cache a report."""
        pass

    @abstractmethod
    def invalidate(self) -> None:
        """Clear all cached reports."""
        pass

    @abstractmethod
    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        pass
