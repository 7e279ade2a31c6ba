"""Application services."""

from tunescout.application.services.search_aggregator import (
    AggregatedSearchResult,
    SearchAggregator,
)
from tunescout.application.services.search_cache import CacheStats, SearchCache

__all__ = [
    "AggregatedSearchResult",
    "CacheStats",
    "SearchAggregator",
    "SearchCache",
]
