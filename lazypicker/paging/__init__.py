"""Incremental candidate loading from paged backends."""

from .memory import InMemoryPagedSource
from .scheduler import PageFetchRequest, PageFetchResult, PageFetchScheduler
from .types import (
    CancellationToken,
    FetchCancelledError,
    PagedDataSource,
    PagedResult,
    PageFetchError,
)

__all__ = [
    "CancellationToken",
    "FetchCancelledError",
    "InMemoryPagedSource",
    "PagedDataSource",
    "PagedResult",
    "PageFetchError",
    "PageFetchRequest",
    "PageFetchResult",
    "PageFetchScheduler",
]
