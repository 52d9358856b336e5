"""List-backed paged provider with optional simulated latency."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Generic, TypeVar

from .types import CancellationToken, FetchCancelledError, PagedResult, PageFetchError

T = TypeVar("T")


class InMemoryPagedSource(Generic[T]):
    """Serve ``items`` in pages; continuation tokens are string offsets."""

    def __init__(self, items: Sequence[T], latency: float = 0.0) -> None:
        self._items = list(items)
        self.latency = max(0.0, latency)
        self.calls: list[str | None] = []

    def fetch_next_page(
        self,
        continuation_token: str | None,
        page_size: int,
        cancellation: CancellationToken,
    ) -> PagedResult[T]:
        self.calls.append(continuation_token)
        try:
            offset = int(continuation_token) if continuation_token else 0
        except ValueError as exc:
            raise PageFetchError(f"invalid continuation token: {continuation_token!r}", continuation_token) from exc
        if offset < 0 or offset > len(self._items):
            raise PageFetchError(f"continuation token out of range: {offset}", continuation_token)

        if self.latency and cancellation.wait(self.latency):
            raise FetchCancelledError()
        cancellation.raise_if_cancelled()

        end = min(len(self._items), offset + page_size)
        next_token = str(end) if end < len(self._items) else None
        return PagedResult(items=tuple(self._items[offset:end]), continuation_token=next_token)
