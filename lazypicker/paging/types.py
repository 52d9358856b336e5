"""Page, cancellation, and provider types for incremental candidate loading."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class FetchCancelledError(Exception):
    """Raised inside a provider when its cancellation token has fired."""


class PageFetchError(RuntimeError):
    """A page could not be fetched; the session may retry the same token."""

    def __init__(self, message: str, continuation_token: str | None = None) -> None:
        super().__init__(message)
        self.continuation_token = continuation_token


class CancellationToken:
    """Cooperative cancellation flag shared between a session and its fetch."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise FetchCancelledError()

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; return early (True) when cancelled."""
        return self._event.wait(timeout)


@dataclass(frozen=True)
class PagedResult(Generic[T]):
    """One page of items plus the token for the page after it."""

    items: tuple[T, ...] = ()
    continuation_token: str | None = None

    @property
    def has_more(self) -> bool:
        return bool(self.continuation_token)

    @property
    def count(self) -> int:
        return len(self.items)

    @classmethod
    def empty(cls) -> PagedResult[T]:
        return cls()


class PagedDataSource(Protocol[T_co]):
    """Backend listing provider fetched one page at a time.

    ``continuation_token=None`` requests the first page. Implementations
    should poll ``cancellation`` and raise :class:`FetchCancelledError` once it
    fires; any other exception is reported to the session as a fetch failure.
    """

    def fetch_next_page(
        self,
        continuation_token: str | None,
        page_size: int,
        cancellation: CancellationToken,
    ) -> PagedResult[T_co]: ...
