"""Background page-fetch worker with at most one request in flight."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Any

from .types import CancellationToken, FetchCancelledError, PagedDataSource, PagedResult

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 5000


@dataclass(frozen=True)
class PageFetchRequest:
    """One page-fetch job."""

    request_id: int
    continuation_token: str | None
    page_size: int
    cancellation: CancellationToken


@dataclass(frozen=True)
class PageFetchResult:
    """Completed fetch from the worker: a page or the error that stopped it."""

    request: PageFetchRequest
    page: PagedResult[Any] | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.page is not None


def _spawn_daemon_thread(target: Callable[[], None]) -> None:
    worker = threading.Thread(target=target, name="lazypicker-page-fetch", daemon=True)
    worker.start()


class PageFetchScheduler:
    """Run provider fetches off the input loop and hand results back to it.

    A request stays in flight until its result is drained, so the loop never
    issues a second fetch for a token whose page it has not merged yet.
    Results of cancelled requests are dropped in :meth:`drain_results`.
    """

    def __init__(
        self,
        source: PagedDataSource[Any],
        spawn: Callable[[Callable[[], None]], None] = _spawn_daemon_thread,
    ) -> None:
        self._source = source
        self._spawn = spawn
        self._lock = threading.Lock()
        self._active: PageFetchRequest | None = None
        self._next_request_id = 1
        self._results: Queue[PageFetchResult] = Queue()

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._active is not None

    def request(self, continuation_token: str | None, page_size: int) -> int | None:
        """Start fetching the page after ``continuation_token``.

        Returns the request id, or ``None`` when a fetch is already in flight.
        """
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        with self._lock:
            if self._active is not None:
                return None
            request = PageFetchRequest(
                request_id=self._next_request_id,
                continuation_token=continuation_token,
                page_size=page_size,
                cancellation=CancellationToken(),
            )
            self._next_request_id += 1
            self._active = request

        logger.debug("fetching page %d (token=%r, size=%d)", request.request_id, continuation_token, page_size)
        self._spawn(lambda: self._worker(request))
        return request.request_id

    def cancel(self) -> None:
        """Signal the in-flight fetch to stop; its result will be discarded."""
        with self._lock:
            request = self._active
        if request is not None:
            logger.debug("cancelling page fetch %d", request.request_id)
            request.cancellation.cancel()

    def _worker(self, request: PageFetchRequest) -> None:
        try:
            page = self._source.fetch_next_page(
                request.continuation_token,
                request.page_size,
                request.cancellation,
            )
        except FetchCancelledError:
            result = PageFetchResult(request=request, error=FetchCancelledError())
        except Exception as exc:
            logger.warning("page fetch %d failed: %s", request.request_id, exc)
            result = PageFetchResult(request=request, error=exc)
        else:
            result = PageFetchResult(request=request, page=page)
        self._results.put(result)

    def drain_results(self) -> list[PageFetchResult]:
        """Drain completed fetches, dropping any whose request was cancelled."""
        out: list[PageFetchResult] = []
        while True:
            try:
                result = self._results.get_nowait()
            except Empty:
                break
            with self._lock:
                if self._active is result.request:
                    self._active = None
            if result.request.cancellation.cancelled:
                logger.debug("discarding cancelled page fetch %d", result.request.request_id)
                continue
            out.append(result)
        return out


__all__ = [
    "PageFetchRequest",
    "PageFetchResult",
    "PageFetchScheduler",
]
