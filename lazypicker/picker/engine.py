"""Interactive selection session over a ranked, windowed, incrementally loaded list.

One :class:`PickerEngine` lives for one selection. It owns the query, the
ranked ``filtered`` list, the cursor ``index`` and the visible window, and it
asks its :class:`PageFetchScheduler` for more candidates when the cursor gets
near the end of what is loaded. All methods run on the input loop thread;
only the provider fetch itself runs on the scheduler's worker.

Invariant whenever ``filtered`` is non-empty:
``window_start <= index < window_end`` and
``window_end - window_start <= max_visible``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..config import PickerOptions
from ..paging import PagedDataSource, PagedResult, PageFetchScheduler
from ..search.fuzzy import FuzzyMatcher, FuzzyMatchResult, merge_ranked, sort_results

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONFIRMED = "confirmed"
CANCELLED = "cancelled"
TIMED_OUT = "timeout"


class SessionClosedError(RuntimeError):
    """Raised when a confirmed or cancelled session is mutated."""


@dataclass(frozen=True)
class SelectionState(Generic[T]):
    """Read-only snapshot of the observable session state."""

    query: str
    filtered: tuple[FuzzyMatchResult[T], ...]
    index: int
    window_start: int
    window_end: int


@dataclass(frozen=True)
class PickerOutcome(Generic[T]):
    """How a session ended; ``item`` is set only for confirmations."""

    status: str
    item: T | None = None

    @property
    def confirmed(self) -> bool:
        return self.status == CONFIRMED


class PickerEngine(Generic[T]):
    """Query editing, ranking, cursor/window management and paging for one pick."""

    def __init__(
        self,
        items: Iterable[T] = (),
        *,
        key_extractor: Callable[[T], Iterable[str]],
        options: PickerOptions | None = None,
        matcher: FuzzyMatcher | None = None,
        source: PagedDataSource[T] | None = None,
        scheduler: PageFetchScheduler | None = None,
        continuation_token: str | None = None,
        on_change: Callable[[PickerEngine[T]], None] | None = None,
    ) -> None:
        self.options = options if options is not None else PickerOptions()
        self.max_visible = max(1, self.options.max_visible_items)
        self._key_extractor = key_extractor
        self._matcher = matcher if matcher is not None else FuzzyMatcher()
        self._on_change = on_change
        self._all: list[T] = list(items)

        if scheduler is None and source is not None:
            scheduler = PageFetchScheduler(source)
        self._scheduler = scheduler
        self._continuation_token = continuation_token
        # Without preloaded items the first page (token ``None``) is still owed.
        self.has_more = scheduler is not None and (not self._all or continuation_token is not None)
        self.fetch_error: BaseException | None = None

        self.query = ""
        self.filtered: list[FuzzyMatchResult[T]] = []
        self.index = -1
        self.window_start = 0
        self._outcome: PickerOutcome[T] | None = None
        self._refilter()

    # Observation surface

    @property
    def closed(self) -> bool:
        return self._outcome is not None

    @property
    def outcome(self) -> PickerOutcome[T] | None:
        return self._outcome

    @property
    def loading(self) -> bool:
        return self._scheduler is not None and self._scheduler.in_flight

    @property
    def candidate_count(self) -> int:
        return len(self._all)

    def visible_window(self) -> tuple[int, int]:
        """Return the rendered slice as ``(window_start, window_end)``."""
        return self.window_start, min(len(self.filtered), self.window_start + self.max_visible)

    def current(self) -> T | None:
        if 0 <= self.index < len(self.filtered):
            return self.filtered[self.index].item
        return None

    def snapshot(self) -> SelectionState[T]:
        start, end = self.visible_window()
        return SelectionState(
            query=self.query,
            filtered=tuple(self.filtered),
            index=self.index,
            window_start=start,
            window_end=end,
        )

    # Query editing

    def type_char(self, c: str) -> None:
        """Append printable text to the query and re-rank from the top."""
        self._require_open()
        if not self.options.enable_fuzzy_search:
            return
        if not c or not c.isprintable():
            return
        self.query += c
        self._refilter()
        self._changed()
        self._maybe_request_more()

    def backspace(self) -> None:
        self._require_open()
        if not self.options.enable_fuzzy_search or not self.query:
            return
        self.query = self.query[:-1]
        self._refilter()
        self._changed()
        self._maybe_request_more()

    # Navigation

    def move_down(self) -> None:
        self._move_to(self.index + 1)

    def move_up(self) -> None:
        self._move_to(self.index - 1)

    def page_down(self) -> None:
        self._move_to(self.index + self.max_visible)

    def page_up(self) -> None:
        self._move_to(self.index - self.max_visible)

    def top(self) -> None:
        self._require_open()
        if not self.filtered:
            return
        self.index = 0
        self.window_start = 0
        self._changed()

    def bottom(self) -> None:
        self._require_open()
        if not self.filtered:
            return
        self.index = len(self.filtered) - 1
        self.window_start = max(0, len(self.filtered) - self.max_visible)
        self._changed()
        self._maybe_request_more()

    # Completion

    def confirm(self) -> T | None:
        """Return the selected item and end the session.

        With nothing selected this returns ``None`` and the session stays open.
        """
        self._require_open()
        item = self.current()
        if self.index < 0:
            return None
        self._close(PickerOutcome(CONFIRMED, item))
        return item

    def cancel(self) -> None:
        """End the session without a selection; repeated calls are no-ops."""
        if self.closed:
            return
        self._close(PickerOutcome(CANCELLED))

    def time_out(self) -> None:
        """End the session because the host's inactivity timeout elapsed."""
        if self.closed:
            return
        self._close(PickerOutcome(TIMED_OUT))

    # Paging

    def start(self) -> bool:
        """Request the first page when a source is set and nothing is loaded."""
        return self._maybe_request_more()

    def retry(self) -> bool:
        """Reissue the fetch that failed, with the same continuation token."""
        self._require_open()
        if self._scheduler is None or self.fetch_error is None or not self.has_more:
            return False
        self.fetch_error = None
        request_id = self._scheduler.request(self._continuation_token, self.options.page_size)
        self._changed()
        return request_id is not None

    def poll(self) -> bool:
        """Merge completed fetches; return whether observable state changed."""
        if self._scheduler is None:
            return False
        changed = False
        for result in self._scheduler.drain_results():
            if self.closed:
                continue
            if result.ok:
                self._apply_page(result.page)
            else:
                self.fetch_error = result.error
                logger.warning(
                    "page fetch failed (token=%r): %s",
                    result.request.continuation_token,
                    result.error,
                )
            changed = True
        if changed:
            self._changed()
        if not self.closed:
            self._maybe_request_more()
        return changed

    # Internals

    def _require_open(self) -> None:
        if self._outcome is not None:
            raise SessionClosedError(f"picker session already {self._outcome.status}")

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self)

    def _close(self, outcome: PickerOutcome[T]) -> None:
        self._outcome = outcome
        if self._scheduler is not None:
            self._scheduler.cancel()
        logger.debug("picker session %s", outcome.status)
        self._changed()

    def _ranking_active(self) -> bool:
        return self.options.enable_fuzzy_search and bool(self.query.strip())

    def _rank(self, items: Iterable[T]) -> list[FuzzyMatchResult[T]]:
        if self._ranking_active():
            return sort_results(self._matcher.rank(items, self._key_extractor, self.query))
        return [FuzzyMatchResult(item, 0) for item in items]

    def _refilter(self) -> None:
        self.filtered = self._rank(self._all)
        self.index = 0 if self.filtered else -1
        self.window_start = 0

    def _apply_page(self, page: PagedResult[Any]) -> None:
        self.fetch_error = None
        self._continuation_token = page.continuation_token
        self.has_more = page.has_more
        new_items = list(page.items)
        self._all.extend(new_items)

        selected = self.filtered[self.index] if self.index >= 0 else None
        ranked = self._rank(new_items)
        if self._ranking_active():
            self.filtered = merge_ranked(self.filtered, ranked)
        else:
            self.filtered.extend(ranked)
        logger.debug("merged page of %d items (%d now match)", len(new_items), len(self.filtered))

        if selected is None:
            self.index = 0 if self.filtered else -1
            self.window_start = 0
            return
        self.index = next(pos for pos, result in enumerate(self.filtered) if result is selected)
        self._ensure_window()

    def _move_to(self, target: int) -> None:
        self._require_open()
        if not self.filtered:
            return
        clamped = max(0, min(len(self.filtered) - 1, target))
        if clamped == self.index:
            return
        self.index = clamped
        self._ensure_window()
        self._changed()
        self._maybe_request_more()

    def _ensure_window(self) -> None:
        """Shift the window by the overflow so ``index`` becomes its boundary row."""
        if self.index < self.window_start:
            self.window_start = self.index
        elif self.index >= self.window_start + self.max_visible:
            self.window_start = self.index - self.max_visible + 1

    def _maybe_request_more(self) -> bool:
        if self._scheduler is None or self.closed or not self.has_more or self.fetch_error is not None:
            return False
        if self._scheduler.in_flight:
            return False
        count = len(self.filtered)
        _, window_end = self.visible_window()
        margin = self.options.prefetch_margin
        near_end = count == 0 or self.index >= count - 1 - margin or window_end >= count - margin
        if not near_end:
            return False
        return self._scheduler.request(self._continuation_token, self.options.page_size) is not None
