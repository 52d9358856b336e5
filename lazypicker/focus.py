"""Cyclic focus traversal across registered UI regions.

Regions only need the :class:`Focusable` capability pair; traversal never
depends on a concrete widget type.
"""

from __future__ import annotations

from typing import Protocol


class Focusable(Protocol):
    def can_accept_focus(self) -> bool: ...

    def is_visible(self) -> bool: ...


def _is_focusable(region: Focusable) -> bool:
    return region.can_accept_focus() and region.is_visible()


class PaneFocusManager:
    """Ordered registry of regions; registration order is traversal order."""

    def __init__(self) -> None:
        self._regions: list[Focusable] = []
        self._current_index = -1

    @property
    def regions(self) -> tuple[Focusable, ...]:
        return tuple(self._regions)

    @property
    def current(self) -> Focusable | None:
        if 0 <= self._current_index < len(self._regions):
            return self._regions[self._current_index]
        return None

    def register(self, region: Focusable) -> None:
        """Append ``region``; registering the same region twice is a no-op."""
        if any(existing is region for existing in self._regions):
            return
        self._regions.append(region)

    def unregister(self, region: Focusable) -> None:
        """Remove ``region``, keeping the cursor on the same current region."""
        index = self._index_of(region)
        if index < 0:
            return
        del self._regions[index]
        if index == self._current_index:
            self._current_index = -1
        elif index < self._current_index:
            self._current_index -= 1

    def set_current(self, region: Focusable) -> None:
        """Move the cursor to an already-registered region; unknown ones are ignored."""
        index = self._index_of(region)
        if index >= 0:
            self._current_index = index

    def try_get_first(self) -> Focusable | None:
        for index, region in enumerate(self._regions):
            if _is_focusable(region):
                self._current_index = index
                return region
        return None

    def try_get_next(self) -> Focusable | None:
        """Advance to the next focusable region, wrapping past the end."""
        return self._scan(step=1, start=self._current_index)

    def try_get_previous(self) -> Focusable | None:
        """Step back to the previous focusable region, wrapping past the start."""
        start = self._current_index if self._current_index >= 0 else len(self._regions)
        return self._scan(step=-1, start=start)

    def _scan(self, *, step: int, start: int) -> Focusable | None:
        count = len(self._regions)
        index = start
        for _ in range(count):
            index = (index + step) % count
            region = self._regions[index]
            if _is_focusable(region):
                self._current_index = index
                return region
        return None

    def _index_of(self, region: Focusable) -> int:
        for index, existing in enumerate(self._regions):
            if existing is region:
                return index
        return -1
