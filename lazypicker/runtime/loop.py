"""Single-threaded interactive loop wiring keys, focus, paging and rendering.

Every mutation of the engine, the key-sequence buffer and the focus manager
happens here. The only background work is the page fetch, whose results are
merged through ``engine.poll()`` on this thread.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from ..focus import PaneFocusManager
from ..input import ActionBinding, ActionRegistry, KeyAction, KeySequenceBuffer, read_key
from ..picker import PickerEngine, PickerOutcome

logger = logging.getLogger(__name__)

IDLE_POLL_MS = 120


class _Terminal(Protocol):
    def raw_mode(self): ...


@dataclass
class PaneRegion:
    """Focusable surface identified by name."""

    name: str
    focusable: bool = True
    visible: bool = True

    def can_accept_focus(self) -> bool:
        return self.focusable

    def is_visible(self) -> bool:
        return self.visible


@dataclass(frozen=True)
class PickerLoopRegions:
    """The two surfaces a picker session moves focus between."""

    query: PaneRegion
    results: PaneRegion

    @classmethod
    def create(cls) -> PickerLoopRegions:
        return cls(query=PaneRegion("query"), results=PaneRegion("results"))

    def register(self, focus: PaneFocusManager) -> None:
        focus.register(self.query)
        focus.register(self.results)


def build_action_registry(engine: PickerEngine[Any]) -> ActionRegistry:
    """Map logical actions onto engine operations."""

    def confirm() -> bool:
        engine.confirm()
        return True

    def retry() -> bool:
        return engine.retry()

    return ActionRegistry().register_bindings(
        ActionBinding((KeyAction.MOVE_DOWN,), engine.move_down),
        ActionBinding((KeyAction.MOVE_UP,), engine.move_up),
        ActionBinding((KeyAction.PAGE_DOWN,), engine.page_down),
        ActionBinding((KeyAction.PAGE_UP,), engine.page_up),
        ActionBinding((KeyAction.TOP,), engine.top),
        ActionBinding((KeyAction.BOTTOM,), engine.bottom),
        ActionBinding((KeyAction.ENTER,), confirm),
        ActionBinding((KeyAction.BACK, KeyAction.CANCEL), engine.cancel),
        ActionBinding((KeyAction.REFRESH,), retry),
    )


_DIRECT_NAVIGATION = {
    "UP": KeyAction.MOVE_UP,
    "DOWN": KeyAction.MOVE_DOWN,
    "PAGE_UP": KeyAction.PAGE_UP,
    "PAGE_DOWN": KeyAction.PAGE_DOWN,
    "HOME": KeyAction.TOP,
    "END": KeyAction.BOTTOM,
    "ENTER": KeyAction.ENTER,
}


def handle_key(
    key: str,
    engine: PickerEngine[Any],
    buffer: KeySequenceBuffer,
    focus: PaneFocusManager,
    regions: PickerLoopRegions,
    actions: ActionRegistry,
) -> None:
    """Route one decoded key token to focus, query editing, or an action."""
    if key in {"ESC", "CTRL_C"}:
        buffer.clear()
        engine.cancel()
        return
    if key == "TAB":
        buffer.clear()
        focus.try_get_next()
        return
    if key == "SHIFT_TAB":
        buffer.clear()
        focus.try_get_previous()
        return

    direct = _DIRECT_NAVIGATION.get(key)
    if direct is not None:
        buffer.clear()
        actions.dispatch(direct)
        return

    if focus.current is regions.query:
        if key == "BACKSPACE":
            engine.backspace()
        elif key == "CTRL_U":
            while engine.query:
                engine.backspace()
        elif len(key) == 1:
            engine.type_char(key)
        return

    if key == "BACKSPACE":
        buffer.clear()
        focus.set_current(regions.query)
        return
    if len(key) != 1:
        return
    action = buffer.feed(key)
    if action is not None:
        logger.debug("dispatching %s", action.name)
        actions.dispatch(action)


def _next_wait_ms(now: float, deadlines: list[float | None]) -> int:
    wait_ms = IDLE_POLL_MS
    for deadline in deadlines:
        if deadline is None:
            continue
        wait_ms = min(wait_ms, max(0, int((deadline - now) * 1000) + 1))
    return wait_ms


def run_picker_loop(
    engine: PickerEngine[Any],
    buffer: KeySequenceBuffer,
    focus: PaneFocusManager,
    terminal: _Terminal,
    stdin_fd: int,
    render: Callable[[PickerEngine[Any], bool], None],
    *,
    regions: PickerLoopRegions | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> PickerOutcome[Any]:
    """Run one picker session until it is confirmed, cancelled, or times out.

    ``render(engine, query_focused)`` is called whenever state may have
    changed. ``engine.options.picker_timeout`` is an inactivity timeout that
    resets on every keypress.
    """
    if regions is None:
        regions = PickerLoopRegions.create()
        regions.register(focus)
    actions = build_action_registry(engine)
    if focus.current is None:
        focus.try_get_first()

    engine.start()
    inactivity_timeout = engine.options.picker_timeout
    last_input = clock()
    dirty = True

    with terminal.raw_mode():
        while not engine.closed:
            now = clock()
            if inactivity_timeout is not None and now - last_input >= inactivity_timeout:
                logger.info("picker timed out after %.1fs of inactivity", inactivity_timeout)
                engine.time_out()
                break

            # Exact bindings resolve on their last keystroke, so expiry only
            # discards an unfinished prefix.
            buffer.expire()
            if engine.poll():
                dirty = True
            if engine.closed:
                break

            if dirty:
                render(engine, focus.current is regions.query)
                dirty = False

            timeout_deadline = last_input + inactivity_timeout if inactivity_timeout is not None else None
            try:
                key = read_key(stdin_fd, timeout_ms=_next_wait_ms(now, [buffer.deadline, timeout_deadline]))
            except KeyboardInterrupt:
                engine.cancel()
                break
            if key == "":
                continue

            last_input = clock()
            dirty = True
            handle_key(key, engine, buffer, focus, regions, actions)

    outcome = engine.outcome
    assert outcome is not None
    return outcome
