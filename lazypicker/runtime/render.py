"""Plain ANSI overlay used as the demo host's render callback."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ..picker import PickerEngine
from ..search.fuzzy import match_positions

BOLD = "\x1b[1m"
REVERSE = "\x1b[7m"
DIM = "\x1b[2m"
RESET = "\x1b[0m"
CLEAR_SCREEN = "\x1b[H\x1b[2J"


def _clip(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: max(0, width - 1)] + "…"


def _highlight(label: str, query: str) -> str:
    positions = set(match_positions(label, query))
    if not positions:
        return label
    return "".join(f"{BOLD}{ch}{RESET}" if pos in positions else ch for pos, ch in enumerate(label))


def status_text(engine: PickerEngine[Any]) -> str:
    """Footer text: match counts plus loading/error state."""
    parts = [f"{len(engine.filtered)}/{engine.candidate_count}"]
    if engine.loading:
        parts.append("loading…")
    elif engine.has_more:
        parts.append("more available")
    if engine.fetch_error is not None:
        parts.append(f"fetch failed: {engine.fetch_error} (r to retry)")
    return "  ".join(parts)


def render_picker_lines(
    engine: PickerEngine[Any],
    label: Callable[[Any], str],
    *,
    width: int,
    query_focused: bool,
    title: str = "",
) -> list[str]:
    """Build the overlay rows for the current engine state."""
    lines: list[str] = []
    if title:
        lines.append(_clip(title, width))
    cursor = "█" if query_focused else ""
    lines.append(_clip(f"> {engine.query}{cursor}", width))

    start, end = engine.visible_window()
    if start > 0:
        lines.append(f"{DIM}  ↑ {start} more above{RESET}")
    highlight = engine.options.highlight_matches and bool(engine.query.strip())
    for pos in range(start, end):
        text = _clip(label(engine.filtered[pos].item), max(1, width - 2))
        if highlight:
            text = _highlight(text, engine.query)
        if pos == engine.index:
            lines.append(f"{REVERSE}›{RESET} {text}")
        else:
            lines.append(f"  {text}")
    below = len(engine.filtered) - end
    if below > 0:
        lines.append(f"{DIM}  ↓ {below} more below{RESET}")
    if not engine.filtered:
        lines.append(f"{DIM}  (no matches){RESET}")
    lines.append(f"{DIM}{_clip(status_text(engine), width)}{RESET}")
    return lines


def render_picker(
    write: Callable[[str], None],
    engine: PickerEngine[Any],
    label: Callable[[Any], str],
    *,
    width: int,
    query_focused: bool,
    title: str = "",
) -> None:
    lines = render_picker_lines(engine, label, width=width, query_focused=query_focused, title=title)
    write(CLEAR_SCREEN + "\r\n".join(lines))
