"""Terminal host for picker sessions: raw mode, rendering, and the input loop."""

from .loop import (
    PaneRegion,
    PickerLoopRegions,
    build_action_registry,
    handle_key,
    run_picker_loop,
)
from .render import render_picker, render_picker_lines, status_text
from .terminal import TerminalController

__all__ = [
    "PaneRegion",
    "PickerLoopRegions",
    "TerminalController",
    "build_action_registry",
    "handle_key",
    "render_picker",
    "render_picker_lines",
    "run_picker_loop",
    "status_text",
]
