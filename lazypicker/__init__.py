"""Public package surface for lazypicker.

Exports ``main`` for programmatic CLI invocation plus the picker core.
Most implementation lives in submodules under ``lazypicker``.
"""

from __future__ import annotations

from .focus import PaneFocusManager
from .input import KeyAction, KeyBindingError, KeyBindingsConfig, KeySequenceBuffer
from .paging import CancellationToken, PagedDataSource, PagedResult
from .picker import PickerEngine, PickerOutcome, SessionClosedError
from .search import FuzzyMatcher, FuzzyMatchResult


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "CancellationToken",
    "FuzzyMatcher",
    "FuzzyMatchResult",
    "KeyAction",
    "KeyBindingError",
    "KeyBindingsConfig",
    "KeySequenceBuffer",
    "PagedDataSource",
    "PagedResult",
    "PaneFocusManager",
    "PickerEngine",
    "PickerOutcome",
    "SessionClosedError",
    "main",
]
