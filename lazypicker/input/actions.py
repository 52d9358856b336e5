"""Logical picker actions and a small action-dispatch table."""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass


class KeyAction(enum.Enum):
    """Navigation command decoupled from the keystrokes that trigger it."""

    MOVE_DOWN = "move_down"
    MOVE_UP = "move_up"
    ENTER = "enter"
    BACK = "back"
    SEARCH = "search"
    COMMAND = "command"
    TOP = "top"
    BOTTOM = "bottom"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    DOWNLOAD = "download"
    REFRESH = "refresh"
    INFO = "info"
    HELP = "help"
    CANCEL = "cancel"

    @classmethod
    def from_name(cls, name: str) -> KeyAction:
        """Resolve ``MoveDown``/``move_down``/``MOVE_DOWN`` spellings to a member."""
        normalized = "".join(ch for ch in name if ch.isalnum()).casefold()
        for member in cls:
            if member.value.replace("_", "") == normalized:
                return member
        raise ValueError(f"unknown key action: {name!r}")


@dataclass(frozen=True)
class ActionBinding:
    """Mapping from one or more actions to a single handler."""

    actions: tuple[KeyAction, ...]
    handler: Callable[[], bool | None]


class ActionRegistry:
    """Dispatch table from logical actions to handlers."""

    def __init__(self) -> None:
        self._handlers: dict[KeyAction, Callable[[], bool | None]] = {}

    def register_binding(self, binding: ActionBinding) -> ActionRegistry:
        """Register one binding, overwriting existing handlers for same actions."""
        for action in binding.actions:
            self._handlers[action] = binding.handler
        return self

    def register_bindings(self, *bindings: ActionBinding) -> ActionRegistry:
        """Register multiple bindings and return ``self`` for fluent usage."""
        for binding in bindings:
            self.register_binding(binding)
        return self

    def handles(self, action: KeyAction) -> bool:
        return action in self._handlers

    def dispatch(self, action: KeyAction) -> bool | None:
        """Invoke the handler bound to ``action``; ``None`` when unbound."""
        handler = self._handlers.get(action)
        if handler is None:
            return None
        return handler()
