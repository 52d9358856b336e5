"""Input-layer public API: key decoding, bindings, and sequence resolution.

Low-level terminal decoding (`read_key`) is kept apart from the logical
action layer so the latter stays testable without a terminal.
"""

from .actions import ActionBinding, ActionRegistry, KeyAction
from .bindings import (
    DEFAULT_KEY_BINDINGS,
    DEFAULT_SEQUENCE_TIMEOUT_SECONDS,
    KeyBindingError,
    KeyBindingsConfig,
    validate_bindings,
)
from .reader import ESC_SEQUENCE_TIMEOUT_MS, UNKNOWN_KEY, _PENDING_BYTES, read_key
from .sequence import KeySequenceBuffer, PendingSequence

__all__ = [
    "ActionBinding",
    "ActionRegistry",
    "KeyAction",
    "DEFAULT_KEY_BINDINGS",
    "DEFAULT_SEQUENCE_TIMEOUT_SECONDS",
    "KeyBindingError",
    "KeyBindingsConfig",
    "validate_bindings",
    "read_key",
    "_PENDING_BYTES",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "UNKNOWN_KEY",
    "KeySequenceBuffer",
    "PendingSequence",
]
