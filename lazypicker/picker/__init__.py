"""Public picker-session exports."""

from .engine import (
    CANCELLED,
    CONFIRMED,
    TIMED_OUT,
    PickerEngine,
    PickerOutcome,
    SelectionState,
    SessionClosedError,
)

__all__ = [
    "CANCELLED",
    "CONFIRMED",
    "TIMED_OUT",
    "PickerEngine",
    "PickerOutcome",
    "SelectionState",
    "SessionClosedError",
]
