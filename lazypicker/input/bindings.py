"""Immutable key-binding configuration and its ambiguity checks."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from .actions import KeyAction

DEFAULT_SEQUENCE_TIMEOUT_SECONDS = 1.0
DEFAULT_KEY_BINDINGS: tuple[tuple[KeyAction, str], ...] = (
    (KeyAction.MOVE_DOWN, "j"),
    (KeyAction.MOVE_UP, "k"),
    (KeyAction.ENTER, "l"),
    (KeyAction.BACK, "h"),
    (KeyAction.TOP, "gg"),
    (KeyAction.BOTTOM, "G"),
    (KeyAction.DOWNLOAD, "d"),
    (KeyAction.REFRESH, "r"),
    (KeyAction.CANCEL, "q"),
)


class KeyBindingError(ValueError):
    """Raised when bound key sequences would break prefix resolution."""


@dataclass(frozen=True)
class KeyBindingsConfig:
    """Logical action to literal key sequence, plus the multi-key timeout.

    ``bindings`` is stored as a tuple of pairs so the value stays hashable and
    immutable; use :meth:`as_dict` for lookups.
    """

    bindings: tuple[tuple[KeyAction, str], ...] = DEFAULT_KEY_BINDINGS
    sequence_timeout: float = DEFAULT_SEQUENCE_TIMEOUT_SECONDS
    _by_sequence: dict[str, KeyAction] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.sequence_timeout <= 0:
            raise KeyBindingError("sequence_timeout must be positive")
        object.__setattr__(self, "_by_sequence", {sequence: action for action, sequence in self.bindings})

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[KeyAction, str],
        sequence_timeout: float = DEFAULT_SEQUENCE_TIMEOUT_SECONDS,
    ) -> KeyBindingsConfig:
        return cls(bindings=tuple(mapping.items()), sequence_timeout=sequence_timeout)

    def with_overrides(self, overrides: Mapping[KeyAction, str]) -> KeyBindingsConfig:
        """Return a copy where ``overrides`` replace the sequences of their actions."""
        merged = dict(self.bindings)
        merged.update(overrides)
        return KeyBindingsConfig(bindings=tuple(merged.items()), sequence_timeout=self.sequence_timeout)

    def as_dict(self) -> dict[KeyAction, str]:
        return dict(self.bindings)

    def sequence_for(self, action: KeyAction) -> str | None:
        for bound_action, sequence in self.bindings:
            if bound_action == action:
                return sequence
        return None

    def action_for(self, sequence: str) -> KeyAction | None:
        """Return the action bound to exactly ``sequence``."""
        return self._by_sequence.get(sequence)

    def is_strict_prefix(self, keys: str) -> bool:
        """Return whether ``keys`` is a strict prefix of at least one bound sequence."""
        return any(len(sequence) > len(keys) and sequence.startswith(keys) for _, sequence in self.bindings)


def validate_bindings(bindings: Iterable[tuple[KeyAction, str]]) -> None:
    """Reject bindings that make multi-key resolution ambiguous.

    Raises :class:`KeyBindingError` for an empty sequence, one sequence bound
    to two actions, one action bound twice, or a sequence that is a strict
    prefix of another (the shorter one would always fire first).
    """
    seen_actions: set[KeyAction] = set()
    owners: dict[str, KeyAction] = {}
    for action, sequence in bindings:
        if not sequence:
            raise KeyBindingError(f"{action.name} is bound to an empty key sequence")
        if action in seen_actions:
            raise KeyBindingError(f"{action.name} is bound more than once")
        seen_actions.add(action)
        owner = owners.get(sequence)
        if owner is not None:
            raise KeyBindingError(f"{sequence!r} is bound to both {owner.name} and {action.name}")
        owners[sequence] = action

    ordered = sorted(owners)
    for shorter, longer in zip(ordered, ordered[1:]):
        if longer.startswith(shorter):
            raise KeyBindingError(
                f"{shorter!r} ({owners[shorter].name}) is a prefix of "
                f"{longer!r} ({owners[longer].name})"
            )
