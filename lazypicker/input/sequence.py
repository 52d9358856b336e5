"""Multi-key sequence recognition with a single-shot timeout.

The buffer is a two-state machine: empty (``pending is None``) or
``PendingSequence(keys, started_at, deadline)``. Each keystroke either
resolves a bound sequence, extends a pending prefix, or restarts from the
keystroke alone. The timeout is a deadline the event loop polls through
:meth:`KeySequenceBuffer.expire`; there is no timer thread, so a keystroke and
an expiry can never both resolve the same buffer.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from .actions import KeyAction
from .bindings import KeyBindingsConfig, validate_bindings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingSequence:
    """Buffered, unresolved keystrokes and when the first one arrived."""

    keys: str
    started_at: float
    deadline: float


class KeySequenceBuffer:
    """Resolve raw keystrokes into :class:`KeyAction` values."""

    def __init__(
        self,
        config: KeyBindingsConfig,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        validate_bindings(config.bindings)
        self.config = config
        self._clock = clock
        self._pending: PendingSequence | None = None

    @property
    def pending(self) -> PendingSequence | None:
        return self._pending

    @property
    def deadline(self) -> float | None:
        """Monotonic time when the pending buffer times out, if any."""
        return self._pending.deadline if self._pending is not None else None

    def clear(self) -> None:
        self._pending = None

    def feed(self, key: str) -> KeyAction | None:
        """Process one keystroke and return the action it completes, if any."""
        now = self._clock()
        if self._pending is not None and now >= self._pending.deadline:
            # The loop missed the deadline; resolve the stale buffer first.
            self._resolve_timeout()

        if self._pending is None:
            return self._start(key, now)

        keys = self._pending.keys + key
        action = self.config.action_for(keys)
        if action is not None:
            self._pending = None
            logger.debug("key sequence %r resolved to %s", keys, action.name)
            return action
        if self.config.is_strict_prefix(keys):
            self._pending = PendingSequence(keys, self._pending.started_at, self._pending.deadline)
            return None

        logger.debug("key sequence %r matches nothing; retrying %r alone", keys, key)
        self._pending = None
        return self._start(key, now)

    def expire(self) -> KeyAction | None:
        """Timeout handler: resolve the pending buffer once its deadline passed."""
        if self._pending is None or self._clock() < self._pending.deadline:
            return None
        return self._resolve_timeout()

    def _start(self, key: str, now: float) -> KeyAction | None:
        action = self.config.action_for(key)
        if action is not None:
            return action
        if self.config.is_strict_prefix(key):
            self._pending = PendingSequence(key, now, now + self.config.sequence_timeout)
        return None

    def _resolve_timeout(self) -> KeyAction | None:
        assert self._pending is not None
        keys = self._pending.keys
        self._pending = None
        # feed() emits exact matches immediately, so a pending buffer is always a
        # strict prefix and this lookup finds nothing; it is the rule for exact
        # buffers at expiry all the same.
        action = self.config.action_for(keys)
        if action is None:
            logger.debug("key sequence %r timed out unresolved", keys)
        return action
