"""Tests for multi-key sequence resolution and its timeout.

A fake clock drives the deadline so expiry behavior is deterministic.
"""

from __future__ import annotations

import unittest

from lazypicker.input import KeyAction, KeyBindingError, KeyBindingsConfig, KeySequenceBuffer


class _FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _buffer(clock: _FakeClock, **bindings: str) -> KeySequenceBuffer:
    if bindings:
        config = KeyBindingsConfig.from_mapping(
            {KeyAction.from_name(name): sequence for name, sequence in bindings.items()},
            sequence_timeout=1.0,
        )
    else:
        config = KeyBindingsConfig(sequence_timeout=1.0)
    return KeySequenceBuffer(config, clock=clock)


class KeySequenceBufferTests(unittest.TestCase):
    def test_single_key_binding_resolves_immediately(self) -> None:
        clock = _FakeClock()
        buffer = _buffer(clock)

        self.assertEqual(buffer.feed("j"), KeyAction.MOVE_DOWN)
        self.assertIsNone(buffer.pending)

    def test_gg_within_timeout_resolves_to_top(self) -> None:
        clock = _FakeClock()
        buffer = _buffer(clock)

        self.assertIsNone(buffer.feed("g"))
        self.assertEqual(buffer.pending.keys, "g")
        clock.advance(0.5)
        self.assertEqual(buffer.feed("g"), KeyAction.TOP)
        self.assertIsNone(buffer.pending)
        self.assertIsNone(buffer.deadline)

    def test_upper_case_g_is_a_distinct_binding(self) -> None:
        clock = _FakeClock()
        buffer = _buffer(clock)

        self.assertEqual(buffer.feed("G"), KeyAction.BOTTOM)
        self.assertIsNone(buffer.feed("g"))
        self.assertEqual(buffer.feed("G"), KeyAction.BOTTOM)
        self.assertIsNone(buffer.pending)

    def test_lone_prefix_times_out_to_no_action(self) -> None:
        clock = _FakeClock()
        buffer = _buffer(clock)

        buffer.feed("g")
        clock.advance(0.999)
        self.assertIsNone(buffer.expire())
        self.assertIsNotNone(buffer.pending)
        clock.advance(0.002)
        self.assertIsNone(buffer.expire())
        self.assertIsNone(buffer.pending)

    def test_lone_g_bound_by_itself_resolves_without_waiting(self) -> None:
        clock = _FakeClock()
        buffer = _buffer(clock, top="g", bottom="G")

        self.assertEqual(buffer.feed("g"), KeyAction.TOP)
        clock.advance(5.0)
        self.assertIsNone(buffer.expire())

    def test_every_bound_sequence_resolves_before_expiry(self) -> None:
        clock = _FakeClock()
        buffer = _buffer(clock)

        for action, sequence in buffer.config.bindings:
            emitted = [buffer.feed(key) for key in sequence]
            self.assertEqual(emitted[-1], action)
            self.assertIsNone(buffer.pending)
            clock.advance(5.0)
            self.assertIsNone(buffer.expire())

    def test_deadline_is_measured_from_first_keystroke(self) -> None:
        clock = _FakeClock()
        buffer = _buffer(clock, top="ggg")

        buffer.feed("g")
        first_deadline = buffer.deadline
        clock.advance(0.6)
        buffer.feed("g")
        self.assertEqual(buffer.deadline, first_deadline)
        clock.advance(0.6)
        self.assertIsNone(buffer.expire())
        self.assertIsNone(buffer.pending)

    def test_stale_buffer_is_resolved_before_new_key(self) -> None:
        clock = _FakeClock()
        buffer = _buffer(clock)

        buffer.feed("g")
        clock.advance(2.0)
        # The old "g" expired, so this "g" starts a new sequence instead of completing "gg".
        self.assertIsNone(buffer.feed("g"))
        self.assertEqual(buffer.pending.keys, "g")
        self.assertEqual(buffer.pending.started_at, clock.now)

    def test_mismatch_restarts_from_the_new_key(self) -> None:
        clock = _FakeClock()
        buffer = _buffer(clock)

        buffer.feed("g")
        self.assertEqual(buffer.feed("j"), KeyAction.MOVE_DOWN)
        self.assertIsNone(buffer.pending)

    def test_mismatch_new_key_can_start_a_fresh_prefix(self) -> None:
        clock = _FakeClock()
        buffer = _buffer(clock, top="gg", info="zi")

        buffer.feed("g")
        clock.advance(0.8)
        self.assertIsNone(buffer.feed("z"))
        self.assertEqual(buffer.pending.keys, "z")
        self.assertEqual(buffer.pending.started_at, clock.now)

    def test_unbound_key_is_discarded(self) -> None:
        clock = _FakeClock()
        buffer = _buffer(clock)

        self.assertIsNone(buffer.feed("x"))
        self.assertIsNone(buffer.pending)

    def test_shared_prefix_bindings_resolve_independently(self) -> None:
        clock = _FakeClock()
        buffer = _buffer(clock, top="gg", bottom="ge")

        buffer.feed("g")
        self.assertEqual(buffer.feed("e"), KeyAction.BOTTOM)
        buffer.feed("g")
        self.assertEqual(buffer.feed("g"), KeyAction.TOP)

    def test_clear_drops_pending_keys(self) -> None:
        clock = _FakeClock()
        buffer = _buffer(clock)

        buffer.feed("g")
        buffer.clear()
        self.assertIsNone(buffer.pending)
        self.assertIsNone(buffer.feed("g"))
        self.assertEqual(buffer.pending.keys, "g")

    def test_construction_rejects_prefix_ambiguity(self) -> None:
        clock = _FakeClock()
        with self.assertRaises(KeyBindingError):
            _buffer(clock, top="gg", bottom="g")


if __name__ == "__main__":
    unittest.main()
