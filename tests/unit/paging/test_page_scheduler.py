"""Tests for the background page-fetch scheduler and the list-backed source."""

from __future__ import annotations

import time
import unittest

from lazypicker.paging import (
    CancellationToken,
    FetchCancelledError,
    InMemoryPagedSource,
    PagedResult,
    PageFetchError,
    PageFetchScheduler,
)


def _run_inline(target) -> None:
    target()


class _DeferredSpawn:
    """Collect worker callables so a test decides when each fetch finishes."""

    def __init__(self) -> None:
        self.pending: list = []

    def __call__(self, target) -> None:
        self.pending.append(target)

    def run_next(self) -> None:
        self.pending.pop(0)()


class _FailingSource:
    def __init__(self) -> None:
        self.calls: list[str | None] = []

    def fetch_next_page(self, continuation_token, page_size, cancellation):
        self.calls.append(continuation_token)
        raise PageFetchError("backend unavailable", continuation_token)


def _wait_for_results(scheduler: PageFetchScheduler, timeout: float = 2.0) -> list:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        results = scheduler.drain_results()
        if results:
            return results
        time.sleep(0.01)
    return []


class InMemoryPagedSourceTests(unittest.TestCase):
    def test_pages_follow_offset_tokens_until_exhausted(self) -> None:
        source = InMemoryPagedSource([f"item-{index}" for index in range(5)])
        token = CancellationToken()

        first = source.fetch_next_page(None, 2, token)
        second = source.fetch_next_page(first.continuation_token, 2, token)
        last = source.fetch_next_page(second.continuation_token, 2, token)

        self.assertEqual(first.items, ("item-0", "item-1"))
        self.assertEqual(first.continuation_token, "2")
        self.assertTrue(first.has_more)
        self.assertEqual(second.items, ("item-2", "item-3"))
        self.assertEqual(last.items, ("item-4",))
        self.assertIsNone(last.continuation_token)
        self.assertFalse(last.has_more)
        self.assertEqual(source.calls, [None, "2", "4"])

    def test_invalid_token_raises_fetch_error(self) -> None:
        source = InMemoryPagedSource(["a"])

        with self.assertRaises(PageFetchError) as ctx:
            source.fetch_next_page("nope", 10, CancellationToken())
        self.assertEqual(ctx.exception.continuation_token, "nope")
        with self.assertRaises(PageFetchError):
            source.fetch_next_page("7", 10, CancellationToken())

    def test_cancelled_token_stops_fetch(self) -> None:
        source = InMemoryPagedSource(["a", "b"], latency=5.0)
        token = CancellationToken()
        token.cancel()

        with self.assertRaises(FetchCancelledError):
            source.fetch_next_page(None, 10, token)

    def test_empty_token_string_means_no_more_pages(self) -> None:
        self.assertFalse(PagedResult(items=("a",), continuation_token="").has_more)
        self.assertEqual(PagedResult.empty().count, 0)


class PageFetchSchedulerTests(unittest.TestCase):
    def test_inline_fetch_is_in_flight_until_drained(self) -> None:
        source = InMemoryPagedSource(["a", "b", "c"])
        scheduler = PageFetchScheduler(source, spawn=_run_inline)

        request_id = scheduler.request(None, 2)
        self.assertEqual(request_id, 1)
        self.assertTrue(scheduler.in_flight)

        results = scheduler.drain_results()
        self.assertEqual(len(results), 1)
        self.assertTrue(results[0].ok)
        self.assertEqual(results[0].page.items, ("a", "b"))
        self.assertFalse(scheduler.in_flight)

    def test_second_request_while_in_flight_is_refused(self) -> None:
        spawn = _DeferredSpawn()
        scheduler = PageFetchScheduler(InMemoryPagedSource(["a"]), spawn=spawn)

        self.assertIsNotNone(scheduler.request(None, 10))
        self.assertIsNone(scheduler.request(None, 10))
        self.assertEqual(len(spawn.pending), 1)

    def test_cancelled_result_is_discarded(self) -> None:
        spawn = _DeferredSpawn()
        source = InMemoryPagedSource(["a", "b"])
        scheduler = PageFetchScheduler(source, spawn=spawn)

        scheduler.request(None, 10)
        scheduler.cancel()
        spawn.run_next()

        self.assertEqual(scheduler.drain_results(), [])
        self.assertFalse(scheduler.in_flight)

    def test_provider_error_is_delivered_as_result(self) -> None:
        source = _FailingSource()
        scheduler = PageFetchScheduler(source, spawn=_run_inline)

        with self.assertLogs("lazypicker.paging.scheduler", level="WARNING"):
            scheduler.request("40", 20)
        results = scheduler.drain_results()

        self.assertEqual(len(results), 1)
        self.assertFalse(results[0].ok)
        self.assertIsInstance(results[0].error, PageFetchError)
        self.assertEqual(results[0].request.continuation_token, "40")
        self.assertEqual(source.calls, ["40"])
        self.assertFalse(scheduler.in_flight)

    def test_rejects_out_of_range_page_size(self) -> None:
        scheduler = PageFetchScheduler(InMemoryPagedSource([]), spawn=_run_inline)

        with self.assertRaises(ValueError):
            scheduler.request(None, 0)
        with self.assertRaises(ValueError):
            scheduler.request(None, 5001)
        self.assertFalse(scheduler.in_flight)

    def test_real_worker_thread_delivers_page(self) -> None:
        source = InMemoryPagedSource([str(index) for index in range(10)], latency=0.01)
        scheduler = PageFetchScheduler(source)

        scheduler.request(None, 4)
        results = _wait_for_results(scheduler)

        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].page.items, ("0", "1", "2", "3"))
        self.assertEqual(results[0].page.continuation_token, "4")
        self.assertFalse(scheduler.in_flight)


if __name__ == "__main__":
    unittest.main()
