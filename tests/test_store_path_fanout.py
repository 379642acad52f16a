"""Tests for concurrent per-platform store path lookup."""

import asyncio
import logging

from lock.fanout import StorePathFanout, StoreRef
from store.resolver import StorePathError

from fakes import FakeStoreResolver

CACHE = "https://cache.example.org"


class TestStorePathFanout:
    """Fan-out with partial-failure tolerance."""

    def test_all_platforms_resolve(self):
        """Every platform with a cached hash resolves."""
        resolver = FakeStoreResolver({"abc": "/nix/store/abc-hello", "def": "/nix/store/def-hello"})
        fanout = StorePathFanout(resolver, cache_url=CACHE)

        result = fanout.resolve({
            "x86_64-linux": StoreRef("abc", "hello"),
            "aarch64-darwin": StoreRef("def", "hello"),
        })

        assert result == {
            "x86_64-linux": "/nix/store/abc-hello",
            "aarch64-darwin": "/nix/store/def-hello",
        }
        assert sorted(call[0] for call in resolver.calls) == ["abc", "def"]
        assert all(call[1] == CACHE for call in resolver.calls)

    def test_incomplete_entries_are_dropped_without_lookup(self):
        """Entries missing hash or name are never looked up."""
        resolver = FakeStoreResolver({"abc": "/nix/store/abc-a", "ghi": "/nix/store/ghi-c"})
        fanout = StorePathFanout(resolver, cache_url=CACHE)

        result = fanout.resolve({
            "x86_64-linux": StoreRef("abc", "a"),
            "aarch64-linux": StoreRef("", "b"),
            "x86_64-darwin": StoreRef("def", ""),
            "aarch64-darwin": StoreRef("ghi", "c"),
        })

        assert len(result) <= 2
        assert set(result) == {"x86_64-linux", "aarch64-darwin"}
        assert sorted(call[0] for call in resolver.calls) == ["abc", "ghi"]

    def test_single_failure_omits_only_that_platform(self):
        """One failure does not affect the other platforms."""
        resolver = FakeStoreResolver(
            {"abc": "/nix/store/abc-a", "ghi": "/nix/store/ghi-c"},
            errors={"def": StorePathError("def: connection reset")},
        )
        fanout = StorePathFanout(resolver, cache_url=CACHE)

        result = fanout.resolve({
            "x86_64-linux": StoreRef("abc", "a"),
            "aarch64-linux": StoreRef("def", "b"),
            "aarch64-darwin": StoreRef("ghi", "c"),
        })

        assert result == {
            "x86_64-linux": "/nix/store/abc-a",
            "aarch64-darwin": "/nix/store/ghi-c",
        }

    def test_unexpected_exception_is_absorbed(self):
        """Arbitrary exceptions are absorbed like cache misses."""
        resolver = FakeStoreResolver({"abc": "/nix/store/abc-a"}, errors={"def": KeyError("boom")})
        fanout = StorePathFanout(resolver, cache_url=CACHE)

        result = fanout.resolve({
            "x86_64-linux": StoreRef("abc", "a"),
            "aarch64-linux": StoreRef("def", "b"),
        })

        assert result == {"x86_64-linux": "/nix/store/abc-a"}

    def test_all_failures_return_empty(self):
        """All lookups failing returns an empty mapping."""
        resolver = FakeStoreResolver({})
        fanout = StorePathFanout(resolver, cache_url=CACHE)

        result = fanout.resolve({
            "x86_64-linux": StoreRef("abc", "a"),
            "aarch64-linux": StoreRef("def", "b"),
        })

        assert result == {}
        assert resolver.stopped == 1

    def test_empty_input_makes_no_calls(self):
        """No entries means no resolver calls."""
        resolver = FakeStoreResolver({})
        assert StorePathFanout(resolver, cache_url=CACHE).resolve({}) == {}
        assert resolver.calls == []
        assert resolver.started == 0

    def test_lookups_run_concurrently(self):
        """Lookups are in flight at the same time."""
        resolver = FakeStoreResolver(
            {f"h{i}": f"/nix/store/h{i}-pkg" for i in range(4)},
            delay=0.05,
        )
        fanout = StorePathFanout(resolver, cache_url=CACHE)

        result = fanout.resolve({f"sys{i}": StoreRef(f"h{i}", "pkg") for i in range(4)})

        assert len(result) == 4
        assert resolver.max_in_flight == 4

    def test_failure_is_logged(self, caplog):
        """Failures are logged with platform and hash."""
        caplog.set_level(logging.DEBUG, logger="lock.fanout")
        resolver = FakeStoreResolver({})
        StorePathFanout(resolver, cache_url=CACHE).resolve({"aarch64-darwin": StoreRef("def", "b")})

        assert any(
            "aarch64-darwin" in record.getMessage() and "def" in record.getMessage()
            for record in caplog.records
        )

    def test_session_closed_once(self):
        """The resolver is started and stopped once per batch."""
        resolver = FakeStoreResolver({"abc": "/nix/store/abc-a"})
        StorePathFanout(resolver, cache_url=CACHE).resolve({"x86_64-linux": StoreRef("abc", "a")})
        assert resolver.started == 1
        assert resolver.stopped == 1

    def test_cancellation_propagates(self):
        """Cancelling the caller aborts the batch."""
        resolver = FakeStoreResolver({"abc": "/nix/store/abc-a"}, delay=10)
        fanout = StorePathFanout(resolver, cache_url=CACHE)

        async def _run():
            task = asyncio.ensure_future(fanout.resolve_async({"x86_64-linux": StoreRef("abc", "a")}))
            await asyncio.sleep(0.01)
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                return "cancelled"
            return "completed"

        assert asyncio.run(_run()) == "cancelled"
        assert resolver.stopped == 1
