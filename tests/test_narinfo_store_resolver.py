"""Tests for the binary cache narinfo client."""

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from store.resolver import (
    NarinfoStoreResolver,
    StorePathError,
    StorePathNotFoundError,
    parse_narinfo,
)

NARINFO = """StorePath: /nix/store/abc123-python3-3.11.4
URL: nar/0f3b.nar.xz
Compression: xz
NarHash: sha256:1b2c
NarSize: 123456
References: abc123-python3-3.11.4 def456-glibc-2.37
"""


def _app():
    async def narinfo(request):
        store_hash = request.match_info["hash"]
        if store_hash == "abc123":
            return web.Response(text=NARINFO)
        if store_hash == "broken":
            return web.Response(text="URL: nar/x.nar.xz\n")
        if store_hash == "relative":
            return web.Response(text="StorePath: nix/store/relative-x\n")
        if store_hash == "mismatch":
            return web.Response(text="StorePath: /nix/store/zzz-other\n")
        if store_hash == "flaky":
            return web.Response(status=503)
        return web.Response(status=404, text="404")

    app = web.Application()
    app.router.add_get("/{hash}.narinfo", narinfo)
    return app


def _resolve(store_hash):
    async def _run():
        async with test_utils.TestServer(_app()) as server:
            resolver = NarinfoStoreResolver(timeout=5)
            await resolver.start()
            try:
                return await resolver.resolve(store_hash, str(server.make_url("/")))
            finally:
                await resolver.stop()

    return asyncio.run(_run())


class TestParseNarinfo:
    """Parse Key: value lines."""

    def test_fields(self):
        """Known fields are extracted."""
        fields = parse_narinfo(NARINFO)
        assert fields["StorePath"] == "/nix/store/abc123-python3-3.11.4"
        assert fields["Compression"] == "xz"
        assert fields["References"] == "abc123-python3-3.11.4 def456-glibc-2.37"

    def test_ignores_lines_without_separator(self):
        """Lines without a colon are skipped."""
        assert parse_narinfo("garbage\nStorePath: /nix/store/a-b\n") == {"StorePath": "/nix/store/a-b"}

    def test_first_value_wins(self):
        """A repeated key keeps its first value."""
        assert parse_narinfo("A: 1\nA: 2\n") == {"A": "1"}


class TestNarinfoStoreResolver:
    """HTTP lookups against a local binary cache."""

    def test_resolves_store_path(self):
        """A cached hash resolves to its store path."""
        assert _resolve("abc123") == "/nix/store/abc123-python3-3.11.4"

    def test_missing_hash_is_not_found(self):
        """404 raises StorePathNotFoundError."""
        with pytest.raises(StorePathNotFoundError):
            _resolve("nothere")

    def test_server_error(self):
        """Other HTTP errors raise StorePathError."""
        with pytest.raises(StorePathError, match="HTTP 503"):
            _resolve("flaky")

    @pytest.mark.parametrize("store_hash", ["broken", "relative", "mismatch"])
    def test_invalid_store_path_rejected(self, store_hash):
        """Missing, relative or mismatched paths are rejected."""
        with pytest.raises(StorePathError):
            _resolve(store_hash)

    def test_connection_error_is_store_path_error(self):
        """Connection failures become StorePathError."""
        async def _run():
            resolver = NarinfoStoreResolver(timeout=2)
            await resolver.start()
            try:
                # Port 9 on loopback is not expected to accept connections.
                return await resolver.resolve("abc123", "http://127.0.0.1:9")
            finally:
                await resolver.stop()

        with pytest.raises(StorePathError):
            asyncio.run(_run())

    def test_stop_without_start(self):
        """Stopping an unstarted resolver is a no-op."""
        asyncio.run(NarinfoStoreResolver().stop())

    def test_resolve_before_start_raises(self):
        """Lookups require start() so the session is always closed by stop()."""
        resolver = NarinfoStoreResolver()
        with pytest.raises(StorePathError, match="not started"):
            asyncio.run(resolver.resolve("abc123", "https://cache.example.org"))
        assert resolver._session is None
