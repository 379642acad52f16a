"""Concurrent per-platform store path lookup.

Each platform with complete store data gets its own lookup task against the
binary cache. A failed lookup only drops that platform: the caller can still
install it through the slower evaluation path, and the platforms that did
resolve are kept.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Mapping, NamedTuple, Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, Timer
from store.resolver import NarinfoStoreResolver, StoreResolver

logger = logging.getLogger(__name__)


class StoreRef(NamedTuple):
    """Store hash and name reported by the search service for one platform."""
    store_hash: str
    store_name: str


class StorePathFanout:
    """Resolves store paths for many platforms in parallel."""

    def __init__(self, resolver: Optional[StoreResolver] = None, cache_url: Optional[str] = None):
        self._resolver = resolver
        self._cache_url = cache_url

    def resolve(self, systems: Mapping[str, StoreRef]) -> Dict[str, str]:
        """Blocking wrapper around ``resolve_async``."""
        return asyncio.run(self.resolve_async(systems))

    async def resolve_async(self, systems: Mapping[str, StoreRef]) -> Dict[str, str]:
        """Return ``{platform: store_path}`` for every platform that resolved.

        Platforms with an empty hash or name are skipped. Lookup failures are
        logged and omitted; only cancellation propagates.
        """
        candidates = {
            system: ref for system, ref in systems.items()
            if ref.store_hash and ref.store_name
        }
        if not candidates:
            return {}

        resolver = self._resolver or NarinfoStoreResolver()
        cache_url = self._cache_url or Constants.BINARY_CACHE_URL
        store_paths: Dict[str, str] = {}
        lock = asyncio.Lock()

        async def _lookup(system: str, ref: StoreRef) -> None:
            try:
                path = await resolver.resolve(ref.store_hash, cache_url)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                logger.debug(
                    "Failed to resolve store path for %s with store hash %s: %s",
                    system,
                    ref.store_hash,
                    exc,
                    extra=extra_context(
                        event="store_path_lookup",
                        component="fanout",
                        action="resolve",
                        outcome="skipped",
                        system=system,
                    )
                )
                return
            async with lock:
                store_paths[system] = path

        await resolver.start()
        try:
            with Timer() as t:
                await asyncio.gather(
                    *(_lookup(system, ref) for system, ref in candidates.items())
                )
        finally:
            await resolver.stop()

        if is_debug_enabled(logger):
            logger.debug(
                "Store path fan-out finished",
                extra=extra_context(
                    event="function_exit",
                    component="fanout",
                    action="resolve",
                    requested=len(candidates),
                    resolved=len(store_paths),
                    duration_ms=t.duration_ms(),
                )
            )
        return store_paths
