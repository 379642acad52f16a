"""Binary cache client: map a store hash to its verified store path.

A binary cache serves ``<hash>.narinfo`` documents, one ``Key: value`` pair
per line. The ``StorePath`` field names the full content-addressed path.
"""

from __future__ import annotations

import abc
import asyncio
import logging
from typing import Dict, Optional

import aiohttp

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


class StorePathError(RuntimeError):
    """Raised when a store hash cannot be turned into a verified path."""


class StorePathNotFoundError(StorePathError):
    """Raised when the binary cache has no entry for a hash."""


def parse_narinfo(text: str) -> Dict[str, str]:
    """Parse a narinfo document into a field mapping.

    Lines without a ``:`` separator are ignored; a repeated key keeps its
    first value.
    """
    fields: Dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        key = key.strip()
        if key and key not in fields:
            fields[key] = value.strip()
    return fields


class StoreResolver(abc.ABC):
    """Resolves a store hash to an absolute store path via a binary cache."""

    async def start(self) -> None:
        """Acquire any resources needed for a batch of lookups."""

    async def stop(self) -> None:
        """Release resources acquired in ``start``."""

    @abc.abstractmethod
    async def resolve(self, store_hash: str, cache_url: str) -> str:
        """Return the store path for ``store_hash``.

        Raises:
            StorePathError: on a cache miss or transport failure.
        """


class NarinfoStoreResolver(StoreResolver):
    """StoreResolver backed by HTTP ``.narinfo`` lookups."""

    def __init__(self, timeout: Optional[float] = None):
        """Initialize the resolver.

        Args:
            timeout: Total per-request timeout in seconds. Defaults to
                Constants.STORE_REQUEST_TIMEOUT; None disables the deadline.
        """
        total = timeout if timeout is not None else Constants.STORE_REQUEST_TIMEOUT
        self._timeout = aiohttp.ClientTimeout(total=total)
        self._session: Optional[aiohttp.ClientSession] = None

    async def start(self) -> None:
        """Start the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)

    async def stop(self) -> None:
        """Stop the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def resolve(self, store_hash: str, cache_url: str) -> str:
        """Look up ``store_hash`` in ``cache_url``.

        The resolver must be started first; ``stop()`` closes the session.
        """
        if self._session is None:
            raise StorePathError(f"{store_hash}: resolver not started")

        url = f"{cache_url.rstrip('/')}/{store_hash}.narinfo"
        with Timer() as t:
            try:
                async with self._session.get(url) as response:
                    status = response.status
                    text = await response.text() if status == 200 else ""
            except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                raise StorePathError(f"{store_hash}: {exc}") from exc

        if is_debug_enabled(logger):
            logger.debug(
                "narinfo response",
                extra=extra_context(
                    event="http_response",
                    component="store_resolver",
                    action="GET",
                    status_code=status,
                    duration_ms=t.duration_ms(),
                    target=safe_url(url),
                )
            )

        if status == 404:
            raise StorePathNotFoundError(f"{store_hash}: not in binary cache {cache_url}")
        if status != 200:
            raise StorePathError(f"{store_hash}: binary cache returned HTTP {status}")

        store_path = parse_narinfo(text).get("StorePath", "")
        if not store_path.startswith("/"):
            raise StorePathError(f"{store_hash}: narinfo has no absolute StorePath")
        if store_hash not in store_path.rsplit("/", 1)[-1]:
            raise StorePathError(f"{store_hash}: StorePath {store_path} does not match hash")
        return store_path
