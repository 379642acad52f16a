"""Search service client: exact name+version resolution."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from constants import Constants
from common.http_client import get_json
from common.logging_utils import extra_context, is_debug_enabled

from .models import PackageVersion, ResolveResponse

logger = logging.getLogger(__name__)


class SearchError(RuntimeError):
    """Raised when the search service cannot be queried."""


class SearchNotFoundError(SearchError):
    """Raised when the search service has no match for a name and version."""


class SearchClient:
    """Lightweight REST client for the package search service."""

    def __init__(self, base_url: Optional[str] = None):
        """Initialize the search client.

        Args:
            base_url: Service base URL (defaults to Constants.SEARCH_API_BASE)
        """
        self.base_url = (base_url or Constants.SEARCH_API_BASE).rstrip("/")

    def _fetch(self, path: str, name: str, version: str) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            status, _, data = get_json(
                url,
                context="search",
                params={"name": name, "version": version},
                headers={"Accept": "application/json"},
            )
        except requests.RequestException as exc:
            raise SearchError(f"search request for {name}@{version} failed: {exc}") from exc

        if status == 404:
            raise SearchNotFoundError(f"{name}@{version}")
        if status != 200:
            raise SearchError(f"search service returned HTTP {status} for {name}@{version}")
        if not isinstance(data, dict):
            raise SearchError(f"search service returned an unreadable body for {name}@{version}")

        if is_debug_enabled(logger):
            logger.debug(
                "Search resolve ok",
                extra=extra_context(
                    event="function_exit",
                    component="search_client",
                    action=path,
                    outcome="resolved",
                    systems=len(data.get("systems") or {}),
                )
            )
        return data

    def resolve(self, name: str, version: str) -> PackageVersion:
        """Resolve through the legacy endpoint.

        Raises:
            SearchNotFoundError: no package matches ``name`` at ``version``.
            SearchError: transport or protocol failure.
        """
        return PackageVersion.from_dict(self._fetch(Constants.SEARCH_RESOLVE_PATH, name, version))

    def resolve_v2(self, name: str, version: str) -> ResolveResponse:
        """Resolve through the enriched endpoint, which returns store outputs inline.

        Raises:
            SearchNotFoundError: no package matches ``name`` at ``version``.
            SearchError: transport or protocol failure.
        """
        return ResolveResponse.from_dict(self._fetch(Constants.SEARCH_RESOLVE_PATH_V2, name, version))
