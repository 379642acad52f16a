"""Resolve ``name@version`` into a lockable, platform-qualified package record."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from constants import Constants, ProtocolMode
from common.logging_utils import extra_context, is_debug_enabled
from runx.resolver import RunXResolver
from search.client import SearchClient, SearchNotFoundError
from search.models import PackageVersion
from search.parser import is_runx, parse_versioned_package

from .errors import MissingVersionError, NoAttrPathsError, PackageNotFoundError
from .fanout import StorePathFanout, StoreRef
from .models import ResolvedPackage, SystemInfo
from .select import select_for_system

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionStrategy:
    """How a package is resolved.

    Attributes:
        protocol: Search protocol. ENRICHED returns verified store paths
            inline; LEGACY needs a separate binary cache lookup.
        fetch_store_paths: LEGACY only. Look up store paths for every
            platform; when False ``systems`` is left empty.
    """
    protocol: ProtocolMode = ProtocolMode.LEGACY
    fetch_store_paths: bool = False


class PackageResolver:
    """Resolves package specs through the search service or runx."""

    def __init__(
        self,
        search: Optional[SearchClient] = None,
        runx: Optional[RunXResolver] = None,
        fanout: Optional[StorePathFanout] = None,
        strategy: Optional[ResolutionStrategy] = None,
    ):
        self.search = search or SearchClient()
        self.runx = runx or RunXResolver()
        self.fanout = fanout or StorePathFanout()
        self.strategy = strategy or ResolutionStrategy()

    def resolve(self, package_spec: str, strategy: Optional[ResolutionStrategy] = None) -> ResolvedPackage:
        """Resolve ``package_spec`` without writing it anywhere.

        Args:
            package_spec: ``name@version`` or ``runx:owner/repo@version``.
            strategy: Overrides the resolver's default strategy for this call.

        Raises:
            MissingVersionError: ``package_spec`` has no version.
            PackageNotFoundError: nothing matches the name and version.
            NoSystemsAvailableError: the service reported no platforms.
            NoAttrPathsError: the chosen platform has no attribute path.
        """
        strategy = strategy or self.strategy
        name, version, _ = parse_versioned_package(package_spec)
        if not version:
            raise MissingVersionError(name)

        if is_debug_enabled(logger):
            logger.debug(
                "Resolving package",
                extra=extra_context(
                    event="function_entry",
                    component="resolver",
                    action="resolve",
                    package=name,
                    version=version,
                    protocol=strategy.protocol.value,
                )
            )

        if is_runx(package_spec):
            ref = self.runx.resolve(package_spec)
            return ResolvedPackage(version=ref.version, resolved=str(ref))
        if strategy.protocol == ProtocolMode.ENRICHED:
            return self._resolve_enriched(name, version)
        return self._resolve_legacy(name, version, strategy.fetch_store_paths)

    def _resolve_legacy(self, name: str, version: str, fetch_store_paths: bool) -> ResolvedPackage:
        try:
            package_version = self.search.resolve(name, version)
        except SearchNotFoundError as exc:
            raise PackageNotFoundError(name, version) from exc

        info = select_for_system(package_version.systems)
        if not info.attr_paths:
            raise NoAttrPathsError(name)

        systems: Dict[str, SystemInfo] = {}
        if fetch_store_paths:
            systems = self._fetch_store_paths(package_version)

        return ResolvedPackage(
            version=info.version or package_version.version or version,
            resolved=f"{Constants.NIXPKGS_FLAKE_REF}/{info.commit_hash}#{info.attr_paths[0]}",
            last_modified=info.last_modified,
            source=Constants.SEARCH_SOURCE,
            systems=systems,
        )

    def _fetch_store_paths(self, package_version: PackageVersion) -> Dict[str, SystemInfo]:
        refs = {
            system: StoreRef(info.store_hash, info.store_name)
            for system, info in package_version.systems.items()
        }
        store_paths = self.fanout.resolve(refs)
        return {system: SystemInfo(store_path=path) for system, path in store_paths.items()}

    def _resolve_enriched(self, name: str, version: str) -> ResolvedPackage:
        try:
            resolved = self.search.resolve_v2(name, version)
        except SearchNotFoundError as exc:
            raise PackageNotFoundError(name, version) from exc

        # The enriched endpoint never reports success without platforms.
        system = select_for_system(resolved.systems)
        systems = {
            sys_name: SystemInfo(store_path=info.outputs[0].path)
            for sys_name, info in resolved.systems.items()
            if info.outputs and info.outputs[0].path
        }
        return ResolvedPackage(
            version=resolved.version or version,
            resolved=str(system.flake_installable),
            last_modified=system.last_updated,
            source=Constants.SEARCH_SOURCE,
            systems=systems,
        )


def fetch_resolved_package(package_spec: str, strategy: Optional[ResolutionStrategy] = None) -> ResolvedPackage:
    """Resolve ``package_spec`` with a default-configured resolver."""
    return PackageResolver(strategy=strategy).resolve(package_spec)
