"""Records returned by the package search service.

``PackageVersion`` / ``PackageInfo`` are the legacy ``/v1/resolve`` shapes;
``ResolveResponse`` / ``ResolvedSystem`` are the enriched ``/v2/resolve``
shapes, which already carry verified store outputs per platform.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union


def _parse_rfc3339(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp; empty or zero-ish values give None."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    if parsed.year <= 1:
        return None
    return parsed


@dataclass
class PackageInfo:
    """Legacy per-platform package details."""
    attr_paths: List[str] = field(default_factory=list)
    commit_hash: str = ""
    version: str = ""
    last_updated: int = 0
    store_hash: str = ""
    store_name: str = ""
    store_version: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PackageInfo":
        return cls(
            attr_paths=list(data.get("attr_paths") or []),
            commit_hash=data.get("commit_hash") or "",
            version=data.get("version") or "",
            last_updated=int(data.get("last_updated") or 0),
            store_hash=data.get("store_hash") or "",
            store_name=data.get("store_name") or "",
            store_version=data.get("store_version") or "",
        )

    @property
    def last_modified(self) -> Optional[datetime]:
        """``last_updated`` (unix seconds) as an aware UTC datetime."""
        if not self.last_updated:
            return None
        return datetime.fromtimestamp(self.last_updated, tz=timezone.utc)


@dataclass
class PackageVersion:
    """Legacy resolve response: one version, keyed by platform."""
    name: str
    version: str
    summary: str = ""
    systems: Dict[str, PackageInfo] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PackageVersion":
        systems = data.get("systems") or {}
        return cls(
            name=data.get("name") or "",
            version=data.get("version") or "",
            summary=data.get("summary") or "",
            systems={sys: PackageInfo.from_dict(info or {}) for sys, info in systems.items()},
        )


@dataclass
class FlakeRef:
    """A flake reference; github refs render as ``github:owner/repo/rev``."""
    type: str = ""
    owner: str = ""
    repo: str = ""
    rev: str = ""
    ref: str = ""
    url: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FlakeRef":
        return cls(
            type=data.get("type") or "",
            owner=data.get("owner") or "",
            repo=data.get("repo") or "",
            rev=data.get("rev") or "",
            ref=data.get("ref") or "",
            url=data.get("url") or "",
        )

    def __str__(self) -> str:
        if self.type == "github":
            suffix = self.rev or self.ref
            base = f"github:{self.owner}/{self.repo}"
            return f"{base}/{suffix}" if suffix else base
        return self.url


@dataclass
class FlakeInstallable:
    """A flake reference plus attribute path, e.g. ``github:NixOS/nixpkgs/<rev>#hello``."""
    ref: FlakeRef
    attr_path: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FlakeInstallable":
        return cls(ref=FlakeRef.from_dict(data.get("ref") or {}), attr_path=data.get("attr_path") or "")

    def __str__(self) -> str:
        return f"{self.ref}#{self.attr_path}" if self.attr_path else str(self.ref)


@dataclass
class Output:
    """One build output with its verified store path."""
    name: str = ""
    path: str = ""
    default: bool = False
    nar: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Output":
        return cls(
            name=data.get("name") or "",
            path=data.get("path") or "",
            default=bool(data.get("default", False)),
            nar=data.get("nar") or "",
        )


@dataclass
class ResolvedSystem:
    """Enriched per-platform details."""
    flake_installable: Union[FlakeInstallable, str]
    last_updated: Optional[datetime] = None
    outputs: List[Output] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResolvedSystem":
        raw = data.get("flake_installable")
        installable: Union[FlakeInstallable, str]
        if isinstance(raw, dict):
            installable = FlakeInstallable.from_dict(raw)
        else:
            installable = raw or ""
        return cls(
            flake_installable=installable,
            last_updated=_parse_rfc3339(data.get("last_updated")),
            outputs=[Output.from_dict(o or {}) for o in data.get("outputs") or []],
        )


@dataclass
class ResolveResponse:
    """Enriched resolve response."""
    name: str
    version: str
    summary: str = ""
    systems: Dict[str, ResolvedSystem] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResolveResponse":
        systems = data.get("systems") or {}
        return cls(
            name=data.get("name") or "",
            version=data.get("version") or "",
            summary=data.get("summary") or "",
            systems={sys: ResolvedSystem.from_dict(info or {}) for sys, info in systems.items()},
        )
