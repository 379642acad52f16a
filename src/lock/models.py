"""Resolved package records handed to the lock file writer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Render a datetime as RFC 3339, using ``Z`` for UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


@dataclass(frozen=True)
class SystemInfo:
    """Per-platform resolution result."""
    store_path: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        """Serialize, omitting an unverified store path."""
        return {"store_path": self.store_path} if self.store_path else {}


@dataclass(frozen=True)
class ResolvedPackage:
    """Canonical, platform-qualified reference for one package version.

    ``systems`` is stored as a read-only mapping so a returned record can be
    shared without copying.
    """
    version: str
    resolved: str
    last_modified: Optional[datetime] = None
    source: Optional[str] = None
    systems: Mapping[str, SystemInfo] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "systems", MappingProxyType(dict(self.systems)))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted lock record shape.

        Empty optional fields are left out entirely.
        """
        data: Dict[str, Any] = {}
        last_modified = format_timestamp(self.last_modified)
        if last_modified:
            data["last_modified"] = last_modified
        data["resolved"] = self.resolved
        if self.source:
            data["source"] = self.source
        data["version"] = self.version
        if self.systems:
            data["systems"] = {
                system: info.to_dict() for system, info in sorted(self.systems.items())
            }
        return data
