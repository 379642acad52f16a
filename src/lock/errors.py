"""Error taxonomy for package resolution."""

from __future__ import annotations


class ResolutionError(Exception):
    """Base class for failures that stop a package from resolving."""


class MissingVersionError(ResolutionError, ValueError):
    """Raised when a package spec carries no version."""

    def __init__(self, name: str):
        super().__init__(f"No version specified for {name!r}.")
        self.name = name


class PackageNotFoundError(ResolutionError, LookupError):
    """Raised when no package matches the requested name and version.

    The message only names the package; details of the underlying lookup
    stay on ``__cause__``.
    """

    def __init__(self, name: str, version: str):
        super().__init__(f"{name}@{version}: package not found")
        self.name = name
        self.version = version


class NoSystemsAvailableError(ResolutionError):
    """Raised when a platform-keyed mapping has no entries to choose from."""

    def __init__(self):
        super().__init__("no systems found")


class NoAttrPathsError(ResolutionError):
    """Raised when the chosen platform lists no attribute paths."""

    def __init__(self, name: str):
        super().__init__(f"no attr paths found for package {name!r}")
        self.name = name
