"""Package spec parsing utilities."""

from typing import Tuple

from constants import Constants


def parse_versioned_package(spec: str) -> Tuple[str, str, bool]:
    """Split ``name@version`` on the rightmost ``@``.

    Some package names contain ``@`` themselves, so only the last one
    separates the version. A spec without ``@``, or ending in ``@``, has no
    version.

    Returns:
        Tuple of (name, version, found). When no version is found ``name``
        is the whole spec and ``version`` is empty.
    """
    spec = spec.strip()
    name, sep, version = spec.rpartition("@")
    if not sep or not version:
        return spec, "", False
    return name, version, True


def is_runx(spec: str) -> bool:
    """Return True for ``runx:`` references resolved outside the search index."""
    return spec.strip().startswith(Constants.RUNX_PREFIX)
