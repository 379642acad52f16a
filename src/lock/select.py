"""Pick the representative platform entry from a platform-keyed mapping."""

from __future__ import annotations

import platform
import sys
from typing import Mapping, Optional, TypeVar

from constants import Constants
from .errors import NoSystemsAvailableError

V = TypeVar("V")

_ARCH_ALIASES = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "arm64": "aarch64",
    "aarch64": "aarch64",
    "i386": "i686",
    "i686": "i686",
    "armv7l": "armv7l",
}


def current_system() -> str:
    """Return the platform id of the running machine, e.g. ``aarch64-darwin``.

    ``Constants.SYSTEM`` takes precedence when configured.
    """
    if Constants.SYSTEM:
        return Constants.SYSTEM
    machine = platform.machine().lower()
    arch = _ARCH_ALIASES.get(machine, machine)
    kernel = "darwin" if sys.platform == "darwin" else sys.platform.rstrip("0123456789")
    return f"{arch}-{kernel}"


def select_for_system(systems: Mapping[str, V], current: Optional[str] = None) -> V:
    """Return the entry for the current platform, falling back in order.

    Order: the current platform, then ``x86_64-linux``, then any remaining
    entry. The last tier has no defined tie-break and follows the mapping's
    iteration order.

    Raises:
        NoSystemsAvailableError: if ``systems`` is empty.
    """
    current = current or current_system()
    if current in systems:
        return systems[current]
    if Constants.DEFAULT_SYSTEM in systems:
        return systems[Constants.DEFAULT_SYSTEM]
    for value in systems.values():
        return value
    raise NoSystemsAvailableError()
