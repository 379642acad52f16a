"""Binary cache access.

- resolver.py: StoreResolver interface and the narinfo-over-HTTP implementation
"""

from .resolver import (  # noqa: F401
    NarinfoStoreResolver,
    StorePathError,
    StorePathNotFoundError,
    StoreResolver,
    parse_narinfo,
)

__all__ = [
    "NarinfoStoreResolver",
    "StorePathError",
    "StorePathNotFoundError",
    "StoreResolver",
    "parse_narinfo",
]
