"""Package search service support.

- parser.py: ``name@version`` spec parsing
- models.py: legacy and enriched resolve response records
- client.py: HTTP interactions with the search service
"""

from .client import SearchClient, SearchError, SearchNotFoundError  # noqa: F401
from .parser import is_runx, parse_versioned_package  # noqa: F401

__all__ = [
    "SearchClient",
    "SearchError",
    "SearchNotFoundError",
    "is_runx",
    "parse_versioned_package",
]
