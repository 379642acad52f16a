"""runx package support: GitHub-release backed packages outside the search index."""

from .resolver import RunXRef, RunXResolver, parse_runx_ref  # noqa: F401

__all__ = ["RunXRef", "RunXResolver", "parse_runx_ref"]
