"""Resolver for ``runx:owner/repo@version`` packages.

runx packages are prebuilt binaries published as GitHub releases. They are
not in the search index; the release tag is the resolved version.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import quote

from constants import Constants
from common.http_client import get_json
from lock.errors import PackageNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunXRef:
    """A runx package reference."""
    owner: str
    repo: str
    version: str = "latest"

    @property
    def name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return f"{Constants.RUNX_PREFIX}{self.owner}/{self.repo}@{self.version}"


def parse_runx_ref(spec: str) -> RunXRef:
    """Parse ``runx:owner/repo[@version]``.

    Raises:
        ValueError: if the reference is not ``owner/repo`` shaped.
    """
    body = spec.strip()
    if body.startswith(Constants.RUNX_PREFIX):
        body = body[len(Constants.RUNX_PREFIX):]
    name, sep, version = body.rpartition("@")
    if not sep:
        name, version = body, ""
    owner, slash, repo = name.partition("/")
    if not slash or not owner or not repo or "/" in repo:
        raise ValueError(f"invalid runx package reference: {spec!r}")
    return RunXRef(owner=owner, repo=repo, version=version or "latest")


class RunXResolver:
    """Resolves runx references against GitHub releases.

    Supports optional authentication via GITHUB_TOKEN environment variable.
    """

    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None):
        """Initialize the resolver.

        Args:
            base_url: Base URL for GitHub API (defaults to Constants.GITHUB_API_BASE)
            token: GitHub token (defaults to GITHUB_TOKEN env var)
        """
        self.base_url = (base_url or Constants.GITHUB_API_BASE).rstrip("/")
        self.token = token or os.environ.get(Constants.ENV_GITHUB_TOKEN)

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers including authorization if token is available."""
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def resolve(self, spec: str) -> RunXRef:
        """Resolve ``spec`` to a reference with a concrete release tag.

        ``latest`` resolves to the newest published release; any other
        version must name an existing release tag.

        Raises:
            ValueError: malformed reference.
            PackageNotFoundError: the repository or release does not exist.
            RuntimeError: GitHub answered with an unexpected status.
        """
        ref = parse_runx_ref(spec)
        repo_path = f"{quote(ref.owner, safe='')}/{quote(ref.repo, safe='')}"
        if ref.version == "latest":
            url = f"{self.base_url}/repos/{repo_path}/releases/latest"
        else:
            url = f"{self.base_url}/repos/{repo_path}/releases/tags/{quote(ref.version, safe='')}"

        status, _, data = get_json(url, context="runx", headers=self._get_headers())
        if status == 404:
            raise PackageNotFoundError(f"{Constants.RUNX_PREFIX}{ref.name}", ref.version)
        if status != 200 or not isinstance(data, dict) or not data.get("tag_name"):
            raise RuntimeError(f"GitHub returned HTTP {status} for {ref.name} releases")

        resolved = RunXRef(owner=ref.owner, repo=ref.repo, version=data["tag_name"])
        logger.debug("Resolved %s to %s", spec, resolved)
        return resolved
