"""
GitHub Provider

Fetches repository activity from the GitHub REST API:
repository details, issues, pull requests, commits, releases, contributors.
Returns GitHub's raw JSON records; normalization happens in the retriever.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .base import BaseProvider, SourceError

logger = logging.getLogger("wsearch.sources.github")

GITHUB_API_URL = "https://api.github.com"


class GitHubProvider(BaseProvider):
    """
    Async GitHub REST client scoped to what search needs.

    Every method raises SourceError on failure; the collector decides
    how to degrade.
    """

    def __init__(
        self,
        token: str = "",
        api_url: str = GITHUB_API_URL,
        per_page: int = 10,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize GitHub provider.

        Args:
            token: Personal access token (unauthenticated when empty)
            api_url: API root, overridable for GitHub Enterprise
            per_page: Records per list call
            timeout: Request timeout in seconds
            client: Optional pre-built async client
        """
        headers = {"Accept": "application/vnd.github.v3+json"}
        if token:
            headers["Authorization"] = f"token {token}"
        super().__init__("github", api_url, headers=headers, timeout=timeout, client=client)
        self._token = token
        self._per_page = per_page

    @property
    def is_configured(self) -> bool:
        # Public repositories work without a token
        return True

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    async def _list(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        merged = {"per_page": self._per_page}
        merged.update(params or {})
        data = await self._request("GET", path, params=merged)
        if not isinstance(data, list):
            raise SourceError(self.source_name, f"GET {path} did not return a list")
        return data

    async def get_repository(self, owner: str, repo: str) -> Dict[str, Any]:
        data = await self._request("GET", f"/repos/{owner}/{repo}")
        if not isinstance(data, dict):
            raise SourceError(self.source_name, f"Unexpected repository payload for {owner}/{repo}")
        return data

    async def list_issues(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        """Issues in any state, most recently updated first (includes PRs; see normalizer)"""
        return await self._list(
            f"/repos/{owner}/{repo}/issues",
            {"state": "all", "sort": "updated", "direction": "desc"},
        )

    async def list_pull_requests(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        return await self._list(
            f"/repos/{owner}/{repo}/pulls",
            {"state": "all", "sort": "updated", "direction": "desc"},
        )

    async def list_commits(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        return await self._list(f"/repos/{owner}/{repo}/commits")

    async def list_releases(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        return await self._list(f"/repos/{owner}/{repo}/releases")

    async def list_contributors(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        """Contributors sorted by contribution count (GitHub's order)"""
        return await self._list(f"/repos/{owner}/{repo}/contributors")
