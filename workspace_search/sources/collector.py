"""
Source Collector

Gathers raw records from every source of a workspace concurrently and hands
them to the (synchronous) search pipeline as a SourceBundle.

A failing source contributes nothing: the failure is logged and recorded in
bundle.failures, and collection continues with the other sources.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, Optional

from ..workspaces import Workspace
from .github import GitHubProvider
from .members import member_records
from .notion import NotionProvider

logger = logging.getLogger("wsearch.sources.collector")


@dataclass
class SourceBundle:
    """Raw records per source, as fetched"""
    repository: Optional[Dict[str, Any]] = None
    issues: List[Dict[str, Any]] = field(default_factory=list)
    pull_requests: List[Dict[str, Any]] = field(default_factory=list)
    commits: List[Dict[str, Any]] = field(default_factory=list)
    releases: List[Dict[str, Any]] = field(default_factory=list)
    documents: List[Dict[str, Any]] = field(default_factory=list)
    members: List[Dict[str, Any]] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def github_count(self) -> int:
        # /issues also lists pull requests; those are counted once, from /pulls
        issues = [
            i for i in self.issues
            if not (isinstance(i, dict) and i.get("pull_request"))
        ]
        return (
            (1 if self.repository else 0)
            + len(issues)
            + len(self.pull_requests)
            + len(self.commits)
            + len(self.releases)
        )

    def source_counts(self) -> Dict[str, int]:
        """Records contributed per collaborator"""
        return {
            "github": self.github_count,
            "notion": len(self.documents),
            "members": len(self.members),
        }


class SourceCollector:
    """
    Runs all collaborator fetches for a workspace in parallel.

    Either provider may be None (source not configured).
    """

    def __init__(
        self,
        github: Optional[GitHubProvider] = None,
        notion: Optional[NotionProvider] = None,
    ):
        self._github = github
        self._notion = notion

    def _fetches(self, workspace: Workspace) -> Dict[str, Awaitable[Any]]:
        fetches: Dict[str, Awaitable[Any]] = {}

        repo_ref = workspace.github_repository
        if self._github is not None and repo_ref is not None:
            owner, repo = repo_ref.owner, repo_ref.repo
            fetches["repository"] = self._github.get_repository(owner, repo)
            fetches["issues"] = self._github.list_issues(owner, repo)
            fetches["pull_requests"] = self._github.list_pull_requests(owner, repo)
            fetches["commits"] = self._github.list_commits(owner, repo)
            fetches["releases"] = self._github.list_releases(owner, repo)
            fetches["contributors"] = self._github.list_contributors(owner, repo)

        if self._notion is not None and self._notion.is_configured:
            fetches["documents"] = self._notion.list_documents(workspace.name)

        return fetches

    async def collect(self, workspace: Workspace) -> SourceBundle:
        """
        Collect raw records for a workspace.

        Args:
            workspace: Authorized workspace

        Returns:
            SourceBundle; never raises for collaborator failures
        """
        bundle = SourceBundle(members=member_records(workspace))

        fetches = self._fetches(workspace)
        if not fetches:
            return bundle

        results = await asyncio.gather(*fetches.values(), return_exceptions=True)

        contributors: List[Any] = []
        for name, result in zip(fetches.keys(), results):
            if isinstance(result, Exception):
                logger.warning(
                    "Source %s unavailable for workspace %s: %s",
                    name, workspace.id, result,
                )
                bundle.failures.append(name)
                continue
            if isinstance(result, BaseException):
                raise result

            if name == "contributors":
                contributors = result or []
            else:
                setattr(bundle, name, result)

        if bundle.repository is not None:
            bundle.repository = dict(
                bundle.repository,
                contributors=[c for c in contributors if isinstance(c, (dict, str))],
            )

        return bundle
