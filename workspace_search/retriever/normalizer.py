"""
Artifact Normalizer

Converts raw source records into uniform Artifacts.
Inputs are the shapes returned by the source collaborators:
GitHub REST JSON, Notion page JSON, and workspace member records.

A record missing required fields is skipped (logged at debug),
never fatal to the batch.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError

from ..common.schemas import Artifact, ArtifactKind
from ..sources.collector import SourceBundle

logger = logging.getLogger("wsearch.retriever.normalizer")


# Initial relevance prior per kind
KIND_PRIORS = {
    ArtifactKind.REPO: 0.9,
    ArtifactKind.ISSUE: 0.8,
    ArtifactKind.PULL_REQUEST: 0.8,
    ArtifactKind.COMMIT: 0.6,
    ArtifactKind.RELEASE: 0.7,
    ArtifactKind.DOCUMENT: 0.7,
    ArtifactKind.MEMBER: 0.6,
}

COMMIT_KEYWORD_WORDS = 3


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string or datetime into an aware UTC datetime"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, str):
        try:
            ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _login(user: Any) -> Optional[str]:
    if isinstance(user, dict):
        return user.get("login") or user.get("name")
    if isinstance(user, str):
        return user
    return None


def _label_names(labels: Any) -> List[str]:
    names = []
    for label in labels or []:
        name = label.get("name") if isinstance(label, dict) else label
        if isinstance(name, str) and name.strip():
            names.append(name.strip())
    return names


def _select_name(prop: Any) -> Optional[str]:
    if isinstance(prop, dict):
        select = prop.get("select") or prop.get("status")
        if isinstance(select, dict):
            return select.get("name")
    return None


def build_keywords(*groups: Iterable[Any]) -> List[str]:
    """Lowercase, de-duplicated tags in first-seen order"""
    tags = []
    for group in groups:
        for value in group:
            if value is None:
                continue
            tag = str(value).strip().lower()
            if tag and tag not in tags:
                tags.append(tag)
    return tags


class ArtifactNormalizer:
    """
    Normalizes raw collaborator records into Artifacts.

    One converter per record kind; each returns None for unusable records.
    """

    def normalize(self, bundle: SourceBundle) -> List[Artifact]:
        """
        Normalize every record in a collected bundle.

        Args:
            bundle: Raw records per source

        Returns:
            Artifacts in source order: repo, issues, pull requests, commits,
            releases, documents, members
        """
        artifacts: List[Artifact] = []

        if bundle.repository:
            artifacts.extend(self._convert_all(self.from_repository, [bundle.repository]))
        artifacts.extend(self._convert_all(self.from_issue, bundle.issues))
        artifacts.extend(self._convert_all(self.from_pull_request, bundle.pull_requests))
        artifacts.extend(self._convert_all(self.from_commit, bundle.commits))
        artifacts.extend(self._convert_all(self.from_release, bundle.releases))
        artifacts.extend(self._convert_all(self.from_document, bundle.documents))
        artifacts.extend(self._convert_all(self.from_member, bundle.members))

        return artifacts

    def _convert_all(
        self,
        converter: Callable[[Dict[str, Any]], Optional[Artifact]],
        records: Iterable[Any],
    ) -> List[Artifact]:
        converted = []
        for raw in records or []:
            if not isinstance(raw, dict):
                logger.debug("Skipping non-dict record for %s", converter.__name__)
                continue
            try:
                artifact = converter(raw)
            except (ValidationError, TypeError, ValueError, AttributeError) as e:
                logger.debug("Skipping malformed record in %s: %s", converter.__name__, e)
                continue
            if artifact is not None:
                converted.append(artifact)
        return converted

    # ------------------------------------------------------------------
    # GitHub
    # ------------------------------------------------------------------

    def from_repository(self, raw: Dict[str, Any]) -> Optional[Artifact]:
        title = (raw.get("full_name") or raw.get("name") or "").strip()
        if not title:
            return None

        language = raw.get("language")
        topics = raw.get("topics") or []

        return Artifact(
            kind=ArtifactKind.REPO,
            title=title,
            description=raw.get("description") or "",
            url=raw.get("html_url"),
            relevance_score=KIND_PRIORS[ArtifactKind.REPO],
            keywords=build_keywords(["repo", "repository", language], topics),
            author=_login(raw.get("owner")),
            created_at=parse_timestamp(raw.get("created_at")),
            updated_at=parse_timestamp(raw.get("pushed_at") or raw.get("updated_at")),
            metadata={
                "language": language,
                "stars": raw.get("stargazers_count", 0),
                "forks": raw.get("forks_count", 0),
                "openIssues": raw.get("open_issues_count", 0),
                "topics": list(topics),
                "defaultBranch": raw.get("default_branch"),
                "contributors": list(raw.get("contributors") or []),
            },
        )

    def from_issue(self, raw: Dict[str, Any]) -> Optional[Artifact]:
        # GitHub lists pull requests under /issues too
        if raw.get("pull_request"):
            return None

        title = (raw.get("title") or "").strip()
        if not title:
            return None

        state = (raw.get("state") or "").lower() or None
        labels = _label_names(raw.get("labels"))

        return Artifact(
            kind=ArtifactKind.ISSUE,
            title=title,
            description=raw.get("body") or "",
            url=raw.get("html_url"),
            relevance_score=KIND_PRIORS[ArtifactKind.ISSUE],
            keywords=build_keywords(["issue", state], labels),
            state=state,
            labels=labels,
            author=_login(raw.get("user")),
            created_at=parse_timestamp(raw.get("created_at")),
            updated_at=parse_timestamp(raw.get("updated_at")),
            metadata={
                "number": raw.get("number"),
                "comments": raw.get("comments", 0),
            },
        )

    def from_pull_request(self, raw: Dict[str, Any]) -> Optional[Artifact]:
        title = (raw.get("title") or "").strip()
        if not title:
            return None

        state = (raw.get("state") or "").lower() or None
        labels = _label_names(raw.get("labels"))
        merged = bool(raw.get("merged_at")) or bool(raw.get("merged"))
        draft = bool(raw.get("draft"))

        return Artifact(
            kind=ArtifactKind.PULL_REQUEST,
            title=title,
            description=raw.get("body") or "",
            url=raw.get("html_url"),
            relevance_score=KIND_PRIORS[ArtifactKind.PULL_REQUEST],
            keywords=build_keywords(
                ["pull request", "pr", state],
                ["merged"] if merged else [],
                ["draft"] if draft else [],
                labels,
            ),
            state=state,
            labels=labels,
            author=_login(raw.get("user")),
            created_at=parse_timestamp(raw.get("created_at")),
            updated_at=parse_timestamp(raw.get("updated_at")),
            merged=merged,
            draft=draft,
            metadata={
                "number": raw.get("number"),
                "head": (raw.get("head") or {}).get("ref"),
                "base": (raw.get("base") or {}).get("ref"),
                "mergedAt": raw.get("merged_at"),
            },
        )

    def from_commit(self, raw: Dict[str, Any]) -> Optional[Artifact]:
        commit = raw.get("commit") or {}
        message = (commit.get("message") or "").strip()
        if not message:
            return None

        first_line = message.splitlines()[0].strip()
        commit_author = commit.get("author") or {}
        author = _login(raw.get("author")) or commit_author.get("name")
        sha = raw.get("sha") or ""

        return Artifact(
            kind=ArtifactKind.COMMIT,
            title=first_line,
            description=message,
            url=raw.get("html_url"),
            relevance_score=KIND_PRIORS[ArtifactKind.COMMIT],
            keywords=build_keywords(
                ["commit"],
                first_line.split()[:COMMIT_KEYWORD_WORDS],
            ),
            author=author,
            created_at=parse_timestamp(commit_author.get("date")),
            metadata={
                "sha": sha,
                "shortSha": sha[:7],
            },
        )

    def from_release(self, raw: Dict[str, Any]) -> Optional[Artifact]:
        tag = raw.get("tag_name")
        title = (raw.get("name") or tag or "").strip()
        if not title:
            return None

        prerelease = bool(raw.get("prerelease"))

        return Artifact(
            kind=ArtifactKind.RELEASE,
            title=title,
            description=raw.get("body") or "",
            url=raw.get("html_url"),
            relevance_score=KIND_PRIORS[ArtifactKind.RELEASE],
            keywords=build_keywords(
                ["release", tag],
                ["prerelease"] if prerelease else [],
            ),
            author=_login(raw.get("author")),
            created_at=parse_timestamp(raw.get("created_at")),
            published_at=parse_timestamp(raw.get("published_at")),
            draft=bool(raw.get("draft")),
            metadata={
                "tagName": tag,
                "prerelease": prerelease,
            },
        )

    # ------------------------------------------------------------------
    # Notion
    # ------------------------------------------------------------------

    def from_document(self, raw: Dict[str, Any]) -> Optional[Artifact]:
        properties = raw.get("properties") or {}
        title = self._extract_title(properties)
        if not title:
            return None

        doc_type = _select_name(properties.get("Type")) or "Note"
        status = _select_name(properties.get("Status")) or "Draft"
        workspace = _select_name(properties.get("Workspace"))

        return Artifact(
            kind=ArtifactKind.DOCUMENT,
            title=title,
            description=f"{doc_type} - {status}",
            url=raw.get("url"),
            relevance_score=KIND_PRIORS[ArtifactKind.DOCUMENT],
            keywords=build_keywords(["document", doc_type, status]),
            state=status.lower(),
            created_at=parse_timestamp(raw.get("created_time")),
            updated_at=parse_timestamp(raw.get("last_edited_time")),
            metadata={
                "type": doc_type,
                "status": status,
                "workspace": workspace,
            },
        )

    def _extract_title(self, properties: Dict[str, Any]) -> str:
        """Title from the Title/Name property, else any title-typed property"""
        candidates = [properties.get("Title"), properties.get("Name")]
        candidates.extend(
            prop for prop in properties.values()
            if isinstance(prop, dict) and prop.get("type") == "title"
        )
        for prop in candidates:
            if not isinstance(prop, dict):
                continue
            parts = prop.get("title") or []
            text = "".join(
                p.get("plain_text", "") for p in parts if isinstance(p, dict)
            ).strip()
            if text:
                return text
        return ""

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    def from_member(self, raw: Dict[str, Any]) -> Optional[Artifact]:
        name = (raw.get("name") or "").strip()
        if not name:
            return None

        role = raw.get("role") or "member"
        email = raw.get("email") or ""

        return Artifact(
            kind=ArtifactKind.MEMBER,
            title=name,
            description=f"{role} - {email}" if email else role,
            url=None,
            relevance_score=KIND_PRIORS[ArtifactKind.MEMBER],
            keywords=build_keywords(["member", role]),
            created_at=parse_timestamp(raw.get("joinedAt") or raw.get("joined_at")),
            metadata={
                "role": role,
                "email": email,
            },
        )
