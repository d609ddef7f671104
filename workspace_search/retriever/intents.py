"""
Intent Analyzer

Recognizes question intents in free text and answers them directly from the
current artifact set ("how many open issues?", "latest release", ...).

Intents live in a declarative, ordered table of IntentRule records.
Every rule whose patterns match runs; rules are not mutually exclusive.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Pattern, Sequence, Tuple

from ..common.schemas import Answer, AnswerType, Artifact, ArtifactKind, make_answer

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

TOP_CONTRIBUTORS = 5
ACTIVITY_SIZE = 5
LIST_PREVIEW = 5

BUG_TOKENS = re.compile(r"\b(bug|error|fix)")
FEATURE_TOKENS = re.compile(r"\b(feature|enhancement|improvement)")


Handler = Callable[[List[Artifact]], Optional[Answer]]


@dataclass(frozen=True)
class IntentRule:
    """An intent: OR-ed regex patterns plus the handler that answers it"""
    name: str
    patterns: Tuple[str, ...]
    handler: Handler
    _compiled: Tuple[Pattern, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(
            self, "_compiled", tuple(re.compile(p, re.IGNORECASE) for p in self.patterns)
        )

    def matches(self, query: str) -> bool:
        query_lower = query.lower()
        return any(p.search(query_lower) for p in self._compiled)


# ============================================================================
# Helpers
# ============================================================================

def _of_kind(artifacts: Sequence[Artifact], kind: ArtifactKind) -> List[Artifact]:
    return [a for a in artifacts if a.kind == kind]


def _first_repo(artifacts: Sequence[Artifact]) -> Optional[Artifact]:
    repos = _of_kind(artifacts, ArtifactKind.REPO)
    return repos[0] if repos else None


def _iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if ts else None


def _date(ts: Optional[datetime]) -> str:
    return ts.strftime("%Y-%m-%d") if ts else "an unknown date"


def _plural(count: int, singular: str, plural: Optional[str] = None) -> str:
    return singular if count == 1 else (plural or singular + "s")


def summarize(artifact: Artifact) -> Dict[str, Any]:
    """Compact reference to an artifact for answer metadata"""
    return {
        "kind": artifact.kind.value,
        "title": artifact.title,
        "url": artifact.url,
        "author": artifact.author,
        "state": artifact.state,
        "createdAt": _iso(artifact.created_at),
        "updatedAt": _iso(artifact.updated_at),
        "publishedAt": _iso(artifact.published_at),
    }


def _matches_tokens(issue: Artifact, tokens: Pattern) -> bool:
    if tokens.search(issue.title.lower()):
        return True
    return any(tokens.search(label.lower()) for label in issue.labels)


# ============================================================================
# Handlers
# ============================================================================

def _issue_state_count(artifacts: List[Artifact], state: str) -> Optional[Answer]:
    issues = _of_kind(artifacts, ArtifactKind.ISSUE)
    if not issues:
        return None

    matching = [i for i in issues if i.state == state]
    count = len(matching)
    verb = "is" if count == 1 else "are"
    return make_answer(
        AnswerType.COUNT,
        title=f"{state.capitalize()} issues",
        description=f"There {verb} {count} {state} {_plural(count, 'issue')}.",
        count=count,
        state=state,
        total=len(issues),
        items=[summarize(i) for i in matching[:LIST_PREVIEW]],
    )


def open_issue_count(artifacts: List[Artifact]) -> Optional[Answer]:
    return _issue_state_count(artifacts, "open")


def closed_issue_count(artifacts: List[Artifact]) -> Optional[Answer]:
    return _issue_state_count(artifacts, "closed")


def contributors_list(artifacts: List[Artifact]) -> Optional[Answer]:
    """Top contributors from repository metadata (empty list when unknown)"""
    repo = _first_repo(artifacts)
    if repo is None:
        return None

    raw = repo.metadata.get("contributors") or []
    entries = []
    for item in raw:
        if isinstance(item, dict):
            login = item.get("login") or item.get("name")
            entries.append((login, item.get("contributions", 0) or 0))
        elif isinstance(item, str):
            entries.append((item, 0))

    # Stable: keeps provider order among equal contribution counts
    entries.sort(key=lambda e: e[1], reverse=True)
    contributors: List[str] = []
    for login, _ in entries:
        if login and login not in contributors:
            contributors.append(login)
    contributors = contributors[:TOP_CONTRIBUTORS]

    if contributors:
        description = f"Top contributors to {repo.title}: {', '.join(contributors)}."
    else:
        description = f"No contributor information is available for {repo.title}."

    return make_answer(
        AnswerType.LIST,
        title="Contributors",
        description=description,
        contributors=contributors,
        count=len(contributors),
        repository=repo.title,
    )


def primary_language(artifacts: List[Artifact]) -> Optional[Answer]:
    repo = _first_repo(artifacts)
    if repo is None:
        return None

    language = repo.metadata.get("language")
    if not language:
        return None

    return make_answer(
        AnswerType.INFO,
        title="Primary language",
        description=f"{repo.title} is primarily written in {language}.",
        language=language,
        topics=list(repo.metadata.get("topics") or []),
        repository=repo.title,
    )


def latest_commit(artifacts: List[Artifact]) -> Optional[Answer]:
    commits = [c for c in _of_kind(artifacts, ArtifactKind.COMMIT) if c.created_at]
    if not commits:
        return None

    # max() keeps the first of equal timestamps
    commit = max(commits, key=lambda c: c.created_at)
    by = f" by {commit.author}" if commit.author else ""
    return make_answer(
        AnswerType.LATEST,
        title="Latest commit",
        description=f'The latest commit is "{commit.title}"{by} on {_date(commit.created_at)}.',
        item=summarize(commit),
        sha=commit.metadata.get("sha"),
    )


def latest_release(artifacts: List[Artifact]) -> Optional[Answer]:
    releases = [r for r in _of_kind(artifacts, ArtifactKind.RELEASE) if r.timestamp]
    if not releases:
        return None

    # Drafts only count when nothing has been published
    published = [r for r in releases if not r.draft]
    if published:
        releases = published

    release = max(releases, key=lambda r: r.timestamp)
    tag = release.metadata.get("tagName")
    name = release.title if not tag or tag == release.title else f"{release.title} ({tag})"
    return make_answer(
        AnswerType.LATEST,
        title="Latest release",
        description=f"The latest release is {name}, published on {_date(release.timestamp)}.",
        item=summarize(release),
        tagName=tag,
    )


def pull_request_counts(artifacts: List[Artifact]) -> Optional[Answer]:
    prs = _of_kind(artifacts, ArtifactKind.PULL_REQUEST)
    if not prs:
        return None

    open_prs = [p for p in prs if p.state == "open"]
    merged = sum(1 for p in prs if p.merged)
    total = len(prs)
    return make_answer(
        AnswerType.COUNT,
        title="Pull requests",
        description=(
            f"There {'is' if len(open_prs) == 1 else 'are'} {len(open_prs)} open "
            f"{_plural(len(open_prs), 'pull request')} out of {total} total."
        ),
        count=len(open_prs),
        open=len(open_prs),
        merged=merged,
        total=total,
        items=[summarize(p) for p in open_prs[:LIST_PREVIEW]],
    )


def repository_overview(artifacts: List[Artifact]) -> Optional[Answer]:
    repo = _first_repo(artifacts)
    if repo is None:
        return None

    stats = {
        "stars": repo.metadata.get("stars", 0),
        "forks": repo.metadata.get("forks", 0),
        "issues": len(_of_kind(artifacts, ArtifactKind.ISSUE)),
        "pullRequests": len(_of_kind(artifacts, ArtifactKind.PULL_REQUEST)),
        "commits": len(_of_kind(artifacts, ArtifactKind.COMMIT)),
        "language": repo.metadata.get("language"),
    }
    language = f", written mostly in {stats['language']}" if stats["language"] else ""
    description = (
        f"{repo.title} has {stats['stars']} {_plural(stats['stars'], 'star')} and "
        f"{stats['forks']} {_plural(stats['forks'], 'fork')}{language}. "
        f"Recent data: {stats['issues']} {_plural(stats['issues'], 'issue')}, "
        f"{stats['pullRequests']} {_plural(stats['pullRequests'], 'pull request')}, "
        f"{stats['commits']} {_plural(stats['commits'], 'commit')}."
    )
    return make_answer(
        AnswerType.OVERVIEW,
        title=f"Repository overview: {repo.title}",
        description=description,
        repository=repo.title,
        **stats,
    )


def recent_activity(artifacts: List[Artifact]) -> Optional[Answer]:
    dated = [
        a for a in artifacts
        if not a.is_answer and (a.updated_at or a.created_at)
    ]
    if not dated:
        return None

    dated.sort(
        key=lambda a: (a.updated_at or EPOCH, a.created_at or EPOCH),
        reverse=True,
    )
    top = dated[:ACTIVITY_SIZE]
    lines = [f"{a.kind.value.replace('_', ' ')}: {a.title}" for a in top]
    return make_answer(
        AnswerType.ACTIVITY,
        title="Recent activity",
        description="Most recent activity: " + "; ".join(lines) + ".",
        count=len(top),
        items=[summarize(a) for a in top],
    )


def _labeled_issues(
    artifacts: List[Artifact],
    tokens: Pattern,
    title: str,
    noun: str,
) -> Optional[Answer]:
    issues = _of_kind(artifacts, ArtifactKind.ISSUE)
    if not issues:
        return None

    matching = [i for i in issues if _matches_tokens(i, tokens)]
    count = len(matching)
    open_count = sum(1 for i in matching if i.state == "open")
    return make_answer(
        AnswerType.FILTERED_COUNT,
        title=title,
        description=(
            f"Found {count} {_plural(count, 'issue')} that look like {noun} "
            f"({open_count} open)."
        ),
        count=count,
        open=open_count,
        items=[summarize(i) for i in matching[:LIST_PREVIEW]],
    )


def bug_reports(artifacts: List[Artifact]) -> Optional[Answer]:
    return _labeled_issues(artifacts, BUG_TOKENS, "Bug reports", "bug reports")


def feature_requests(artifacts: List[Artifact]) -> Optional[Answer]:
    return _labeled_issues(artifacts, FEATURE_TOKENS, "Feature requests", "feature requests")


# ============================================================================
# Intent table (evaluated in order)
# ============================================================================

INTENT_RULES: Tuple[IntentRule, ...] = (
    IntentRule(
        name="open_issue_count",
        patterns=(
            r"how many open issues",
            r"(number|count) of open issues",
            r"open issues? count",
        ),
        handler=open_issue_count,
    ),
    IntentRule(
        name="closed_issue_count",
        patterns=(
            r"how many closed issues",
            r"(number|count) of closed issues",
            r"closed issues? count",
        ),
        handler=closed_issue_count,
    ),
    IntentRule(
        name="contributors",
        patterns=(
            r"who (are|is) the (main |top )?contributors?",
            r"\b(top|main) contributors?",
            r"who (works|worked|contributes|contributed) on",
        ),
        handler=contributors_list,
    ),
    IntentRule(
        name="primary_language",
        patterns=(
            r"what (programming )?languages?",
            r"(primary|main) language",
            r"tech(nology)? stack",
        ),
        handler=primary_language,
    ),
    IntentRule(
        name="latest_commit",
        patterns=(
            r"\b(latest|recent|last|newest) commits?\b",
        ),
        handler=latest_commit,
    ),
    IntentRule(
        name="latest_release",
        patterns=(
            r"\b(latest|recent|last|newest) (release|version)s?\b",
            r"current (release|version)",
        ),
        handler=latest_release,
    ),
    IntentRule(
        name="pull_request_counts",
        patterns=(
            r"how many (pull requests|prs)\b",
            r"(number|count) of (pull requests|prs)\b",
            r"\bopen (pull requests|prs)\b",
        ),
        handler=pull_request_counts,
    ),
    IntentRule(
        name="repository_overview",
        patterns=(
            r"(repo|repository|project) (stats|statistics|overview|summary)",
            r"(overview|summary) of the (repo|repository|project)",
        ),
        handler=repository_overview,
    ),
    IntentRule(
        name="recent_activity",
        patterns=(
            r"recent activity",
            r"what'?s (been )?happening",
            r"what'?s going on",
        ),
        handler=recent_activity,
    ),
    IntentRule(
        name="bug_reports",
        patterns=(
            r"\bbugs?\b",
            r"error reports?",
            r"\bproblems?\b",
        ),
        handler=bug_reports,
    ),
    IntentRule(
        name="feature_requests",
        patterns=(
            r"feature requests?",
            r"\benhancements?\b",
            r"\bimprovements?\b",
        ),
        handler=feature_requests,
    ),
)


class IntentAnalyzer:
    """
    Evaluates a query against the ordered intent table.

    Handlers receive the full artifact set and return an Answer or None.
    """

    def __init__(self, rules: Sequence[IntentRule] = INTENT_RULES):
        self._rules = tuple(rules)

    @property
    def rules(self) -> Tuple[IntentRule, ...]:
        return self._rules

    def matching_rules(self, query: str) -> List[IntentRule]:
        """Rules whose patterns match the query, in table order"""
        return [rule for rule in self._rules if rule.matches(query)]

    def analyze(self, query: str, artifacts: Sequence[Artifact]) -> List[Answer]:
        """
        Produce every applicable answer for a query.

        Args:
            query: Raw query text (matched lowercased)
            artifacts: Current normalized artifact set

        Returns:
            Answers in table order; empty if no intent matched or no data
        """
        pool = [a for a in artifacts if not a.is_answer]
        answers = []
        for rule in self.matching_rules(query):
            answer = rule.handler(pool)
            if answer is not None:
                answers.append(answer)
        return answers
