"""
Context Booster

Additive score adjustments from query/artifact alignment:
- kind mentioned in the query and matching the artifact: +0.5
- state word mentioned and matching the artifact state: +0.3
- recency word mentioned and artifact younger than 30/90 days: +0.4/+0.2

The boost itself is not clamped; the combined score is clamped to 3.0.
"""

import re
from datetime import datetime, timedelta
from typing import Optional, Set, Tuple

from ..common.schemas import Artifact, ArtifactKind
from .scorer import RelevanceScorer

MAX_COMBINED_SCORE = 3.0

KIND_BOOST = 0.5
STATE_BOOST = 0.3
RECENT_BOOST = 0.4
SOMEWHAT_RECENT_BOOST = 0.2

RECENT_WINDOW = timedelta(days=30)
SOMEWHAT_RECENT_WINDOW = timedelta(days=90)

KIND_MENTIONS: Tuple[Tuple[re.Pattern, ArtifactKind], ...] = (
    (re.compile(r"\bissues?\b"), ArtifactKind.ISSUE),
    (re.compile(r"\bpull requests?\b|\bprs?\b"), ArtifactKind.PULL_REQUEST),
    (re.compile(r"\bcommits?\b"), ArtifactKind.COMMIT),
    (re.compile(r"\breleases?\b"), ArtifactKind.RELEASE),
    (re.compile(r"\brepos?\b|\brepository\b|\brepositories\b"), ArtifactKind.REPO),
    (re.compile(r"\bdocs?\b|\bdocuments?\b|\bpages?\b"), ArtifactKind.DOCUMENT),
    (re.compile(r"\bmembers?\b|\bteam\b"), ArtifactKind.MEMBER),
)

STATE_WORDS = re.compile(r"\b(open|closed|merged)\b")
RECENCY_WORDS = re.compile(r"\b(recent|latest|new)\b")


class ContextBooster:
    """
    Contextual boosts on top of the scorer's output.

    `now` is always passed in so results are reproducible.
    """

    def __init__(self, scorer: Optional[RelevanceScorer] = None):
        self._scorer = scorer or RelevanceScorer()

    def mentioned_kinds(self, query: str) -> Set[ArtifactKind]:
        query_lower = query.lower()
        return {kind for pattern, kind in KIND_MENTIONS if pattern.search(query_lower)}

    def kind_boost(self, artifact: Artifact, query: str) -> float:
        return KIND_BOOST if artifact.kind in self.mentioned_kinds(query) else 0.0

    def state_boost(self, artifact: Artifact, query: str) -> float:
        """Requires artifact.state or artifact.merged; absent means no boost"""
        words = set(STATE_WORDS.findall(query.lower()))
        if not words:
            return 0.0

        state = (artifact.state or "").lower()
        if state in words:
            return STATE_BOOST
        if "merged" in words and artifact.merged:
            return STATE_BOOST
        return 0.0

    def recency_boost(self, artifact: Artifact, query: str, now: datetime) -> float:
        """Requires published_at or created_at; absent means no boost"""
        if not RECENCY_WORDS.search(query.lower()):
            return 0.0

        timestamp = artifact.timestamp
        if timestamp is None:
            return 0.0

        age = now - timestamp
        if age < RECENT_WINDOW:
            return RECENT_BOOST
        if age < SOMEWHAT_RECENT_WINDOW:
            return SOMEWHAT_RECENT_BOOST
        return 0.0

    def boost(self, artifact: Artifact, query: str, now: datetime) -> float:
        """
        Total additive boost for an artifact.

        Args:
            artifact: Artifact to boost
            query: Raw query text
            now: Reference time (aware UTC)

        Returns:
            Sum of kind, state and recency boosts (unclamped)
        """
        return (
            self.kind_boost(artifact, query)
            + self.state_boost(artifact, query)
            + self.recency_boost(artifact, query, now)
        )

    def combine(self, artifact: Artifact, query: str, now: datetime) -> float:
        """Scorer output plus boosts, clamped to [0, 3.0]"""
        base = self._scorer.score(artifact, query)
        return max(0.0, min(base + self.boost(artifact, query, now), MAX_COMBINED_SCORE))
