"""
Relevance Scorer

Lexical and keyword-tag match of a query against an artifact.

Per field (title, description):
    +1.0  full query found as a substring
    +0.3  per query token (len > 2) found as a substring
    +0.4  per (token, keyword tag) pair where either contains the other
    clamp to 1.0

Artifact score = max(title, 0.8 * description) + semantic pattern bonuses,
clamped to 1.0.
"""

import re
from typing import List, Tuple

from ..common.schemas import Artifact

MAX_FIELD_SCORE = 1.0
MAX_SCORE = 1.0

EXACT_MATCH = 1.0
TOKEN_MATCH = 0.3
KEYWORD_MATCH = 0.4
DESCRIPTION_WEIGHT = 0.8
MIN_TOKEN_LENGTH = 3


# Query-level bonuses: (pattern, bonus). Each matching pattern adds once.
SEMANTIC_PATTERNS: Tuple[Tuple[re.Pattern, float], ...] = (
    (re.compile(r"(open|current|active)\s+(issue|bug|problem)s?"), 0.9),
    (re.compile(r"(recent|latest|new)\s+(commit|change|update)s?"), 0.9),
    (re.compile(r"(open|merged|closed|recent)\s+(pull request|pr|merge request)s?"), 0.9),
    (re.compile(r"(latest|new|current)\s+(release|version)s?"), 0.8),
    (re.compile(r"(team|project)\s+(member|contributor)s?"), 0.8),
    (re.compile(r"(meeting|project|design)\s+(note|doc|document)s?"), 0.8),
)


def tokenize(query: str) -> List[str]:
    """Lowercased whitespace tokens long enough to be meaningful"""
    return [t for t in query.lower().split() if len(t) >= MIN_TOKEN_LENGTH]


class RelevanceScorer:
    """
    Computes a [0, 1.0] relevance score for an artifact against a query.

    Pure: no state between calls.
    """

    def score_field(self, text: str, query: str, keywords: List[str]) -> float:
        """
        Score one field.

        Args:
            text: Field text (title or description)
            query: Raw query text
            keywords: Artifact keyword tags

        Returns:
            Field score clamped to 1.0
        """
        text_lower = (text or "").lower()
        query_lower = query.lower().strip()
        tokens = tokenize(query_lower)

        score = 0.0

        if query_lower and query_lower in text_lower:
            score += EXACT_MATCH

        for token in tokens:
            if token in text_lower:
                score += TOKEN_MATCH

        for token in tokens:
            for tag in keywords:
                if token in tag or tag in token:
                    score += KEYWORD_MATCH

        return min(score, MAX_FIELD_SCORE)

    def pattern_bonus(self, query: str) -> float:
        """Sum of fixed bonuses for semantic patterns matching the query"""
        query_lower = query.lower()
        return sum(bonus for pattern, bonus in SEMANTIC_PATTERNS if pattern.search(query_lower))

    def score(self, artifact: Artifact, query: str) -> float:
        """
        Score an artifact against a query.

        Returns:
            Relevance in [0, 1.0]
        """
        keywords = [k.lower() for k in artifact.keywords if k]
        title_score = self.score_field(artifact.title, query, keywords)
        description_score = self.score_field(artifact.description, query, keywords)

        combined = max(title_score, description_score * DESCRIPTION_WEIGHT)
        combined += self.pattern_bonus(query)

        return max(0.0, min(combined, MAX_SCORE))
