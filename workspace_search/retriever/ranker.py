"""
Ranker

Merges answers with scored artifacts and produces the final ordering:
answers first, type filter, minimum relevance cutoff, score ordering with
recency tie-breaks, and the result limit.
"""

from functools import cmp_to_key
from typing import List, Sequence

from ..common.schemas import Artifact, SearchFilter
from .intents import EPOCH

MIN_RELEVANCE = 0.1
TIE_WINDOW = 0.2
# Float slack so that differences like 0.9 - 0.7 still count as within the window
_EPSILON = 1e-9


def _recency_key(artifact: Artifact) -> float:
    return (artifact.timestamp or EPOCH).timestamp()


class Ranker:
    """Deterministic merge/filter/sort of answers and scored artifacts"""

    def __init__(self, min_relevance: float = MIN_RELEVANCE, tie_window: float = TIE_WINDOW):
        self.min_relevance = min_relevance
        self.tie_window = tie_window

    def _compare(self, a: Artifact, b: Artifact) -> int:
        """Score descending; scores within the tie window fall back to newest first"""
        diff = a.relevance_score - b.relevance_score
        if abs(diff) <= self.tie_window + _EPSILON:
            ra, rb = _recency_key(a), _recency_key(b)
            if ra != rb:
                return -1 if ra > rb else 1
        if diff > 0:
            return -1
        if diff < 0:
            return 1
        return 0

    def _order(self, items: List[Artifact]) -> List[Artifact]:
        # sorted() is stable: equal items keep input order
        return sorted(items, key=cmp_to_key(self._compare))

    def rank(
        self,
        answers: Sequence[Artifact],
        scored: Sequence[Artifact],
        search_filter: SearchFilter,
    ) -> List[Artifact]:
        """
        Produce the final ranked list.

        Args:
            answers: Synthesized answers (always kept, always first)
            scored: Non-answer artifacts carrying their combined score
            search_filter: Type restriction and limit

        Returns:
            New list; inputs are not modified
        """
        kept = [
            a for a in scored
            if not a.is_answer
            and search_filter.type.accepts(a.kind)
            and a.relevance_score > self.min_relevance
        ]

        ranked = self._order(list(answers)) + self._order(kept)

        if search_filter.limit:
            ranked = ranked[:search_filter.limit]
        return ranked
