"""
Search Pipeline

Pure, synchronous request pipeline:
1. Intent analysis (answers)
2. Relevance scoring + context boosting of every non-answer artifact
3. Ranking (merge, filter, cutoff, sort, limit)

Collection happens before this stage (see sources.collector); the pipeline
itself performs no I/O. Wall-clock time is passed in as `now`.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from ..common.schemas import Artifact, SearchQuery, SearchResponse
from ..sources.collector import SourceBundle
from .booster import ContextBooster
from .intents import IntentAnalyzer
from .normalizer import ArtifactNormalizer, parse_timestamp
from .ranker import Ranker
from .scorer import RelevanceScorer

logger = logging.getLogger("wsearch.retriever.pipeline")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SearchPipeline:
    """
    Wires normalizer, intent analyzer, scorer, booster and ranker together.

    All components are stateless; one pipeline can serve every request.
    """

    def __init__(
        self,
        normalizer: Optional[ArtifactNormalizer] = None,
        analyzer: Optional[IntentAnalyzer] = None,
        scorer: Optional[RelevanceScorer] = None,
        booster: Optional[ContextBooster] = None,
        ranker: Optional[Ranker] = None,
    ):
        self.normalizer = normalizer or ArtifactNormalizer()
        self.analyzer = analyzer or IntentAnalyzer()
        self.scorer = scorer or RelevanceScorer()
        self.booster = booster or ContextBooster(self.scorer)
        self.ranker = ranker or Ranker()

    def score_all(
        self,
        query: SearchQuery,
        artifacts: Sequence[Artifact],
        now: datetime,
    ) -> List[Artifact]:
        """Copies of every non-answer artifact carrying its combined score"""
        return [
            a.with_score(self.booster.combine(a, query.text, now))
            for a in artifacts
            if not a.is_answer
        ]

    def run(
        self,
        query: SearchQuery,
        artifacts: Sequence[Artifact],
        now: datetime,
    ) -> List[Artifact]:
        """
        Rank artifacts and answers for a validated query.

        Args:
            query: Validated query (text + filter)
            artifacts: Normalized artifacts for the workspace
            now: Reference time for recency

        Returns:
            Answers first, then artifacts by relevance; deterministic for fixed now
        """
        now = parse_timestamp(now) or utc_now()

        answers = self.analyzer.analyze(query.text, artifacts)
        scored = self.score_all(query, artifacts, now)
        ranked = self.ranker.rank(answers, scored, query.filter)

        logger.debug(
            "Query %r: %d answer(s), %d candidate(s), %d result(s)",
            query.text, len(answers), len(scored), len(ranked),
        )
        return ranked

    def search(
        self,
        query: SearchQuery,
        bundle: SourceBundle,
        now: Optional[datetime] = None,
    ) -> SearchResponse:
        """
        Normalize collected records, run the pipeline, and build the response.
        """
        artifacts = self.normalizer.normalize(bundle)
        results = self.run(query, artifacts, now or utc_now())

        return SearchResponse(
            results=results,
            total=len(results),
            query=query.text,
            filters=query.filter.model_dump(mode="json", exclude_none=True),
            sources=bundle.source_counts(),
        )
