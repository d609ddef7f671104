"""
Retriever - Workspace Search Core

Scores and ranks workspace artifacts and answers recognized questions.

Key Components:
- ArtifactNormalizer: Raw source records -> Artifacts
- IntentAnalyzer: Question patterns -> direct Answers
- RelevanceScorer: Lexical and keyword-tag match
- ContextBooster: Kind/state/recency boosts
- Ranker: Merge, filter, cutoff, order, limit

Pipeline:
1. Normalize collected records
2. Answer recognized intents
3. Score + boost each artifact
4. Rank answers first, then artifacts
"""

from .normalizer import ArtifactNormalizer
from .intents import IntentAnalyzer, IntentRule, INTENT_RULES
from .scorer import RelevanceScorer
from .booster import ContextBooster
from .ranker import Ranker
from .suggestions import get_suggestions
from .pipeline import SearchPipeline
from ..common.schemas import SearchQuery, InvalidQueryError

__all__ = [
    "ArtifactNormalizer",
    "IntentAnalyzer",
    "IntentRule",
    "INTENT_RULES",
    "RelevanceScorer",
    "ContextBooster",
    "Ranker",
    "get_suggestions",
    "SearchPipeline",
    "SearchQuery",
    "InvalidQueryError",
]
