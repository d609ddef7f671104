"""
Workspace Search Schemas

Artifacts, answers, and the search request/response shapes.
"""

from .artifact import (
    Artifact,
    ArtifactKind,
    Answer,
    AnswerType,
    GITHUB_KINDS,
    ANSWER_SCORE,
    make_answer,
)
from .search import (
    FilterType,
    InvalidQueryError,
    SearchFilter,
    SearchQuery,
    SearchResponse,
)

__all__ = [
    "Artifact",
    "ArtifactKind",
    "Answer",
    "AnswerType",
    "GITHUB_KINDS",
    "ANSWER_SCORE",
    "make_answer",
    "FilterType",
    "InvalidQueryError",
    "SearchFilter",
    "SearchQuery",
    "SearchResponse",
]
