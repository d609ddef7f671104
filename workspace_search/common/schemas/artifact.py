"""
Artifact Schema

Uniform shape for everything the search pipeline ranks: repository activity,
documents, members, and synthesized answers.

Core principle: the fields the scorer and booster read are explicit and
optional, each with a known default. Everything else lives in `metadata`.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ============================================================================
# Enums
# ============================================================================

class ArtifactKind(str, Enum):
    """Kinds of searchable artifacts"""
    REPO = "repo"
    ISSUE = "issue"
    PULL_REQUEST = "pull_request"
    COMMIT = "commit"
    RELEASE = "release"
    DOCUMENT = "document"
    MEMBER = "member"
    ANSWER = "answer"


class AnswerType(str, Enum):
    """Shape of a synthesized answer"""
    COUNT = "count"
    LATEST = "latest"
    LIST = "list"
    OVERVIEW = "overview"
    ACTIVITY = "activity"
    FILTERED_COUNT = "filtered_count"
    INFO = "info"


# Kinds that come from the code-hosting source
GITHUB_KINDS = frozenset({
    ArtifactKind.REPO,
    ArtifactKind.ISSUE,
    ArtifactKind.PULL_REQUEST,
    ArtifactKind.COMMIT,
    ArtifactKind.RELEASE,
})

ANSWER_SCORE = 1.0


# ============================================================================
# Models
# ============================================================================

class Artifact(BaseModel):
    """
    A normalized, read-only searchable record.

    relevance_score is only ever replaced through model_copy() by the
    scoring stage; instances themselves are frozen.
    """
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    kind: ArtifactKind
    title: str = Field(..., min_length=1, description="Short display string")
    description: str = Field(default="", description="Free text body")
    url: Optional[str] = None
    relevance_score: float = Field(default=0.0, ge=0.0, allow_inf_nan=False)

    # Well-known keys read by the scorer, booster and ranker
    keywords: List[str] = Field(default_factory=list, description="Lowercase semantic tags")
    state: Optional[str] = None  # "open", "closed", ...
    labels: List[str] = Field(default_factory=list)
    author: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    merged: Optional[bool] = None
    draft: Optional[bool] = None

    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("created_at", "updated_at", "published_at")
    @classmethod
    def timestamps_as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Naive timestamps are taken as UTC
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def is_answer(self) -> bool:
        return self.kind == ArtifactKind.ANSWER

    @property
    def timestamp(self) -> Optional[datetime]:
        """Publication time when known, otherwise creation time"""
        return self.published_at or self.created_at

    def with_score(self, score: float) -> "Artifact":
        """Return a copy carrying a new relevance score"""
        return self.model_copy(update={"relevance_score": score})

    def to_response(self) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys"""
        return self.model_dump(mode="json", by_alias=True)


class Answer(Artifact):
    """
    A synthesized artifact answering a recognized question.

    metadata["answerType"] always carries the AnswerType value.
    """
    kind: Literal[ArtifactKind.ANSWER] = ArtifactKind.ANSWER
    url: Optional[str] = None
    relevance_score: float = Field(default=ANSWER_SCORE, ge=0.0, allow_inf_nan=False)

    @property
    def answer_type(self) -> AnswerType:
        return AnswerType(self.metadata["answerType"])


def make_answer(
    answer_type: AnswerType,
    title: str,
    description: str,
    **data: Any,
) -> Answer:
    """Build an Answer with its answerType and render data in metadata"""
    metadata = {"answerType": answer_type.value}
    metadata.update(data)
    return Answer(title=title, description=description, metadata=metadata)
