"""
Search request/response schemas
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .artifact import Artifact, ArtifactKind, GITHUB_KINDS


class InvalidQueryError(ValueError):
    """Client input error: empty query or invalid filter."""
    pass


class FilterType(str, Enum):
    """Result type restriction"""
    ALL = "all"
    GITHUB = "github"
    DOCUMENTS = "documents"
    MEMBERS = "members"

    @classmethod
    def _missing_(cls, value):
        aliases = {
            "github-like": cls.GITHUB,
            "notion": cls.DOCUMENTS,
            "docs": cls.DOCUMENTS,
        }
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        for member in cls:
            if member.value == key:
                return member
        return aliases.get(key)

    def accepts(self, kind: ArtifactKind) -> bool:
        """Check if a non-answer artifact kind belongs to this filter group"""
        if self == FilterType.ALL:
            return True
        if self == FilterType.GITHUB:
            return kind in GITHUB_KINDS
        if self == FilterType.DOCUMENTS:
            return kind == ArtifactKind.DOCUMENT
        return kind == ArtifactKind.MEMBER


class SearchFilter(BaseModel):
    """Type restriction and result limit"""
    model_config = ConfigDict(frozen=True)

    type: FilterType = FilterType.ALL
    limit: Optional[int] = Field(default=None, gt=0)


class SearchQuery(BaseModel):
    """A validated query: trimmed, non-empty text plus a filter"""
    model_config = ConfigDict(frozen=True)

    text: str = Field(..., min_length=1)
    filter: SearchFilter = Field(default_factory=SearchFilter)

    @property
    def lowered(self) -> str:
        return self.text.lower()

    @classmethod
    def from_request(
        cls,
        query: Optional[str],
        filters: Optional[Mapping[str, Any]] = None,
    ) -> "SearchQuery":
        """
        Validate raw client input.

        Raises:
            InvalidQueryError: empty/whitespace query, unknown filter type,
                or a limit that is not a positive integer
        """
        if not isinstance(query, str) or not query.strip():
            raise InvalidQueryError("Search query is required")

        filters = dict(filters or {})
        try:
            filter_type = FilterType(filters.get("type") or FilterType.ALL)
        except ValueError as e:
            raise InvalidQueryError(f"Unknown filter type: {filters.get('type')!r}") from e

        limit = filters.get("limit")
        if isinstance(limit, bool):
            raise InvalidQueryError("Limit must be a positive integer")
        try:
            search_filter = SearchFilter(type=filter_type, limit=limit)
        except ValidationError as e:
            raise InvalidQueryError(f"Invalid search filters: {e.errors()[0]['msg']}") from e

        return cls(text=query.strip(), filter=search_filter)


class SearchResponse(BaseModel):
    """Ranked results plus request echo and per-source counts"""
    results: List[Artifact] = Field(default_factory=list)
    total: int = 0
    query: str
    filters: Dict[str, Any] = Field(default_factory=dict)
    sources: Dict[str, int] = Field(default_factory=dict)

    def to_response(self) -> Dict[str, Any]:
        return {
            "success": True,
            "results": [r.to_response() for r in self.results],
            "total": self.total,
            "query": self.query,
            "filters": self.filters,
            "sources": self.sources,
        }
