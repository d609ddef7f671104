"""Curated example queries shown before the user types."""

from typing import List

SUGGESTIONS = (
    "recent commits",
    "open issues",
    "pull requests",
    "meeting notes",
    "project documentation",
    "team members",
    "authentication setup",
    "deployment process",
    "api endpoints",
    "bug reports",
)

DEFAULT_SUGGESTION_COUNT = 8


def get_suggestions(limit: int = DEFAULT_SUGGESTION_COUNT) -> List[str]:
    """First `limit` suggestions, in curated order"""
    return list(SUGGESTIONS[:max(limit, 0)])
