"""
Source collaborators: GitHub, Notion, and workspace members.
"""

from .base import BaseProvider, SourceError
from .github import GitHubProvider
from .notion import NotionProvider
from .members import member_records
from .collector import SourceBundle, SourceCollector

__all__ = [
    "BaseProvider",
    "SourceError",
    "GitHubProvider",
    "NotionProvider",
    "member_records",
    "SourceBundle",
    "SourceCollector",
]
