"""
Workspace Search Common Module

Shared configuration and schemas for the retriever, sources and server.
"""

from .config import WorkspaceSearchConfig, load_config

__all__ = [
    "WorkspaceSearchConfig",
    "load_config",
]
