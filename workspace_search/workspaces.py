"""
Workspace Registry

Already-loaded workspace records: name, connected GitHub repository, members.
Used for the membership (authorization) check and as the members source.

Records are read from a JSON file (a list of workspace objects, camelCase keys).
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger("wsearch.workspaces")


class WorkspaceNotFoundError(LookupError):
    """No workspace with the requested ID."""
    pass


class NotAMemberError(PermissionError):
    """Caller is not a member of the workspace."""
    pass


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RepositoryRef(_CamelModel):
    """GitHub repository connected to a workspace"""
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


class WorkspaceMember(_CamelModel):
    """A workspace member"""
    user_id: str
    name: str
    email: str = ""
    role: str = "member"
    joined_at: Optional[datetime] = None


class Workspace(_CamelModel):
    """A workspace and its connected sources"""
    id: str
    name: str
    github_repository: Optional[RepositoryRef] = None
    members: List[WorkspaceMember] = Field(default_factory=list)

    def member(self, user_id: str) -> Optional[WorkspaceMember]:
        for m in self.members:
            if m.user_id == user_id:
                return m
        return None

    def is_member(self, user_id: Optional[str]) -> bool:
        return bool(user_id) and self.member(user_id) is not None


class WorkspaceRegistry:
    """In-memory lookup of workspaces by ID"""

    def __init__(self, workspaces: Iterable[Workspace] = ()):
        self._workspaces: Dict[str, Workspace] = {}
        for workspace in workspaces:
            self.add(workspace)

    def __len__(self) -> int:
        return len(self._workspaces)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "WorkspaceRegistry":
        """
        Load workspaces from a JSON file.

        A missing file yields an empty registry; malformed entries are
        skipped and logged.
        """
        path = Path(path)
        if not path.exists():
            logger.warning("Workspaces file not found: %s", path)
            return cls()

        try:
            with open(path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error("Failed to load workspaces file %s: %s", path, e)
            return cls()

        if isinstance(data, dict):
            data = data.get("workspaces", [])

        registry = cls()
        for entry in data:
            try:
                registry.add(Workspace.model_validate(entry))
            except ValidationError as e:
                logger.warning("Skipping invalid workspace entry: %s", e)
        logger.info("Loaded %d workspace(s) from %s", len(registry), path)
        return registry

    def add(self, workspace: Workspace) -> None:
        self._workspaces[workspace.id] = workspace

    def get(self, workspace_id: str) -> Workspace:
        """
        Raises:
            WorkspaceNotFoundError: unknown ID
        """
        workspace = self._workspaces.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(f"Workspace not found: {workspace_id}")
        return workspace

    def authorize(self, workspace_id: str, user_id: Optional[str]) -> Workspace:
        """
        Fetch a workspace the caller belongs to.

        Raises:
            WorkspaceNotFoundError: unknown ID
            NotAMemberError: caller is not a member
        """
        workspace = self.get(workspace_id)
        if not workspace.is_member(user_id):
            raise NotAMemberError("Not authorized to access this workspace")
        return workspace
