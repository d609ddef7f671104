"""Member records from already-loaded workspace state."""

from typing import Any, Dict, List

from ..workspaces import Workspace


def member_records(workspace: Workspace) -> List[Dict[str, Any]]:
    """Raw member records for the normalizer (camelCase, like the other sources)"""
    return [
        {
            "userId": m.user_id,
            "name": m.name,
            "email": m.email,
            "role": m.role,
            "joinedAt": m.joined_at.isoformat() if m.joined_at else None,
        }
        for m in workspace.members
    ]
