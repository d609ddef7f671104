"""
Notion Provider

Fetches workspace documents from a Notion database.

The database schema is not fixed, so the query adapts to it:
- sorts by a `Created` property when present, else by page created_time
- filters by a `Workspace` select when present, keeping pages that match the
  workspace or have no workspace set
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .base import BaseProvider, SourceError

logger = logging.getLogger("wsearch.sources.notion")

NOTION_API_URL = "https://api.notion.com/v1"
NO_WORKSPACE = "No workspace"


class NotionProvider(BaseProvider):
    """
    Async client for a single Notion documents database.
    """

    def __init__(
        self,
        token: str = "",
        database_id: str = "",
        api_version: str = "2022-06-28",
        page_size: int = 20,
        timeout: float = 10.0,
        api_url: str = NOTION_API_URL,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize Notion provider.

        Args:
            token: Integration token
            database_id: Documents database ID (provider is inert without it)
            api_version: Notion-Version header
            page_size: Pages per query
            timeout: Request timeout in seconds
            api_url: API root
            client: Optional pre-built async client
        """
        headers = {
            "Authorization": f"Bearer {token}",
            "Notion-Version": api_version,
            "Content-Type": "application/json",
        }
        super().__init__("notion", api_url, headers=headers, timeout=timeout, client=client)
        self._database_id = database_id
        self._page_size = page_size

    @property
    def is_configured(self) -> bool:
        return bool(self._database_id)

    async def get_database_properties(self) -> Dict[str, Any]:
        data = await self._request("GET", f"/databases/{self._database_id}")
        if not isinstance(data, dict):
            raise SourceError(self.source_name, "Unexpected database payload")
        return data.get("properties") or {}

    def build_query(self, properties: Dict[str, Any], workspace_name: str) -> Dict[str, Any]:
        """Query payload adapted to the properties the database actually has"""
        payload: Dict[str, Any] = {"page_size": self._page_size}

        if "Created" in properties:
            payload["sorts"] = [{"property": "Created", "direction": "descending"}]
        else:
            payload["sorts"] = [{"timestamp": "created_time", "direction": "descending"}]

        if "Workspace" in properties:
            payload["filter"] = {
                "property": "Workspace",
                "select": {"equals": workspace_name},
            }

        return payload

    @staticmethod
    def page_workspace(page: Dict[str, Any]) -> str:
        prop = (page.get("properties") or {}).get("Workspace") or {}
        select = prop.get("select") or {}
        return select.get("name") or NO_WORKSPACE

    async def list_documents(self, workspace_name: str) -> List[Dict[str, Any]]:
        """
        Pages belonging to a workspace.

        Args:
            workspace_name: Workspace display name used in the Workspace select

        Returns:
            Raw Notion page objects; [] when no database is configured

        Raises:
            SourceError: database unreachable or query failed
        """
        if not self.is_configured:
            logger.debug("Notion database not configured, skipping documents")
            return []

        properties = await self.get_database_properties()
        payload = self.build_query(properties, workspace_name)

        data = await self._request("POST", f"/databases/{self._database_id}/query", json=payload)
        pages = data.get("results", []) if isinstance(data, dict) else []

        has_workspace = "Workspace" in properties
        documents = []
        for page in pages:
            if not isinstance(page, dict):
                continue
            page_workspace = self.page_workspace(page)
            if (
                not has_workspace
                or page_workspace == workspace_name
                or page_workspace == NO_WORKSPACE
            ):
                documents.append(page)

        return documents
