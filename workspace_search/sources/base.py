"""
Base Provider

Abstract base class for remote source collaborators (GitHub, Notion).
Provides a shared async HTTP client and uniform error reporting.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger("wsearch.sources")


class SourceError(Exception):
    """A source could not be reached or returned an unusable response."""

    def __init__(self, source: str, message: str):
        super().__init__(f"[{source}] {message}")
        self.source = source


class BaseProvider(ABC):
    """
    Abstract base class for source providers.

    Each provider must implement:
    - is_configured: whether enough configuration exists to call the source

    The HTTP client is created lazily unless one is injected (tests pass an
    httpx.AsyncClient backed by httpx.MockTransport).
    """

    def __init__(
        self,
        source_name: str,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize provider.

        Args:
            source_name: Name of the source (e.g., "github", "notion")
            base_url: API root URL
            headers: Default request headers
            timeout: Request timeout in seconds
            client: Optional pre-built async client
        """
        self.source_name = source_name
        self._base_url = base_url.rstrip("/")
        self._headers = headers or {}
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        pass

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
            )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Perform a request and return the decoded JSON body.

        Raises:
            SourceError: on transport errors, non-2xx status, or invalid JSON
        """
        client = self._get_client()
        url = f"{self._base_url}{path}"
        try:
            response = await client.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers,
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise SourceError(
                self.source_name,
                f"{method} {path} returned {e.response.status_code}",
            ) from e
        except httpx.HTTPError as e:
            raise SourceError(self.source_name, f"{method} {path} failed: {e}") from e
        except ValueError as e:
            raise SourceError(self.source_name, f"{method} {path} returned invalid JSON") from e

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it"""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
