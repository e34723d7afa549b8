"""
OpenSearch client for executing search requests.
"""

import asyncio
import logging
from typing import Any, Dict, Optional
from urllib.parse import urljoin

import aiohttp

from ..exceptions import SearchBackendException

logger = logging.getLogger(__name__)


class OpenSearchClient:
    """
    Async OpenSearch client for search operations.
    """

    def __init__(
        self,
        endpoint: str,
        index_name: str = "documents",
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: int = 30,
    ):
        self.base_url = endpoint.rstrip("/") + "/"
        self.index_name = index_name
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

        self.auth = None
        if username and password:
            self.auth = aiohttp.BasicAuth(username, password)

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self.session is None or self.session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self.session = aiohttp.ClientSession(timeout=timeout, auth=self.auth)
        return self.session

    async def close(self):
        """Close the HTTP session."""
        if self.session and not self.session.closed:
            await self.session.close()

    async def health_check(self) -> bool:
        """Check if OpenSearch is accessible."""
        try:
            session = await self._get_session()
            url = urljoin(self.base_url, "_cluster/health")

            async with session.get(url) as response:
                if response.status == 200:
                    data = await response.json()
                    return data.get("status") in ["green", "yellow"]
                return False
        except Exception as e:
            logger.error(f"OpenSearch health check failed: {e}")
            return False

    async def search_raw(self, search_body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute a search with a fully built query document.

        Raises:
            SearchBackendException: If the request fails or returns an error status
        """
        session = await self._get_session()
        url = urljoin(self.base_url, f"{self.index_name}/_search")

        try:
            async with session.post(url, json=search_body) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise SearchBackendException(
                        f"Search failed with status {response.status}: {error_text}", status_code=response.status
                    )
                return await response.json()
        except aiohttp.ClientError as e:
            raise SearchBackendException(f"Search request failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise SearchBackendException(f"Search request timed out after {self.timeout}s") from e
