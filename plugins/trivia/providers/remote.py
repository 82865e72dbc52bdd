"""
HTTP Catalog Provider

Fetches the card cache document from an HTTP endpoint.
"""

import logging
from typing import Optional

import httpx

from .base import CatalogProvider
from ..catalog import CardCatalog, CatalogError

logger = logging.getLogger(__name__)


class HttpCatalogProvider(CatalogProvider):
    """
    Load the catalog from a URL serving the card cache JSON.

    Features:
    - Reuses one AsyncClient across loads
    - Raises CatalogError for non-JSON bodies
    - Propagates httpx errors for network/HTTP status failures
    """

    DEFAULT_TIMEOUT = 10.0

    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize HTTP provider.

        Args:
            url: Address of the card cache document
            timeout: HTTP request timeout in seconds
        """
        self.url = url
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None
        self.logger = logging.getLogger(f"{__name__}.HttpCatalogProvider")

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def load(self) -> CardCatalog:
        """
        Fetch and parse the card cache.

        Raises:
            CatalogError: If the body is not JSON
            httpx.HTTPError: If network error occurs
        """
        client = await self._get_client()

        self.logger.debug(f"Fetching card cache from {self.url}")
        response = await client.get(self.url)
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as e:
            raise CatalogError(f"Card cache at {self.url} is not JSON") from e

        return CardCatalog.from_cache(data)

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
