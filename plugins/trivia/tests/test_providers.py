"""
Tests for card catalog providers.
"""

import json

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from trivia.catalog import CardCatalog, CatalogError
from trivia.providers.base import CatalogProvider
from trivia.providers.local import LocalCatalogProvider
from trivia.providers.remote import HttpCatalogProvider


class TestCatalogProviderBase:
    """Test base provider interface."""

    def test_abstract_methods(self):
        """Test that base class cannot be instantiated."""
        with pytest.raises(TypeError):
            CatalogProvider()

    @pytest.mark.asyncio
    async def test_close_default(self):
        """Test default close is a no-op."""
        class ConcreteProvider(CatalogProvider):
            async def load(self):
                return CardCatalog()

        provider = ConcreteProvider()
        await provider.close()
        assert isinstance(await provider.load(), CardCatalog)


class TestLocalCatalogProvider:
    """Test file-backed provider."""

    @pytest.mark.asyncio
    async def test_load(self, tmp_path, card_cache):
        """Test loading a cache file."""
        path = tmp_path / "items.json"
        path.write_text(json.dumps(card_cache), encoding="utf-8")

        catalog = await LocalCatalogProvider(path).load()

        assert len(catalog.items()) == 6
        assert len(catalog.monsters()) == 2
        assert catalog.fetched_at == "2026-01-01T00:00:00Z"

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        """Test missing file raises CatalogError."""
        provider = LocalCatalogProvider(tmp_path / "nope.json")
        with pytest.raises(CatalogError, match="not found"):
            await provider.load()

    @pytest.mark.asyncio
    async def test_invalid_json(self, tmp_path):
        """Test malformed file raises CatalogError."""
        path = tmp_path / "items.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(CatalogError, match="not valid JSON"):
            await LocalCatalogProvider(str(path)).load()

    @pytest.mark.asyncio
    async def test_wrong_shape(self, tmp_path):
        """Test a document without an items list is rejected."""
        path = tmp_path / "items.json"
        path.write_text(json.dumps({"monsters": []}), encoding="utf-8")

        with pytest.raises(CatalogError):
            await LocalCatalogProvider(path).load()


class TestHttpCatalogProvider:
    """Test HTTP provider."""

    @pytest.fixture
    def provider(self):
        """Create provider instance."""
        return HttpCatalogProvider("https://cards.example/items.json")

    def _client(self, response):
        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=response)
        mock_client.is_closed = False
        return mock_client

    @pytest.mark.asyncio
    async def test_load_success(self, provider, card_cache):
        """Test successful fetch."""
        mock_client = self._client(MagicMock(
            json=MagicMock(return_value=card_cache),
            raise_for_status=MagicMock(),
        ))
        provider._client = mock_client

        catalog = await provider.load()

        mock_client.get.assert_called_once_with("https://cards.example/items.json")
        assert "Vanessa" in catalog.heroes()

    @pytest.mark.asyncio
    async def test_non_json_body(self, provider):
        """Test non-JSON body raises CatalogError."""
        provider._client = self._client(MagicMock(
            json=MagicMock(side_effect=ValueError("Expecting value")),
            raise_for_status=MagicMock(),
        ))

        with pytest.raises(CatalogError, match="not JSON"):
            await provider.load()

    @pytest.mark.asyncio
    async def test_http_error_propagates(self, provider):
        """Test HTTP status errors come from httpx."""
        error = httpx.HTTPStatusError("503", request=MagicMock(), response=MagicMock())
        provider._client = self._client(MagicMock(
            raise_for_status=MagicMock(side_effect=error),
        ))

        with pytest.raises(httpx.HTTPStatusError):
            await provider.load()

    @pytest.mark.asyncio
    async def test_creates_client_lazily(self, provider):
        """Test a client is created on first use."""
        client = await provider._get_client()
        try:
            assert isinstance(client, httpx.AsyncClient)
            assert await provider._get_client() is client
        finally:
            await provider.close()

    @pytest.mark.asyncio
    async def test_close(self, provider):
        """Test close cleans up client."""
        mock_client = AsyncMock()
        mock_client.is_closed = False
        mock_client.aclose = AsyncMock()
        provider._client = mock_client

        await provider.close()

        mock_client.aclose.assert_called_once()
        assert provider._client is None
