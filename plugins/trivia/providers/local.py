"""
Local File Catalog Provider

Reads the card cache document from a JSON file on disk.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Union

from .base import CatalogProvider
from ..catalog import CardCatalog, CatalogError

logger = logging.getLogger(__name__)


class LocalCatalogProvider(CatalogProvider):
    """Load the catalog from a JSON file (e.g. cache/items.json)."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.logger = logging.getLogger(f"{__name__}.LocalCatalogProvider")

    def _read(self) -> dict:
        with open(self.path, "r", encoding="utf-8") as fp:
            return json.load(fp)

    async def load(self) -> CardCatalog:
        """
        Read and parse the cache file.

        The blocking read runs in the default executor.

        Raises:
            CatalogError: If the file is missing or not valid JSON
        """
        loop = asyncio.get_running_loop()
        try:
            data = await loop.run_in_executor(None, self._read)
        except FileNotFoundError as e:
            raise CatalogError(f"Card cache not found: {self.path}") from e
        except json.JSONDecodeError as e:
            raise CatalogError(f"Card cache is not valid JSON: {self.path}: {e}") from e

        self.logger.debug(f"Read card cache from {self.path}")
        return CardCatalog.from_cache(data)
