"""Card catalog providers package."""

from .base import CatalogProvider
from .local import LocalCatalogProvider
from .remote import HttpCatalogProvider

__all__ = ["CatalogProvider", "LocalCatalogProvider", "HttpCatalogProvider"]
