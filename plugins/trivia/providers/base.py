"""
Base Catalog Provider Interface

Abstract base class for card catalog sources.
"""

from abc import ABC, abstractmethod

from ..catalog import CardCatalog


class CatalogProvider(ABC):
    """
    Base class for catalog providers.

    Providers load the card cache document from somewhere (a local file,
    an HTTP endpoint) and return a parsed CardCatalog.
    """

    @abstractmethod
    async def load(self) -> CardCatalog:
        """
        Load and parse the card catalog.

        Returns:
            CardCatalog instance

        Raises:
            CatalogError: If the document cannot be read or parsed
        """
        ...

    async def close(self) -> None:
        """
        Close any resources used by the provider.

        Override this in subclasses that need cleanup.
        """
        pass
