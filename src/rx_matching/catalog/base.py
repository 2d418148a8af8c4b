# ============================================================================
# src/rx_matching/catalog/base.py
# ============================================================================
"""
Catalog Query Interface

Read-only view of the pharmacy product catalog. The matching engine
issues many small queries per analysis and assumes nothing about the
catalog's size beyond its own result limits.

Text search semantics shared by every implementation:
- comparison is case- and diacritic-insensitive
- a product matches a pattern by prefix, by substring, or
  separator-flexibly (spaces, "_" and "+" ignored on both sides)
- prefix matches are returned first, then catalog order

Implementations raise CatalogUnavailableError / CatalogQueryError on
backend failure; callers decide how to degrade.
"""

import re
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.context.catalog_product import CatalogProduct
from ..utils.text_normalizer import fold_diacritics

logger = logging.getLogger(__name__)

_SEARCH_SEPARATORS = re.compile(r'[\s_+]+')


def search_text(text: Optional[str]) -> str:
    """Folded, lowercased, whitespace-collapsed search form."""
    if not text:
        return ""
    return re.sub(r'\s+', ' ', fold_diacritics(text).lower()).strip()


def compact_text(text: Optional[str]) -> str:
    """Search form with separators removed (separator-flexible matching)."""
    return _SEARCH_SEPARATORS.sub('', search_text(text))


class CatalogQuery(ABC):
    """Abstract read-only catalog."""

    @abstractmethod
    async def search_by_name(
        self,
        pattern: str,
        *,
        in_stock: Optional[bool] = None,
        prefix_only: bool = False,
        include_description: bool = False,
        limit: int = 50
    ) -> List[CatalogProduct]:
        """
        Text search on product names.

        Args:
            pattern: Search text (any spelling / separators)
            in_stock: Filter on the in-stock flag (None = both)
            prefix_only: Only names starting with the pattern
            include_description: Also match the product description
            limit: Maximum products returned

        Returns:
            Products, prefix matches first
        """
        pass

    @abstractmethod
    async def find_by_active_ingredient(
        self,
        ingredient: str,
        *,
        in_stock: Optional[bool] = None,
        limit: int = 20
    ) -> List[CatalogProduct]:
        """Products whose active ingredient contains ``ingredient``."""
        pass

    @abstractmethod
    async def find_by_therapeutic_group(
        self,
        group: str,
        *,
        in_stock: Optional[bool] = None,
        limit: int = 20
    ) -> List[CatalogProduct]:
        """Products whose therapeutic group contains ``group``."""
        pass

    async def find_reference(self, name: str) -> Optional[CatalogProduct]:
        """
        Find reference metadata for a medicine name.

        Returns the first product matching the name that carries an active
        ingredient, therapeutic group or indication.
        """
        if not name or len(compact_text(name)) < 2:
            return None
        for product in await self.search_by_name(name, limit=10):
            if product.active_ingredient or product.therapeutic_group or product.indication:
                return product
        return None

    async def close(self) -> None:
        """Release backend resources."""
        return None
