# ============================================================================
# src/rx_matching/catalog/memory_catalog.py
# ============================================================================
"""
In-memory catalog, used by tests and small deployments that load the
catalog from a JSON export.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .base import CatalogQuery, search_text, compact_text
from ..core.context.catalog_product import CatalogProduct
from ..utils.exceptions import CatalogUnavailableError

logger = logging.getLogger(__name__)


class InMemoryCatalog(CatalogQuery):
    """Catalog held in a Python list; search is a linear scan."""

    def __init__(self, products: Iterable[CatalogProduct] = ()):
        self._products: Tuple[CatalogProduct, ...] = tuple(products)
        # (search name, compact name, search description) per product
        self._index = [
            (search_text(p.name), compact_text(p.name), search_text(p.description))
            for p in self._products
        ]

    @classmethod
    def from_json(cls, path: Path) -> "InMemoryCatalog":
        """Load a JSON list of product objects."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            products = [CatalogProduct.from_dict(item) for item in data]
        except (OSError, ValueError) as e:
            raise CatalogUnavailableError(f"Cannot load catalog seed {path}: {e}") from e
        logger.info(f"Loaded {len(products)} catalog products from {path}")
        return cls(products)

    @property
    def products(self) -> Tuple[CatalogProduct, ...]:
        return self._products

    def __len__(self) -> int:
        return len(self._products)

    @staticmethod
    def _stock_ok(product: CatalogProduct, in_stock: Optional[bool]) -> bool:
        return in_stock is None or product.in_stock == in_stock

    async def search_by_name(
        self,
        pattern: str,
        *,
        in_stock: Optional[bool] = None,
        prefix_only: bool = False,
        include_description: bool = False,
        limit: int = 50
    ) -> List[CatalogProduct]:
        needle = search_text(pattern)
        compact_needle = compact_text(pattern)
        if not compact_needle or limit <= 0:
            return []

        prefix_hits = []
        other_hits = []
        for product, (name, compact_name, description) in zip(self._products, self._index):
            if not self._stock_ok(product, in_stock):
                continue

            if name.startswith(needle) or compact_name.startswith(compact_needle):
                prefix_hits.append(product)
            elif prefix_only:
                continue
            elif needle in name or compact_needle in compact_name:
                other_hits.append(product)
            elif include_description and description and needle in description:
                other_hits.append(product)

        return (prefix_hits + other_hits)[:limit]

    async def find_by_active_ingredient(
        self,
        ingredient: str,
        *,
        in_stock: Optional[bool] = None,
        limit: int = 20
    ) -> List[CatalogProduct]:
        needle = search_text(ingredient)
        if not needle:
            return []
        hits = [
            p for p in self._products
            if self._stock_ok(p, in_stock) and needle in search_text(p.active_ingredient)
        ]
        return hits[:limit]

    async def find_by_therapeutic_group(
        self,
        group: str,
        *,
        in_stock: Optional[bool] = None,
        limit: int = 20
    ) -> List[CatalogProduct]:
        needle = search_text(group)
        if not needle:
            return []
        hits = [
            p for p in self._products
            if self._stock_ok(p, in_stock) and needle in search_text(p.therapeutic_group)
        ]
        return hits[:limit]
