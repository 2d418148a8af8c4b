# ============================================================================
# src/rx_matching/enrichers/base.py
# ============================================================================
"""
Base Enricher Interface

Enrichers take a matched CatalogProduct and fill in therapeutic metadata
the product row lacks. They do NOT re-match: the product stays the same,
only its descriptive fields are completed.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from ..core.context.catalog_product import CatalogProduct

ENRICHED_FIELDS = ("active_ingredient", "therapeutic_group", "indication", "contraindication")


@dataclass(frozen=True)
class TherapeuticInfo:
    """
    Therapeutic metadata for one product.

    ``sources`` records where each field came from ("product",
    "catalog_reference" or "class_table").
    """
    active_ingredient: Optional[str] = None
    therapeutic_group: Optional[str] = None
    indication: Optional[str] = None
    contraindication: Optional[str] = None
    sources: Dict[str, str] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return all(getattr(self, name) for name in ENRICHED_FIELDS)

    def fill_missing(self, source: str, **values: Optional[str]) -> "TherapeuticInfo":
        """
        Return a copy with empty fields taken from ``values``.

        Fields already set are never overwritten.
        """
        updates: Dict[str, Any] = {}
        sources = dict(self.sources)
        for name, value in values.items():
            if name in ENRICHED_FIELDS and value and not getattr(self, name):
                updates[name] = value
                sources[name] = source
        if not updates:
            return self
        return replace(self, sources=sources, **updates)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activeIngredient": self.active_ingredient,
            "groupTherapeutic": self.therapeutic_group,
            "indication": self.indication,
            "contraindication": self.contraindication,
            "sources": dict(self.sources),
        }


class ProductEnricherBase(ABC):
    """Base class for product metadata enrichers."""

    def __init__(self, config: Dict[str, Any] = None):
        self.config = config or {}

    @property
    @abstractmethod
    def enricher_type(self) -> str:
        """Return the type of enricher (e.g., 'therapeutic')."""
        pass

    @abstractmethod
    async def enrich(self, product: CatalogProduct) -> TherapeuticInfo:
        """
        Collect therapeutic metadata for a matched product.

        Args:
            product: Product a line resolved to

        Returns:
            TherapeuticInfo with whatever fields could be found
        """
        pass

    @staticmethod
    def from_product(product: CatalogProduct) -> TherapeuticInfo:
        """Metadata carried by the product row itself."""
        return TherapeuticInfo().fill_missing(
            "product",
            active_ingredient=product.active_ingredient,
            therapeutic_group=product.therapeutic_group,
            indication=product.indication,
            contraindication=product.contraindication,
        )
