# ============================================================================
# src/rx_matching/enrichers/product_enricher.py
# ============================================================================
"""
Product Enricher

Fills in active ingredient, therapeutic group, indication and
contraindication for a matched product, field by field:

1. the product row itself
2. a reference product in the catalog with the same base name
3. the fixed therapeutic class table (group and indication only,
   plus the member ingredient the name mentions)

Enrichment is best-effort: a failing reference lookup leaves the
remaining fields to the class table.
"""

import logging
from typing import Any, Dict, Sequence

from .base import ProductEnricherBase, TherapeuticInfo
from ..catalog.base import CatalogQuery
from ..constants.therapeutic_classes import THERAPEUTIC_CLASSES, TherapeuticClass, find_therapeutic_class
from ..core.context.catalog_product import CatalogProduct
from ..utils.exceptions import CatalogError
from ..utils.medicine_name_parser import parse_medicine_name

logger = logging.getLogger(__name__)


class ProductEnricher(ProductEnricherBase):
    """
    Therapeutic metadata enricher backed by the catalog and the class table.

    Args:
        catalog: Catalog used for reference lookups
        classes: Therapeutic class table
    """

    def __init__(
        self,
        catalog: CatalogQuery,
        classes: Sequence[TherapeuticClass] = THERAPEUTIC_CLASSES,
        config: Dict[str, Any] = None
    ):
        super().__init__(config)
        self.catalog = catalog
        self.classes = classes

    @property
    def enricher_type(self) -> str:
        return "therapeutic"

    async def enrich(self, product: CatalogProduct) -> TherapeuticInfo:
        info = self.from_product(product)
        if info.is_complete:
            return info

        base_name = parse_medicine_name(product.name).base_name
        try:
            reference = await self.catalog.find_reference(base_name)
        except CatalogError as e:
            logger.warning(f"Reference lookup failed for '{product.name}': {e}")
            reference = None

        if reference is not None and reference.id != product.id:
            info = info.fill_missing(
                "catalog_reference",
                active_ingredient=reference.active_ingredient,
                therapeutic_group=reference.therapeutic_group,
                indication=reference.indication,
                contraindication=reference.contraindication,
            )

        if not (info.active_ingredient and info.therapeutic_group and info.indication):
            therapeutic_class = find_therapeutic_class(product.name, self.classes)
            if therapeutic_class is not None:
                info = info.fill_missing(
                    "class_table",
                    active_ingredient=therapeutic_class.member_for(product.name),
                    therapeutic_group=therapeutic_class.name,
                    indication=therapeutic_class.indication,
                )

        logger.debug(f"Enriched '{product.name}': {info.sources}")
        return info
