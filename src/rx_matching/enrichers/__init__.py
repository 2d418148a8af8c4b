# ============================================================================
# src/rx_matching/enrichers/__init__.py
# ============================================================================
"""
Enrichers add therapeutic metadata to matched products. Enrichment runs
after matching and never changes which product a line resolved to.
"""

from .base import TherapeuticInfo, ProductEnricherBase
from .product_enricher import ProductEnricher

__all__ = [
    "TherapeuticInfo",
    "ProductEnricherBase",
    "ProductEnricher",
]
