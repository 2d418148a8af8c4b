# ============================================================================
# src/rx_matching/processors/prescription/__init__.py
# ============================================================================
"""
Prescription processing: line reconstruction, catalog matching and
suggestion ranking.
"""

from .line_reconstructor import LineReconstructor
from .catalog_matcher import CatalogMatcher
from .similarity_ranker import (
    SimilarityRanker,
    SuggestionStrategy,
    NameSimilarityStrategy,
    TherapeuticClassStrategy,
)

__all__ = [
    "LineReconstructor",
    "CatalogMatcher",
    "SimilarityRanker",
    "SuggestionStrategy",
    "NameSimilarityStrategy",
    "TherapeuticClassStrategy",
]
