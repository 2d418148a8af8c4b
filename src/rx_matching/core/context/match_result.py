# ============================================================================
# src/rx_matching/core/context/match_result.py
# ============================================================================
"""
Per-line matching outcomes.

A line resolves to exactly one MatchResult (catalog hit) or to zero or
more Suggestions (ranked alternatives), never both.
"""

from dataclasses import dataclass
from typing import Any, Dict

from .catalog_product import CatalogProduct
from .enums import MatchType, MatchReason
from ...constants.vocabulary import MATCH_EXPLANATIONS


@dataclass(frozen=True)
class MatchResult:
    """Catalog hit for one medicine line."""
    product: CatalogProduct
    match_type: MatchType
    match_reason: MatchReason
    confidence: float

    @property
    def is_exact(self) -> bool:
        return self.match_type == MatchType.EXACT


@dataclass(frozen=True)
class Suggestion:
    """
    Ranked alternative offered for an unmatched line.

    Attributes:
        product: Suggested catalog product
        match_reason: Why the product was offered
        confidence: Band confidence after stock/popularity adjustment
        score: Ranking band score (stock never moves a suggestion across bands)
        similarity: Normalized edit-distance similarity of the base names
    """
    product: CatalogProduct
    match_reason: MatchReason
    confidence: float
    score: float
    similarity: float = 0.0

    @property
    def explanation(self) -> str:
        return MATCH_EXPLANATIONS.get(self.match_reason.value, "")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'productId': self.product.id,
            'productName': self.product.name,
            'price': self.product.price,
            'unit': self.product.unit,
            'inStock': self.product.in_stock,
            'stockQuantity': self.product.stock_quantity,
            'requiresPrescription': self.product.requires_prescription,
            'matchReason': self.match_reason.value,
            'explanation': self.explanation,
            'confidence': round(self.confidence, 4),
            'score': round(self.score, 4),
            'similarity': round(self.similarity, 4),
        }
