# ============================================================================
# src/rx_matching/core/context/analysis_result.py
# ============================================================================
"""
Analysis Result

Terminal artifact of one prescription analysis. Built once by the
orchestrator and never mutated; serialized with stable camelCase keys
for downstream callers (cart, pharmacist review, chat layer).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .enums import MatchType, MatchReason
from .match_result import Suggestion


@dataclass(frozen=True)
class FoundMedicine:
    """Prescription line resolved to one catalog product."""
    product_id: str
    product_name: str
    price: float
    unit: str
    in_stock: bool
    stock_quantity: int
    requires_prescription: bool
    confidence: float
    original_text: str
    line_index: int
    quantity: int
    match_type: MatchType
    match_reason: MatchReason
    active_ingredient: Optional[str] = None
    group_therapeutic: Optional[str] = None
    contraindication: Optional[str] = None
    indication: Optional[str] = None

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            'productId': self.product_id,
            'productName': self.product_name,
            'price': self.price,
            'totalPrice': self.line_total,
            'unit': self.unit,
            'inStock': self.in_stock,
            'stockQuantity': self.stock_quantity,
            'requiresPrescription': self.requires_prescription,
            'confidence': round(self.confidence, 4),
            'originalText': self.original_text,
            'lineIndex': self.line_index,
            'quantity': self.quantity,
            'matchType': self.match_type.value,
            'matchReason': self.match_reason.value,
            'activeIngredient': self.active_ingredient,
            'groupTherapeutic': self.group_therapeutic,
            'contraindication': self.contraindication,
            'indication': self.indication,
        }


@dataclass(frozen=True)
class NotFoundMedicine:
    """Prescription line with no catalog hit, plus ranked suggestions."""
    original_text: str
    line_index: int
    medicine_name: str
    quantity: int = 1
    suggestions: Tuple[Suggestion, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'originalText': self.original_text,
            'lineIndex': self.line_index,
            'medicineName': self.medicine_name,
            'quantity': self.quantity,
            'suggestions': [s.to_dict() for s in self.suggestions],
        }


@dataclass(frozen=True)
class AnalysisResult:
    """
    Outcome of analyzing one prescription.

    ``requires_consultation`` is a hard checkout gate for callers;
    ``confidence`` summarizes how much of the prescription resolved.
    """
    found_medicines: Tuple[FoundMedicine, ...] = ()
    not_found_medicines: Tuple[NotFoundMedicine, ...] = ()
    total_estimated_price: float = 0.0
    requires_consultation: bool = False
    confidence: float = 0.0
    analysis_notes: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def line_count(self) -> int:
        return len(self.found_medicines) + len(self.not_found_medicines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'foundMedicines': [m.to_dict() for m in self.found_medicines],
            'notFoundMedicines': [m.to_dict() for m in self.not_found_medicines],
            'totalEstimatedPrice': self.total_estimated_price,
            'requiresConsultation': self.requires_consultation,
            'confidence': round(self.confidence, 4),
            'analysisNotes': list(self.analysis_notes),
        }
