# ============================================================================
# src/rx_matching/constants/therapeutic_classes.py
# ============================================================================
"""
Therapeutic Class Table

Small, fixed name -> class table for high-risk drug classes. Used when
neither the product nor the catalog reference data names an active
ingredient or therapeutic group, so unmatched lines can still surface
clinically related alternatives.

Group and indication strings match the catalog's own (Vietnamese)
metadata so they can be used directly as catalog filters.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from ..utils.text_normalizer import normalize_key

THERAPEUTIC_CLASSES_VERSION = "2024.1"


@dataclass(frozen=True)
class TherapeuticClass:
    name: str
    indication: str
    members: Tuple[str, ...]

    def matches(self, medicine_name: str) -> bool:
        """True if the name contains one of the class member ingredients."""
        key = normalize_key(medicine_name)
        if not key:
            return False
        return any(normalize_key(member) in key for member in self.members)

    def member_for(self, medicine_name: str) -> Optional[str]:
        """Return the member ingredient named in ``medicine_name``."""
        key = normalize_key(medicine_name)
        for member in self.members:
            if key and normalize_key(member) in key:
                return member
        return None


THERAPEUTIC_CLASSES: Tuple[TherapeuticClass, ...] = (
    TherapeuticClass(
        name="NSAID",
        indication="Giảm đau, kháng viêm",
        members=(
            "celecoxib", "meloxicam", "diclofenac", "ibuprofen",
            "naproxen", "indomethacin", "piroxicam", "ketoprofen",
        ),
    ),
    TherapeuticClass(
        name="Corticosteroid",
        indication="Chống viêm, ức chế miễn dịch, điều trị các bệnh tự miễn",
        members=(
            "prednisolon", "prednisone", "dexamethasone", "dexamethason",
            "methylprednisolon", "hydrocortisone", "betamethasone",
        ),
    ),
    TherapeuticClass(
        name="Kháng sinh",
        indication="Điều trị nhiễm khuẩn",
        members=(
            "amoxicillin", "amoxicilin", "ampicillin", "ampicilin", "penicillin",
            "cephalexin", "cefuroxime", "cefuroxim", "azithromycin",
            "clarithromycin", "erythromycin",
        ),
    ),
)


def find_therapeutic_class(
    medicine_name: str,
    classes: Iterable[TherapeuticClass] = THERAPEUTIC_CLASSES
) -> Optional[TherapeuticClass]:
    """
    Look up the high-risk class a medicine name belongs to.

    Args:
        medicine_name: Any spelling of the medicine (dosage allowed)
        classes: Class table to search

    Returns:
        First matching TherapeuticClass, or None
    """
    for therapeutic_class in classes:
        if therapeutic_class.matches(medicine_name):
            return therapeutic_class
    return None
