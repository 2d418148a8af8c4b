# ============================================================================
# src/rx_matching/core/context/medicine_line.py
# ============================================================================
"""
Reconstructed prescription entries and their parsed form.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class MedicineLineRaw:
    """
    One reconstructed prescription entry.

    Attributes:
        original_text: Entry text after continuation lines were merged
        line_index: Index of the entry's first line in the raw OCR text
    """
    original_text: str
    line_index: int


@dataclass(frozen=True)
class ParsedMedicineName:
    """Medicine name split into base name and canonical dosage."""
    base_name: str
    dosage: Optional[str] = None

    @property
    def has_dosage(self) -> bool:
        return bool(self.dosage)
