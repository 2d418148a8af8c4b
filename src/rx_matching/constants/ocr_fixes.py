# ============================================================================
# src/rx_matching/constants/ocr_fixes.py
# ============================================================================
"""
OCR Letter-Omission Fixes

Handwritten and low-resolution prescriptions regularly lose the first
letter(s) of a drug name ("oxicilin" for "Amoxicilin"). Each entry maps
a damaged word to its repaired spelling. Fixes only apply to whole
words, so an intact "Amoxicilin" is never touched.

The table is read-only. Bump OCR_FIXES_VERSION whenever it changes so
analyses can be traced back to the table that produced them.
"""

import re
from types import MappingProxyType
from typing import Mapping

OCR_FIXES_VERSION = "2024.2"

OCR_LETTER_FIXES = MappingProxyType({
    # Penicillins
    "oxicilin": "Amoxicilin",
    "moxicilin": "Amoxicilin",
    "oxicillin": "Amoxicillin",
    "moxicillin": "Amoxicillin",
    "mpicilin": "Ampicilin",
    "ugmentin": "Augmentin",

    # Other antibiotics
    "zithromycin": "Azithromycin",
    "larithromycin": "Clarithromycin",
    "ephalexin": "Cephalexin",
    "efuroxim": "Cefuroxim",
    "efixim": "Cefixim",
    "iprofloxacin": "Ciprofloxacin",

    # Analgesics / NSAIDs
    "aracetamol": "Paracetamol",
    "buprofen": "Ibuprofen",
    "iclofenac": "Diclofenac",
    "eloxicam": "Meloxicam",
    "elecoxib": "Celecoxib",

    # Corticosteroids
    "rednisolon": "Prednisolon",
    "ethylprednisolon": "Methylprednisolon",
    "examethason": "Dexamethason",

    # Common chronic medication
    "meprazol": "Omeprazol",
    "soprazol": "Esomeprazol",
    "oratadin": "Loratadin",
    "etformin": "Metformin",
    "mlodipin": "Amlodipin",
})


class OcrLetterFixer:
    """
    Applies a letter-omission table to text, whole words only.

    Examples:
        "oxicilin 500mg" -> "Amoxicilin 500mg"
        "Amoxicilin 500mg" -> unchanged
    """

    def __init__(self, fixes: Mapping[str, str] = OCR_LETTER_FIXES):
        self._patterns = [
            (re.compile(rf'(?<![^\W\d_]){re.escape(wrong)}(?![^\W\d_])', re.IGNORECASE), right)
            for wrong, right in fixes.items()
        ]

    def fix(self, text: str) -> str:
        for pattern, replacement in self._patterns:
            text = pattern.sub(replacement, text)
        return text
