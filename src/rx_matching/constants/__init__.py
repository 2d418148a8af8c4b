# ============================================================================
# src/rx_matching/constants/__init__.py
# ============================================================================
"""
Convenient imports for all constants
"""

from .ocr_fixes import OCR_FIXES_VERSION, OCR_LETTER_FIXES, OcrLetterFixer
from .therapeutic_classes import (
    THERAPEUTIC_CLASSES_VERSION,
    THERAPEUTIC_CLASSES,
    TherapeuticClass,
    find_therapeutic_class,
)
from .vocabulary import MATCH_EXPLANATIONS
