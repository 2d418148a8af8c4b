# ============================================================================
# src/rx_matching/__init__.py
# ============================================================================
"""
Prescription-to-catalog matching engine.

Turns OCR'd prescription text into confidence-ranked catalog matches
and suggestions for an online pharmacy.
"""

__version__ = "1.0.0"
