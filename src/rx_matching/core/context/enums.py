# ============================================================================
# src/rx_matching/core/context/enums.py
# ============================================================================
"""
Matching Enums
- Match types for catalog hits
- Match reasons for hits and suggestions
"""

from enum import Enum

class MatchType(str, Enum):
    EXACT = "exact"           # base name and dosage agree
    NAME_ONLY = "name_only"   # base name agrees, dosage differs or is missing

class MatchReason(str, Enum):
    SAME_NAME_SAME_DOSAGE = "same_name_same_dosage"
    SAME_NAME_DIFFERENT_DOSAGE = "same_name_different_dosage"
    SAME_NAME_UNKNOWN_DOSAGE = "same_name_unknown_dosage"
    SIMILAR_NAME = "similar_name"
    PARTIAL_NAME_MATCH = "partial_name_match"
    SAME_INDICATION_SAME_DOSAGE = "same_indication_same_dosage"
    SAME_INDICATION_DIFFERENT_DOSAGE = "same_indication_different_dosage"
