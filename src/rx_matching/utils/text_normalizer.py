# ============================================================================
# src/rx_matching/utils/text_normalizer.py
# ============================================================================
"""
Text Normalization Utilities

Comparison keys for medicine names and dosages:
- Diacritic folding for Vietnamese OCR text
- Letters-only name keys and tolerant key comparison
- Separator-insensitive dosage keys
- Normalized edit-distance similarity
"""

import re
import unicodedata
from typing import Optional

from rapidfuzz.distance import Levenshtein

# Letters kept by NFD decomposition that still need mapping
_EXTRA_FOLDS = str.maketrans({'đ': 'd', 'Đ': 'D'})

# Separators ignored when comparing dosages
_DOSAGE_SEPARATORS = re.compile(r'[_\s+\-/]+')

# Prefix keys may lose at most this many trailing letters
MAX_TRAILING_LETTERS_DROPPED = 2

# Aligned-position agreement required for keys of near-equal length
ALIGNED_MATCH_RATIO = 0.8

# OCR fragments shorter than this only match an identical key
MIN_TOLERANT_KEY_LENGTH = 3


def fold_diacritics(text: str) -> str:
    """
    Strip Vietnamese (and other) diacritics.

    Examples:
        "Thuốc điều trị" -> "Thuoc dieu tri"
        "Kháng sinh" -> "Khang sinh"
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize('NFD', text.translate(_EXTRA_FOLDS))
    return ''.join(ch for ch in decomposed if unicodedata.category(ch) != 'Mn')


def fold_line(text: str) -> str:
    """Folded, lowercased, whitespace-collapsed form used for line classification."""
    return re.sub(r'\s+', ' ', fold_diacritics(text).lower()).strip()


def normalize_key(text: Optional[str]) -> str:
    """
    Letters-only comparison key.

    Digits, punctuation, whitespace and separators are dropped entirely,
    so every surface spelling of one name maps to the same key.

    Examples:
        "Paracetamol 500mg" -> "paracetamolmg"
        "Paracetamol_500mg" -> "paracetamolmg"
        "Hapacol 250" -> "hapacol"
    """
    if not text:
        return ""
    return re.sub(r'[^a-z]', '', fold_diacritics(text).lower())


def keys_are_similar(key1: str, key2: str) -> bool:
    """
    Tolerant key comparison for OCR letter drops.

    True when the keys are equal, when one is a prefix of the other
    missing at most two trailing letters, or when the keys differ in
    length by at most two and at least 80% of aligned positions agree.
    Neither tolerant rule applies to keys shorter than three letters.
    """
    if not key1 or not key2:
        return False
    if key1 == key2:
        return True

    shorter, longer = sorted((key1, key2), key=len)
    if len(shorter) < MIN_TOLERANT_KEY_LENGTH:
        return False
    length_diff = len(longer) - len(shorter)
    if length_diff > MAX_TRAILING_LETTERS_DROPPED:
        return False

    if longer.startswith(shorter):
        return True

    matches = sum(1 for a, b in zip(key1, key2) if a == b)
    return matches / len(shorter) >= ALIGNED_MATCH_RATIO


def normalize_dosage(dosage: Optional[str]) -> str:
    """
    Separator-insensitive dosage key.

    Digits and unit letters are concatenated; decimal points between
    digits are kept so "2.5mg" and "25mg" never compare equal.

    Examples:
        "2500mg+500mg" -> "2500mg500mg"
        "2500mg / 500mg" -> "2500mg500mg"
        "2,5 mg" -> "2.5mg"
    """
    if not dosage:
        return ""
    text = fold_diacritics(dosage).lower()
    text = re.sub(r'(?<=\d),(?=\d)', '.', text)
    text = _DOSAGE_SEPARATORS.sub('', text)
    text = re.sub(r'[^a-z0-9.]', '', text)
    # Drop dots that are not decimal points
    return re.sub(r'(?<!\d)\.|\.(?!\d)', '', text)


def dosages_match(dosage1: Optional[str], dosage2: Optional[str]) -> bool:
    """True iff both dosages are present and their keys are identical."""
    key1 = normalize_dosage(dosage1)
    key2 = normalize_dosage(dosage2)
    return bool(key1) and key1 == key2


def name_similarity(key1: str, key2: str) -> float:
    """
    Normalized edit-distance similarity in [0, 1].

    1 - levenshtein(key1, key2) / max(len(key1), len(key2))
    """
    if not key1 and not key2:
        return 1.0
    return Levenshtein.normalized_similarity(key1, key2)


def main_active_ingredient(active_ingredient: Optional[str]) -> Optional[str]:
    """
    First ingredient of a combination, lowercased.

    Examples:
        "Amoxicillin, Acid clavulanic" -> "amoxicillin"
        "Vitamin C; Kẽm" -> "vitamin c"
    """
    if not active_ingredient:
        return None
    main = re.split(r'[,;]', active_ingredient)[0].strip().lower()
    return main if len(main) > 3 else None
