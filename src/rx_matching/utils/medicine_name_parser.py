# ============================================================================
# src/rx_matching/utils/medicine_name_parser.py
# ============================================================================
"""
Medicine Name Parser

Splits a medicine entry into base name and canonical dosage, and
prepares raw prescription entries for catalog lookup (quantity,
usage instructions, brand names in parentheses).
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..core.context.medicine_line import ParsedMedicineName
from ..constants.vocabulary import (
    USAGE_TAIL_PATTERNS,
    SL_QUANTITY_PATTERN,
    UNIT_QUANTITY_PATTERN,
    TIMES_QUANTITY_PATTERN,
)

DOSAGE_UNITS = r'(?:mcg|mg|ml|iu|ui|g|l|%)'
_NUMBER = r'\d+(?:[.,]\d+)?'
# Unit must not run into a following letter ("5 lần", "2 gói")
_UNIT = DOSAGE_UNITS + r'(?![^\W\d_])'

# "500mg", "2500mg+500mg", "250mg/5ml", "1g / 0.2g"
DOSAGE_PATTERN = re.compile(
    rf'{_NUMBER}\s*{_UNIT}(?:\s*[+/]\s*{_NUMBER}\s*(?:{_UNIT})?)*',
    re.IGNORECASE
)

_NAME_SEPARATORS = re.compile(r'[_\-/+]+')
_PARENTHESIZED = re.compile(r'\(([^()]*)\)?')


def _collapse(text: str) -> str:
    return re.sub(r'\s+', ' ', text).strip()


def contains_dosage(text: str) -> bool:
    """True if the text carries at least one numeric+unit token."""
    return bool(text) and DOSAGE_PATTERN.search(text) is not None


def parse_medicine_name(text: str) -> ParsedMedicineName:
    """
    Split a medicine string into base name and dosage.

    All dosage tokens are found, stripped from the name and joined with
    "/" (combination strengths written with "+" become "/" too). A name
    without dosage is valid: dosage is None.

    Args:
        text: Medicine entry, e.g. "Augmentin 875mg+125mg"

    Returns:
        ParsedMedicineName(base_name="Augmentin", dosage="875mg/125mg")
    """
    if not text or not text.strip():
        return ParsedMedicineName(base_name="", dosage=None)

    working = _collapse(text.replace('_', ' '))
    matches = [m.group(0) for m in DOSAGE_PATTERN.finditer(working)]

    if not matches:
        return ParsedMedicineName(base_name=_collapse(working.replace('+', ' ')), dosage=None)

    dosage_parts = []
    for match in matches:
        compact = re.sub(r'\s+', '', match)
        dosage_parts.append(re.sub(r'\+', '/', compact))
    dosage = '/'.join(dosage_parts)

    base = DOSAGE_PATTERN.sub(' ', working)
    base = _NAME_SEPARATORS.sub(' ', base)
    base = _collapse(base.strip(' ,;:.'))
    if not base:
        base = _collapse(working)

    return ParsedMedicineName(base_name=base, dosage=dosage)


def strip_usage_instructions(text: str) -> str:
    """
    Cut usage instructions trailing a medicine name.

    Examples:
        "Paracetamol 500mg - Sáng 1 viên, tối 1 viên" -> "Paracetamol 500mg"
        "Oresol Uống: pha 1 gói" -> "Oresol"
    """
    result = text
    for pattern in USAGE_TAIL_PATTERNS:
        result = pattern.sub('', result)
    # A cut can leave the separator that introduced the instructions
    return _collapse(result).rstrip(' -–:,;')


def extract_quantity(text: str) -> Tuple[str, Optional[int]]:
    """
    Pull the dispensed quantity out of an entry.

    Recognizes "SL: 20", "20 viên" (and the other quantity units) and
    "x 20". Quantity tokens are removed from the returned text.

    Returns:
        (text without quantity tokens, quantity or None)
    """
    quantity = None
    for pattern in (SL_QUANTITY_PATTERN, UNIT_QUANTITY_PATTERN, TIMES_QUANTITY_PATTERN):
        match = pattern.search(text)
        if match and quantity is None:
            quantity = int(match.group(1))
        text = pattern.sub(' ', text)
    return _collapse(text), quantity


def split_brand_name(text: str) -> Tuple[str, Optional[str]]:
    """
    Separate a parenthesized name from the rest of the entry.

    Examples:
        "Paracetamol (Hapacol) 500mg" -> ("Paracetamol 500mg", "Hapacol")
        "Augmentin (Amoxicilin" -> ("Augmentin", "Amoxicilin")
    """
    match = _PARENTHESIZED.search(text)
    if not match:
        return text, None

    inner = _collapse(match.group(1))
    outer = _collapse(_PARENTHESIZED.sub(' ', text))
    brand = inner if re.search(r'[^\W\d_]{2,}', inner) else None
    return outer or text, brand


@dataclass
class PreparedCandidate:
    """Entry text ready for catalog lookup."""
    name: str
    quantity: int = 1
    alternatives: List[str] = field(default_factory=list)

    @property
    def is_parsable(self) -> bool:
        return len(re.findall(r'[^\W\d_]', self.name)) >= 2


def prepare_candidate(entry_text: str) -> PreparedCandidate:
    """
    Turn a reconstructed entry into a lookup candidate.

    The explicit "SL:" quantity is read from the whole entry before usage
    instructions are cut; unit quantities ("20 viên") are read from what
    remains so usage doses ("Sáng 1 viên") are never mistaken for the
    dispensed amount.
    """
    text = entry_text or ""

    quantity = None
    sl_match = SL_QUANTITY_PATTERN.search(text)
    if sl_match:
        quantity = int(sl_match.group(1))
        text = SL_QUANTITY_PATTERN.sub(' ', text)

    text = strip_usage_instructions(text)
    text, found_quantity = extract_quantity(text)
    if quantity is None:
        quantity = found_quantity

    name, brand = split_brand_name(text)
    name = _collapse(name.strip(' ,;:.-'))

    alternatives = [brand] if brand and brand != name else []
    return PreparedCandidate(
        name=name,
        quantity=quantity if quantity and quantity > 0 else 1,
        alternatives=alternatives,
    )
