# ============================================================================
# src/rx_matching/processors/prescription/line_reconstructor.py
# ============================================================================
"""
OCR Line Reconstructor

Turns raw OCR text of a prescription into discrete medicine entries:

1. Split into trimmed, non-empty lines (numbered entries OCR'd onto one
   line are split apart first)
2. Locate the medicine section start: header phrase, else the first
   numbered line with a capitalized name, else the first line
3. Locate the section end at the first stop marker (doctor, signature,
   footer), never stopping on usage-instruction or dosage lines
4. Merge broken continuation lines into their entry
5. Apply known OCR letter-omission fixes

Reconstruction is strictly sequential and never raises on bad input:
unusable text simply yields no entries.
"""

import re
import logging
from typing import List, Mapping, Optional, Tuple

from ...core.context.medicine_line import MedicineLineRaw
from ...constants.ocr_fixes import OCR_LETTER_FIXES, OcrLetterFixer
from ...constants.vocabulary import (
    SECTION_HEADER_PATTERN,
    ORDINAL_PATTERN,
    INLINE_ORDINAL_SPLIT,
    STOP_MARKER_PATTERNS,
    DATE_FOOTER_PATTERN,
    USAGE_LINE_PATTERNS,
    CONTINUATION_PREFIXES,
    TRAILING_CONTINUATION,
    PHARMACEUTICAL_VOCABULARY_PATTERN,
    NON_MEDICINE_KEYWORDS,
    SL_QUANTITY_PATTERN,
)
from ...utils.text_normalizer import fold_line
from ...utils.medicine_name_parser import contains_dosage
from ...utils.logging import log_performance

logger = logging.getLogger(__name__)

# (source line index, text)
SourceLine = Tuple[int, str]

_NON_MEDICINE_PATTERNS = [re.compile(rf'\b{re.escape(kw)}\b') for kw in NON_MEDICINE_KEYWORDS]


class LineReconstructor:
    """
    Rebuilds medicine entries from noisy OCR text.

    Args:
        ocr_fixes: Damaged word -> repaired spelling table
    """

    def __init__(self, ocr_fixes: Mapping[str, str] = OCR_LETTER_FIXES):
        self._ocr_fixer = OcrLetterFixer(ocr_fixes)

    @log_performance(logger, "Line reconstruction")
    def reconstruct(self, raw_text: Optional[str]) -> List[MedicineLineRaw]:
        """
        Reconstruct medicine entries from raw OCR text.

        Args:
            raw_text: OCR output (UTF-8, may contain diacritics)

        Returns:
            Entries in document order, each with the index of its first
            source line
        """
        if not raw_text or not raw_text.strip():
            return []

        lines = self._split_lines(raw_text)
        if not lines:
            return []

        start, lines = self._find_section_start(lines)
        end = self._find_section_end(lines, start)
        logger.debug(f"Medicine section: lines {start}..{end} of {len(lines)}")

        entries = []
        for line_index, text in self._merge_lines(lines[start:end]):
            fixed = self.apply_ocr_fixes(text)
            if len(re.findall(r'[^\W\d_]', fixed)) < 2:
                continue
            entries.append(MedicineLineRaw(original_text=fixed, line_index=line_index))

        logger.info(f"Reconstructed {len(entries)} medicine entries from {len(lines)} OCR lines")
        return entries

    def apply_ocr_fixes(self, text: str) -> str:
        """Repair known letter-omission errors (whole words only)."""
        return self._ocr_fixer.fix(text)

    # ========================================================================
    # STEP 1: LINES
    # ========================================================================

    def _split_lines(self, raw_text: str) -> List[SourceLine]:
        lines = []
        for index, raw_line in enumerate(raw_text.splitlines()):
            line = re.sub(r'\s+', ' ', raw_line).strip()
            if not line:
                continue
            parts: List[str] = []
            for part in INLINE_ORDINAL_SPLIT.split(line):
                part = part.strip()
                if not part:
                    continue
                # "ngày uống 2. Sáng 1 viên" is a count followed by usage, not a new entry
                if parts and self._is_split_usage(part):
                    parts[-1] = f"{parts[-1]} {part}"
                else:
                    parts.append(part)
            lines.extend((index, part) for part in parts)
        return lines

    def _is_split_usage(self, part: str) -> bool:
        ordinal = ORDINAL_PATTERN.match(part)
        rest = part[ordinal.end():] if ordinal else part
        return self._is_usage_line(rest, fold_line(rest))

    # ========================================================================
    # STEP 2-3: SECTION BOUNDARIES
    # ========================================================================

    def _find_section_start(self, lines: List[SourceLine]) -> Tuple[int, List[SourceLine]]:
        """
        Find where the medicine list begins.

        Returns:
            (start position, lines) - a header line that also carries the
            first entry is replaced by that entry
        """
        for pos, (index, text) in enumerate(lines):
            match = SECTION_HEADER_PATTERN.match(fold_line(text))
            if not match:
                continue

            remainder = self._header_remainder(text, fold_line(text)[match.end():])
            if remainder:
                lines = lines[:pos] + [(index, remainder)] + lines[pos + 1:]
                return pos, lines
            return pos + 1, lines

        for pos, (_, text) in enumerate(lines):
            match = ORDINAL_PATTERN.match(text)
            if match and text[match.end():match.end() + 1].isupper():
                return pos, lines

        return 0, lines

    @staticmethod
    def _header_remainder(text: str, folded_remainder: str) -> str:
        """Raw text following a header phrase on the same line."""
        if not folded_remainder.strip(' :.'):
            return ""
        if ':' in text:
            return text.split(':', 1)[1].strip()
        match = re.search(r'\d{1,2}\s*[.)]\s*[^\W\d_]', text)
        return text[match.start():].strip() if match else ""

    def _find_section_end(self, lines: List[SourceLine], start: int) -> int:
        """
        Find the first stop marker after the section start.

        Stop markers only count once an entry-like line has been seen, so
        a doctor name printed above the list does not end it early.
        """
        seen_entry = False
        for pos in range(start, len(lines)):
            text = lines[pos][1]
            folded = fold_line(text)

            if ORDINAL_PATTERN.match(text) or contains_dosage(text):
                seen_entry = True
                continue
            if self._is_usage_line(text, folded):
                continue
            if seen_entry and self._is_stop_marker(folded):
                return pos
            if self._has_pharmaceutical_vocabulary(folded):
                seen_entry = True

        return len(lines)

    @staticmethod
    def _is_stop_marker(folded: str) -> bool:
        if DATE_FOOTER_PATTERN.search(folded):
            return True
        return any(pattern.search(folded) for pattern in STOP_MARKER_PATTERNS)

    def _is_usage_line(self, text: str, folded: str) -> bool:
        """
        Usage-instruction shape ("Sáng 1 viên", "Ngày uống 2 lần").

        A line naming a drug or carrying a dosage is an entry, not usage,
        even if it also mentions a quantity.
        """
        if DATE_FOOTER_PATTERN.search(folded):
            return False
        if not any(pattern.search(folded) for pattern in USAGE_LINE_PATTERNS):
            return False
        if contains_dosage(text):
            return False
        first_word = folded.split(' ', 1)[0]
        return not PHARMACEUTICAL_VOCABULARY_PATTERN.match(first_word)

    # ========================================================================
    # STEP 4: MERGE
    # ========================================================================

    def _merge_lines(self, lines: List[SourceLine]) -> List[SourceLine]:
        entries: List[SourceLine] = []
        current: Optional[List] = None  # [line_index, text]

        for index, text in lines:
            ordinal = ORDINAL_PATTERN.match(text)
            if ordinal:
                if current is not None:
                    entries.append((current[0], current[1]))
                current = [index, text[ordinal.end():].strip()]
                continue

            folded = fold_line(text)
            if self._is_usage_line(text, folded):
                # Usage lines interleave with entries; they neither extend nor close
                # one. A dispensed quantity ("SL: 20 viên") still belongs to it.
                if current is not None and SL_QUANTITY_PATTERN.match(text):
                    current[1] = f"{current[1]} {text}"
                continue

            if current is not None and self._continues(current[1], text):
                current[1] = f"{current[1]} {text}".strip()
                continue

            if current is not None:
                entries.append((current[0], current[1]))
                current = None

            if self._starts_entry(text, folded):
                current = [index, text]

        if current is not None:
            entries.append((current[0], current[1]))

        return [(index, text) for index, text in entries if text]

    @staticmethod
    def _continues(previous: str, line: str) -> bool:
        """True if ``line`` is a continuation of the entry ``previous``."""
        if not previous:
            return True
        first = line[0]
        if first.isalpha() and first.islower():
            return True
        if line.startswith(CONTINUATION_PREFIXES):
            return True
        if previous.count('(') > previous.count(')'):
            return True
        if previous.rstrip().endswith(TRAILING_CONTINUATION):
            return True
        # A strength broken onto its own line; a second named drug with its
        # own strength is a new entry
        if contains_dosage(line) and (not contains_dosage(previous) or first.isdigit()):
            return True
        return False

    def _starts_entry(self, text: str, folded: str) -> bool:
        """Un-numbered line that still names a medicine."""
        if any(pattern.search(folded) for pattern in _NON_MEDICINE_PATTERNS):
            return False
        return contains_dosage(text) or self._has_pharmaceutical_vocabulary(folded)

    @staticmethod
    def _has_pharmaceutical_vocabulary(folded: str) -> bool:
        return PHARMACEUTICAL_VOCABULARY_PATTERN.search(folded) is not None
