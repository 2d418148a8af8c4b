# ============================================================================
# src/rx_matching/processors/prescription/catalog_matcher.py
# ============================================================================
"""
Catalog Matcher

Exact / name-only lookup of one medicine candidate against the catalog.

A bounded candidate pool is assembled from several widened text
patterns (prefix, substring, separator-tolerant, first word). A
candidate qualifies only when its base-name key equals or is similar
to the query's; the dosage decides between the exact and name-only
bands. The first qualifying candidate in discovery order wins, whatever
its band; picking the best alternative is the ranker's job.
"""

import logging
from typing import Dict, List, Optional

from ...catalog.base import CatalogQuery
from ...config import matching_settings, threshold_settings
from ...constants.ocr_fixes import OcrLetterFixer
from ...core.context.catalog_product import CatalogProduct
from ...core.context.enums import MatchType, MatchReason
from ...core.context.match_result import MatchResult
from ...core.context.medicine_line import ParsedMedicineName
from ...utils.exceptions import CatalogError
from ...utils.medicine_name_parser import parse_medicine_name
from ...utils.text_normalizer import normalize_key, normalize_dosage, keys_are_similar

logger = logging.getLogger(__name__)


def separator_variants(text: str) -> List[str]:
    """
    Spellings of a name under the separators catalogs use.

    Examples:
        "Vitamin C" -> ["Vitamin C", "Vitamin_C", "VitaminC", "Vitamin+C"]
    """
    text = text.strip()
    if not text:
        return []
    return [text, text.replace(' ', '_'), text.replace(' ', ''), text.replace(' ', '+')]


def base_names_match(query_key: str, product_key: str, min_suffix_length: int = 5) -> bool:
    """
    Base-name agreement between a query and a catalog product.

    Equal or similar keys (see keys_are_similar) match. A query key that
    is the product key minus up to two leading letters also matches,
    which covers OCR dropping the first letters of a word.
    """
    if keys_are_similar(query_key, product_key):
        return True
    if len(query_key) >= min_suffix_length and product_key.endswith(query_key):
        return len(product_key) - len(query_key) <= 2
    return False


class CatalogMatcher:
    """
    Finds the catalog product a medicine candidate names.

    Args:
        catalog: Read-only catalog
        ocr_fixer: Letter-omission fixer applied to candidates
    """

    def __init__(
        self,
        catalog: CatalogQuery,
        ocr_fixer: Optional[OcrLetterFixer] = None,
        settings=matching_settings,
        thresholds=threshold_settings
    ):
        self.catalog = catalog
        self.ocr_fixer = ocr_fixer or OcrLetterFixer()
        self.settings = settings
        self.thresholds = thresholds

    async def find_exact_match(self, candidate: str, original_text: str = "") -> Optional[MatchResult]:
        """
        Look up a candidate; never raises.

        Args:
            candidate: Cleaned medicine name, e.g. "Paracetamol 500mg"
            original_text: Entry text the candidate came from (logging only)

        Returns:
            MatchResult, or None when nothing qualifies or the catalog fails
        """
        try:
            return await self.match(candidate, original_text)
        except CatalogError as e:
            logger.warning(f"Catalog lookup failed for '{candidate}': {e}")
            return None

    async def match(self, candidate: str, original_text: str = "") -> Optional[MatchResult]:
        """
        Look up a candidate.

        Raises:
            CatalogError: Catalog unavailable or query failed
        """
        if not candidate or not candidate.strip():
            return None

        fixed = self.ocr_fixer.fix(candidate)
        parsed = parse_medicine_name(fixed)
        query_key = normalize_key(parsed.base_name)
        if len(query_key) < 2:
            return None

        pool = await self.gather_pool(parsed, fixed)
        result = self.select(parsed, pool)

        if result:
            logger.debug(
                f"'{original_text or candidate}' -> '{result.product.name}' "
                f"({result.match_type.value}, {result.confidence:.2f})"
            )
        else:
            logger.debug(f"No catalog match for '{original_text or candidate}' ({len(pool)} candidates)")
        return result

    def search_patterns(self, parsed: ParsedMedicineName, candidate: str) -> List[str]:
        """Widened search texts, most specific first, deduplicated."""
        patterns = separator_variants(parsed.base_name) + separator_variants(candidate)
        for text in (parsed.base_name, candidate):
            words = text.split()
            if words:
                patterns.append(words[0])

        unique = []
        for pattern in patterns:
            if len(pattern) >= 2 and pattern not in unique:
                unique.append(pattern)
        return unique

    async def gather_pool(self, parsed: ParsedMedicineName, candidate: str) -> List[CatalogProduct]:
        """Assemble the bounded candidate pool in discovery order."""
        cap = self.settings.EXACT_POOL_CAP
        pool: Dict[str, CatalogProduct] = {}

        for pattern in self.search_patterns(parsed, candidate):
            for product in await self.catalog.search_by_name(pattern, limit=cap):
                if len(pool) >= cap:
                    break
                pool.setdefault(product.id, product)
            if len(pool) >= cap:
                break

        words = parsed.base_name.split()
        if len(pool) < self.settings.BROAD_SEARCH_TRIGGER and words and len(words[0]) > 2:
            broad = await self.catalog.search_by_name(
                words[0], prefix_only=True, limit=self.settings.FIRST_WORD_LIMIT
            )
            for product in broad:
                if len(pool) >= cap:
                    break
                pool.setdefault(product.id, product)

        return list(pool.values())

    def evaluate(
        self,
        parsed: ParsedMedicineName,
        product: CatalogProduct
    ) -> Optional[MatchResult]:
        """Classify one candidate against the parsed query (pure)."""
        query_key = normalize_key(parsed.base_name)
        product_parsed = parse_medicine_name(product.name)
        product_key = normalize_key(product_parsed.base_name)

        if not base_names_match(query_key, product_key, self.settings.CONTAINMENT_MIN_KEY_LENGTH):
            return None

        query_dosage = normalize_dosage(parsed.dosage)
        product_dosage = normalize_dosage(product_parsed.dosage)

        if query_dosage and product_dosage:
            if query_dosage == product_dosage:
                return MatchResult(
                    product=product,
                    match_type=MatchType.EXACT,
                    match_reason=MatchReason.SAME_NAME_SAME_DOSAGE,
                    confidence=self.thresholds.EXACT_MATCH_CONFIDENCE,
                )
            return MatchResult(
                product=product,
                match_type=MatchType.NAME_ONLY,
                match_reason=MatchReason.SAME_NAME_DIFFERENT_DOSAGE,
                confidence=self.thresholds.NAME_ONLY_DOSAGE_MISMATCH_CONFIDENCE,
            )

        return MatchResult(
            product=product,
            match_type=MatchType.NAME_ONLY,
            match_reason=MatchReason.SAME_NAME_UNKNOWN_DOSAGE,
            confidence=self.thresholds.NAME_ONLY_CONFIDENCE,
        )

    def select(self, parsed: ParsedMedicineName, pool: List[CatalogProduct]) -> Optional[MatchResult]:
        """First qualifying candidate in pool order."""
        for product in pool:
            result = self.evaluate(parsed, product)
            if result is not None:
                return result
        return None
