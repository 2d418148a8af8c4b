# ============================================================================
# src/rx_matching/processors/prescription/similarity_ranker.py
# ============================================================================
"""
Similarity Ranker

Ranked suggestions for a medicine line the catalog matcher could not
resolve. Suggestion sources are an ordered list of strategies; each
gathers its own candidate pool from the catalog and scores it with a
pure function. The first strategy that produces suggestions wins.

1. NameSimilarityStrategy - edit distance, base-name agreement and
   dosage equality, in fixed score bands:
       same_name_same_dosage       0.95
       same_name_different_dosage  0.80
       similar_name (sim >= 0.7)   0.70
       partial_name_match (>= 0.4) 0.40
   Candidates below 0.4 similarity are discarded.
2. TherapeuticClassStrategy - products sharing the active ingredient or
   therapeutic group of the prescribed medicine (from catalog reference
   data, else the fixed high-risk class table), in lower bands:
       same_indication_same_dosage       0.35
       same_indication_different_dosage  0.30

Stock and popularity adjust a suggestion's confidence, never its band:
suggestions sort by band score, then by adjusted confidence.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from ...catalog.base import CatalogQuery
from ...config import matching_settings, threshold_settings
from ...constants.therapeutic_classes import THERAPEUTIC_CLASSES, TherapeuticClass, find_therapeutic_class
from ...core.context.catalog_product import CatalogProduct
from ...core.context.enums import MatchReason
from ...core.context.match_result import Suggestion
from ...core.context.medicine_line import ParsedMedicineName
from ...utils.exceptions import CatalogError
from ...utils.medicine_name_parser import parse_medicine_name
from ...utils.text_normalizer import (
    normalize_key,
    dosages_match,
    name_similarity,
    main_active_ingredient,
)
from .catalog_matcher import base_names_match, separator_variants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankingQuery:
    """Parsed form of the line being ranked."""
    candidate: str
    parsed: ParsedMedicineName
    key: str
    limit: int

    @classmethod
    def from_candidate(cls, candidate: str, limit: int) -> "RankingQuery":
        parsed = parse_medicine_name(candidate)
        return cls(
            candidate=candidate,
            parsed=parsed,
            key=normalize_key(parsed.base_name),
            limit=limit,
        )


def stock_adjustment(product: CatalogProduct, thresholds=threshold_settings) -> float:
    """
    Confidence adjustment for availability and popularity.

    In stock: +stock/divisor capped; out of stock: fixed penalty.
    Hot and new products get a small bonus.
    """
    if product.in_stock:
        adjustment = min(
            max(product.stock_quantity, 0) / thresholds.STOCK_BONUS_DIVISOR,
            thresholds.STOCK_BONUS_CAP
        )
    else:
        adjustment = -thresholds.OUT_OF_STOCK_PENALTY
    if product.is_hot:
        adjustment += thresholds.HOT_PRODUCT_BONUS
    if product.is_new:
        adjustment += thresholds.NEW_PRODUCT_BONUS
    return adjustment


def sort_suggestions(suggestions: Iterable[Suggestion], limit: int) -> List[Suggestion]:
    """Band score first, adjusted confidence second; stable for ties."""
    ordered = sorted(suggestions, key=lambda s: (s.score, s.confidence), reverse=True)
    return ordered[:max(limit, 0)]


class SuggestionStrategy(ABC):
    """One source of suggestions: gather a pool, then score it."""

    name = "strategy"

    def __init__(self, catalog: CatalogQuery, thresholds=threshold_settings):
        self.catalog = catalog
        self.thresholds = thresholds

    @abstractmethod
    async def gather(self, query: RankingQuery) -> List[CatalogProduct]:
        """Fetch candidate products (may raise CatalogError)."""
        pass

    @abstractmethod
    def rank(self, query: RankingQuery, pool: Sequence[CatalogProduct]) -> List[Suggestion]:
        """Score and order the pool (pure)."""
        pass

    async def suggest(self, query: RankingQuery) -> Optional[List[Suggestion]]:
        """Suggestions from this strategy, or None if it has nothing to offer."""
        pool = await self.gather(query)
        suggestions = self.rank(query, pool)
        return suggestions or None


class NameSimilarityStrategy(SuggestionStrategy):
    """Suggestions whose names resemble the prescribed medicine."""

    name = "name_similarity"

    def __init__(self, catalog: CatalogQuery, thresholds=threshold_settings, settings=matching_settings):
        super().__init__(catalog, thresholds)
        self.settings = settings

    async def gather(self, query: RankingQuery) -> List[CatalogProduct]:
        limit = query.limit
        pool: Dict[str, CatalogProduct] = {}

        def add(products: Iterable[CatalogProduct]):
            for product in products:
                pool.setdefault(product.id, product)

        for pattern in separator_variants(query.parsed.base_name):
            if len(pattern) < 2:
                continue
            in_stock = await self.catalog.search_by_name(pattern, in_stock=True, limit=limit * 10)
            add(in_stock)
            # Out-of-stock items are still clinically useful when stock is scarce
            if len(in_stock) < limit * 2:
                add(await self.catalog.search_by_name(pattern, in_stock=False, limit=limit * 5))
            if len(pool) >= limit * 5:
                break

        words = query.parsed.base_name.split()
        if len(pool) < limit * 3 and words and len(words[0]) > 2:
            first_word = words[0]
            in_stock = await self.catalog.search_by_name(
                first_word, in_stock=True, include_description=True, limit=limit * 5
            )
            add(in_stock)
            if len(in_stock) < limit * 2:
                add(await self.catalog.search_by_name(
                    first_word, in_stock=False, include_description=True, limit=limit * 3
                ))

        return list(pool.values())

    def score(self, query: RankingQuery, product: CatalogProduct) -> Optional[Suggestion]:
        """Band one candidate; None when it falls below the similarity floor."""
        t = self.thresholds
        product_parsed = parse_medicine_name(product.name)
        product_key = normalize_key(product_parsed.base_name)
        similarity = name_similarity(query.key, product_key)
        if similarity < t.MIN_SIMILARITY:
            return None

        same_name = base_names_match(query.key, product_key, self.settings.CONTAINMENT_MIN_KEY_LENGTH)
        if same_name and dosages_match(query.parsed.dosage, product_parsed.dosage):
            reason, score, confidence = (
                MatchReason.SAME_NAME_SAME_DOSAGE,
                t.SAME_NAME_SAME_DOSAGE_SCORE,
                t.SAME_NAME_SAME_DOSAGE_CONFIDENCE,
            )
        elif same_name:
            reason, score, confidence = (
                MatchReason.SAME_NAME_DIFFERENT_DOSAGE,
                t.SAME_NAME_DIFFERENT_DOSAGE_SCORE,
                t.SAME_NAME_DIFFERENT_DOSAGE_CONFIDENCE,
            )
        elif similarity >= t.SIMILAR_NAME_THRESHOLD:
            reason, score, confidence = (
                MatchReason.SIMILAR_NAME,
                t.SIMILAR_NAME_SCORE,
                t.SIMILAR_NAME_CONFIDENCE,
            )
        else:
            reason, score, confidence = (
                MatchReason.PARTIAL_NAME_MATCH,
                t.PARTIAL_NAME_SCORE,
                t.PARTIAL_NAME_CONFIDENCE,
            )

        adjusted = confidence + stock_adjustment(product, t)
        return Suggestion(
            product=product,
            match_reason=reason,
            confidence=max(0.0, min(adjusted, t.SUGGESTION_CONFIDENCE_CAP)),
            score=score,
            similarity=similarity,
        )

    def rank(self, query: RankingQuery, pool: Sequence[CatalogProduct]) -> List[Suggestion]:
        if not query.key:
            return []
        scored = [s for s in (self.score(query, p) for p in pool) if s is not None]
        return sort_suggestions(scored, query.limit)


class TherapeuticClassStrategy(SuggestionStrategy):
    """
    Clinically related alternatives: same active ingredient, then same
    therapeutic group.
    """

    name = "therapeutic_class"

    def __init__(
        self,
        catalog: CatalogQuery,
        thresholds=threshold_settings,
        classes: Sequence[TherapeuticClass] = THERAPEUTIC_CLASSES
    ):
        super().__init__(catalog, thresholds)
        self.classes = classes

    async def _resolve_target(self, query: RankingQuery):
        """
        Active ingredient, therapeutic group and the reference product id.

        Catalog reference data is preferred; the fixed class table covers
        medicines the catalog knows nothing about.
        """
        lookups = [query.parsed.base_name]
        words = query.parsed.base_name.split()
        if len(words) > 1 and len(words[0]) > 3:
            lookups.append(words[0])

        for name in lookups:
            reference = await self.catalog.find_reference(name)
            if reference is None:
                continue
            if not base_names_match(query.key, normalize_key(parse_medicine_name(reference.name).base_name)) \
                    and normalize_key(name) not in normalize_key(reference.name):
                continue
            ingredient = main_active_ingredient(reference.active_ingredient)
            if ingredient or reference.therapeutic_group:
                return ingredient, reference.therapeutic_group, reference.id

        therapeutic_class = find_therapeutic_class(query.candidate, self.classes)
        if therapeutic_class:
            return therapeutic_class.member_for(query.candidate), therapeutic_class.name, None
        return None, None, None

    async def gather(self, query: RankingQuery) -> List[CatalogProduct]:
        ingredient, group, reference_id = await self._resolve_target(query)
        if not ingredient and not group:
            return []

        limit = query.limit
        pool: Dict[str, CatalogProduct] = {}

        def add(products: Iterable[CatalogProduct]):
            for product in products:
                if product.id != reference_id:
                    pool.setdefault(product.id, product)

        if ingredient:
            in_stock = await self.catalog.find_by_active_ingredient(ingredient, in_stock=True, limit=limit * 4)
            add(in_stock)
            if len(in_stock) < limit:
                add(await self.catalog.find_by_active_ingredient(ingredient, in_stock=False, limit=limit * 2))
        if group and len(pool) < limit * 2:
            add(await self.catalog.find_by_therapeutic_group(group, limit=limit * 4))

        logger.debug(
            f"Therapeutic fallback for '{query.candidate}': ingredient={ingredient}, "
            f"group={group}, {len(pool)} candidates"
        )
        return list(pool.values())

    def score(self, query: RankingQuery, product: CatalogProduct) -> Suggestion:
        t = self.thresholds
        product_parsed = parse_medicine_name(product.name)
        if dosages_match(query.parsed.dosage, product_parsed.dosage):
            reason, score, confidence = (
                MatchReason.SAME_INDICATION_SAME_DOSAGE,
                t.SAME_INDICATION_SAME_DOSAGE_SCORE,
                t.SAME_INDICATION_SAME_DOSAGE_CONFIDENCE,
            )
        else:
            reason, score, confidence = (
                MatchReason.SAME_INDICATION_DIFFERENT_DOSAGE,
                t.SAME_INDICATION_DIFFERENT_DOSAGE_SCORE,
                t.SAME_INDICATION_DIFFERENT_DOSAGE_CONFIDENCE,
            )

        # Availability can lower a related-drug suggestion but never lift it
        # toward the name-based bands
        adjusted = min(confidence + stock_adjustment(product, t), confidence)
        return Suggestion(
            product=product,
            match_reason=reason,
            confidence=max(0.0, adjusted),
            score=score,
            similarity=name_similarity(query.key, normalize_key(product_parsed.base_name)),
        )

    def rank(self, query: RankingQuery, pool: Sequence[CatalogProduct]) -> List[Suggestion]:
        return sort_suggestions((self.score(query, p) for p in pool), query.limit)


class SimilarityRanker:
    """
    Runs suggestion strategies in order until one produces suggestions.

    Args:
        catalog: Read-only catalog
        strategies: Ordered strategies (default: name similarity, then
            therapeutic class)
    """

    def __init__(
        self,
        catalog: CatalogQuery,
        strategies: Optional[Sequence[SuggestionStrategy]] = None,
        settings=matching_settings
    ):
        self.catalog = catalog
        self.settings = settings
        self.strategies = list(strategies) if strategies is not None else [
            NameSimilarityStrategy(catalog),
            TherapeuticClassStrategy(catalog),
        ]

    async def rank_similar(
        self,
        candidate: str,
        original_text: str = "",
        limit: Optional[int] = None
    ) -> List[Suggestion]:
        """
        Ranked suggestions for an unmatched candidate; never raises.

        Args:
            candidate: Cleaned medicine name
            original_text: Entry text the candidate came from (logging only)
            limit: Maximum suggestions (default from settings)

        Returns:
            Suggestions sorted by descending score, at most ``limit``
        """
        try:
            return await self.rank(candidate, original_text, limit)
        except CatalogError as e:
            logger.warning(f"Suggestion lookup failed for '{candidate}': {e}")
            return []

    async def rank(
        self,
        candidate: str,
        original_text: str = "",
        limit: Optional[int] = None
    ) -> List[Suggestion]:
        """
        Ranked suggestions for an unmatched candidate.

        Raises:
            CatalogError: Catalog unavailable or query failed
        """
        limit = self.settings.SUGGESTION_LIMIT if limit is None else limit
        if not candidate or not candidate.strip() or limit <= 0:
            return []

        query = RankingQuery.from_candidate(candidate, limit)
        if not query.key:
            return []

        for strategy in self.strategies:
            suggestions = await strategy.suggest(query)
            if suggestions:
                logger.debug(
                    f"{strategy.name}: {len(suggestions)} suggestions for "
                    f"'{original_text or candidate}'"
                )
                return suggestions[:limit]

        logger.debug(f"No suggestions for '{original_text or candidate}'")
        return []
