# ============================================================================
# src/rx_matching/core/orchestrator.py
# ============================================================================
"""
Analysis Orchestrator

This is the MAIN entry point for prescription analysis.

Flow:
1. Reconstruct medicine entries from OCR text (sequential)
2. Match every entry against the catalog (concurrent, one task per line)
3. Rank suggestions for entries without a match
4. Enrich matched products with therapeutic metadata
5. Fan-in: deduplicate, total the price, decide consultation, score

Nothing here is fatal to the caller: empty input, unparsable text and
catalog outages all degrade to a smaller result with an explanatory
note.
"""

import asyncio
import logging
import uuid
from typing import Any, Dict, List, Optional, Set, Tuple

from .config import get_config
from .context.analysis_result import AnalysisResult, FoundMedicine, NotFoundMedicine
from .context.enums import MatchType
from .context.line_context import LineContext
from .context.medicine_line import MedicineLineRaw
from ..catalog.base import CatalogQuery
from ..config import threshold_settings
from ..enrichers.base import TherapeuticInfo
from ..enrichers.product_enricher import ProductEnricher
from ..processors.prescription.agents import CatalogMatchAgent, SuggestionAgent
from ..processors.prescription.catalog_matcher import CatalogMatcher
from ..processors.prescription.line_reconstructor import LineReconstructor
from ..processors.prescription.similarity_ranker import SimilarityRanker
from ..utils.logging import LogAdapter
from ..utils.medicine_name_parser import prepare_candidate
from ..utils.metrics import MetricsCollector, Timer, get_metrics
from ..utils.text_normalizer import fold_line, main_active_ingredient

logger = logging.getLogger(__name__)

# Analysis notes (each emitted at most once per analysis)
NOTE_NO_TEXT = "No prescription text was provided; a pharmacist must review the prescription."
NOTE_NO_LINES = "No medicine entries could be read from the prescription; manual review required."
NOTE_PRESCRIPTION_ONLY = "Some medicines require a prescription; pharmacist consultation required."
NOTE_LOW_STOCK = "Some medicines are low or out of stock; please confirm availability with the pharmacist."
NOTE_NOT_FOUND = "Some medicines were not found in the catalog; please review the suggested alternatives."
NOTE_CATALOG_INCOMPLETE = "The catalog was unavailable for some lines; results may be incomplete."
NOTE_DUPLICATES = "Duplicate medicines were merged."
NOTE_LINE_ERRORS = "Some lines could not be fully processed; results may be incomplete."


class AnalysisOrchestrator:
    """
    Drives one prescription analysis end to end.

    Agents and reference tables are shared read-only by all concurrent
    line tasks; each task owns its LineContext.

    Args:
        catalog: Read-only catalog
        config: Overrides for core.config values
        metrics: Metrics collector (default: global collector)

    Example:
        orchestrator = AnalysisOrchestrator(InMemoryCatalog(products))
        result = await orchestrator.analyze("1. Paracetamol 500mg\\n2. Oresol")
    """

    def __init__(
        self,
        catalog: CatalogQuery,
        config: Optional[Dict[str, Any]] = None,
        reconstructor: Optional[LineReconstructor] = None,
        matcher: Optional[CatalogMatcher] = None,
        ranker: Optional[SimilarityRanker] = None,
        enricher: Optional[ProductEnricher] = None,
        thresholds=threshold_settings,
        metrics: Optional[MetricsCollector] = None
    ):
        self.config = {**get_config(), **(config or {})}
        self.catalog = catalog
        self.thresholds = thresholds
        self.metrics = metrics or get_metrics()
        self.metrics_enabled = bool(self.config.get('enable_metrics', True))

        self.reconstructor = reconstructor or LineReconstructor()
        self.match_agent = CatalogMatchAgent(matcher or CatalogMatcher(catalog), self.config)
        self.suggestion_agent = SuggestionAgent(
            ranker or SimilarityRanker(catalog),
            limit=self.config.get('suggestion_limit'),
            config=self.config
        )
        self.enricher = enricher or ProductEnricher(catalog)
        self.max_concurrent_lines = max(int(self.config.get('max_concurrent_lines', 8)), 1)

    # ========================================================================
    # MAIN PIPELINE
    # ========================================================================

    async def analyze(self, raw_text: Optional[str], suggestion_limit: Optional[int] = None) -> AnalysisResult:
        """
        Analyze OCR text of one prescription.

        Args:
            raw_text: OCR-extracted prescription text (may be empty)
            suggestion_limit: Suggestions per unmatched line (default from config)

        Returns:
            AnalysisResult (never raises for bad input or catalog outages)
        """
        log = LogAdapter(logger, {'analysis_id': uuid.uuid4().hex[:12]})

        if not raw_text or not raw_text.strip():
            log.info("Empty prescription text")
            return AnalysisResult(
                requires_consultation=True,
                confidence=self.thresholds.NO_LINES_CONFIDENCE,
                analysis_notes=(NOTE_NO_TEXT,),
            )

        with Timer(self.metrics, 'analysis') as timer:
            lines = self.reconstructor.reconstruct(raw_text)
            log.info(f"Reconstructed {len(lines)} medicine entries")

            semaphore = asyncio.Semaphore(self.max_concurrent_lines)
            contexts = await asyncio.gather(
                *(self._process_line(line, semaphore, suggestion_limit) for line in lines)
            )
            # Fan-in barrier: everything below sees all lines
            result = self._aggregate([c for c in contexts if c is not None], log)

        log.info(
            f"Analysis done in {timer.duration:.3f}s: {len(result.found_medicines)} found, "
            f"{len(result.not_found_medicines)} not found, confidence {result.confidence:.2f}"
        )
        return result

    async def _process_line(
        self,
        line: MedicineLineRaw,
        semaphore: asyncio.Semaphore,
        suggestion_limit: Optional[int]
    ) -> Optional[Tuple[LineContext, Optional[TherapeuticInfo]]]:
        """Match, suggest and enrich one line. Returns None for unparsable lines."""
        prepared = prepare_candidate(line.original_text)
        if not prepared.is_parsable:
            logger.debug(f"Skipping unparsable line {line.line_index}: '{line.original_text}'")
            return None

        context = LineContext(
            line=line,
            candidate=prepared.name,
            alternatives=prepared.alternatives,
            quantity=prepared.quantity,
            suggestion_limit=suggestion_limit,
        )

        async with semaphore:
            await self.match_agent.run(context)

            info = None
            if context.is_resolved:
                info = await self._enrich(context)
            elif not context.catalog_unavailable:
                await self.suggestion_agent.run(context)

        return context, info

    async def _enrich(self, context: LineContext) -> Optional[TherapeuticInfo]:
        """Enrichment is best-effort: a failure leaves the match without metadata."""
        try:
            return await self.enricher.enrich(context.match.product)
        except Exception as e:
            logger.error(f"Enrichment failed for '{context.match.product.name}': {e}", exc_info=True)
            context.add_error(f"Enrichment failed: {e}")
            return None

    # ========================================================================
    # AGGREGATION
    # ========================================================================

    def _aggregate(
        self,
        processed: List[Tuple[LineContext, Optional[TherapeuticInfo]]],
        log: LogAdapter
    ) -> AnalysisResult:
        notes: List[str] = []
        requires_consultation = False

        def note(text: str):
            if text not in notes:
                notes.append(text)

        if not processed:
            note(NOTE_NO_LINES)
            self._count('analyses_without_lines')
            return AnalysisResult(
                requires_consultation=True,
                confidence=self.thresholds.NO_LINES_CONFIDENCE,
                analysis_notes=tuple(notes),
            )

        found: List[FoundMedicine] = []
        not_found: List[NotFoundMedicine] = []

        for context, info in sorted(processed, key=lambda item: item[0].line.line_index):
            self._count('lines_processed')
            if context.catalog_unavailable:
                self._count('catalog_failures')
                note(NOTE_CATALOG_INCOMPLETE)
            if context.errors:
                self._count('line_errors')
                note(NOTE_LINE_ERRORS)

            if context.is_resolved:
                found.append(self._build_found(context, info))
                self._count(
                    'exact_matches' if context.match.match_type == MatchType.EXACT else 'name_only_matches'
                )
            else:
                not_found.append(NotFoundMedicine(
                    original_text=context.line.original_text,
                    line_index=context.line.line_index,
                    medicine_name=context.candidate,
                    quantity=context.quantity,
                    suggestions=tuple(context.suggestions),
                ))
                self._count('lines_not_found')

        matched_lines = len(found)
        total_lines = matched_lines + len(not_found)

        unique = self.deduplicate(found)
        if len(unique) < len(found):
            log.info(f"Dropped {len(found) - len(unique)} duplicate matches")
            note(NOTE_DUPLICATES)

        # Consultation is monotonic: once raised it stays raised
        for medicine in unique:
            if medicine.requires_prescription:
                requires_consultation = True
                note(NOTE_PRESCRIPTION_ONLY)
            if self.is_low_stock(medicine):
                requires_consultation = True
                note(NOTE_LOW_STOCK)
        if not_found:
            requires_consultation = True
            note(NOTE_NOT_FOUND)

        return AnalysisResult(
            found_medicines=tuple(unique),
            not_found_medicines=tuple(not_found),
            total_estimated_price=round(sum(m.line_total for m in unique), 2),
            requires_consultation=requires_consultation,
            confidence=self.overall_confidence(matched_lines, total_lines),
            analysis_notes=tuple(notes),
        )

    @staticmethod
    def _build_found(context: LineContext, info: Optional[TherapeuticInfo]) -> FoundMedicine:
        match = context.match
        product = match.product
        info = info or TherapeuticInfo()
        return FoundMedicine(
            product_id=product.id,
            product_name=product.name,
            price=product.price,
            unit=product.unit,
            in_stock=product.in_stock,
            stock_quantity=product.stock_quantity,
            requires_prescription=product.requires_prescription,
            confidence=match.confidence,
            original_text=context.line.original_text,
            line_index=context.line.line_index,
            quantity=context.quantity,
            match_type=match.match_type,
            match_reason=match.match_reason,
            active_ingredient=info.active_ingredient,
            group_therapeutic=info.therapeutic_group,
            contraindication=info.contraindication,
            indication=info.indication,
        )

    @staticmethod
    def deduplicate(found: List[FoundMedicine]) -> List[FoundMedicine]:
        """
        Drop later entries resolving to an already-seen product.

        Identity is the product id, the normalized product name, or the
        primary active ingredient. The first occurrence is kept as is.
        """
        seen_ids: Set[str] = set()
        seen_names: Set[str] = set()
        seen_ingredients: Set[str] = set()
        unique = []

        for medicine in found:
            name = fold_line(medicine.product_name)
            ingredient = main_active_ingredient(medicine.active_ingredient)
            if (
                medicine.product_id in seen_ids
                or name in seen_names
                or (ingredient and ingredient in seen_ingredients)
            ):
                logger.debug(f"Duplicate match dropped: '{medicine.original_text}' -> {medicine.product_name}")
                continue

            seen_ids.add(medicine.product_id)
            seen_names.add(name)
            if ingredient:
                seen_ingredients.add(ingredient)
            unique.append(medicine)

        return unique

    def is_low_stock(self, medicine: FoundMedicine) -> bool:
        return not medicine.in_stock or medicine.stock_quantity < self.thresholds.LOW_STOCK_THRESHOLD

    def overall_confidence(self, matched_lines: int, total_lines: int) -> float:
        """
        Confidence band from the share of lines that matched.

        no lines -> lowest band; none matched -> none-found band;
        all matched -> highest band; otherwise base + ratio * weight, capped.
        """
        t = self.thresholds
        if total_lines == 0:
            return t.NO_LINES_CONFIDENCE
        if matched_lines == 0:
            return t.NONE_FOUND_CONFIDENCE
        if matched_lines == total_lines:
            return t.ALL_FOUND_CONFIDENCE
        ratio = matched_lines / total_lines
        return min(t.MIXED_BASE_CONFIDENCE + ratio * t.MIXED_RATIO_WEIGHT, t.MIXED_MAX_CONFIDENCE)

    def _count(self, name: str):
        if self.metrics_enabled:
            self.metrics.increment(name)
