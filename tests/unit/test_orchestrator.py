# ============================================================================
# FILE: tests/unit/test_orchestrator.py
# ============================================================================
"""
Unit tests for the analysis orchestrator
"""

import pytest

from rx_matching.catalog.memory_catalog import InMemoryCatalog
from rx_matching.core.context.catalog_product import CatalogProduct
from rx_matching.core.context.enums import MatchType
from rx_matching.core.orchestrator import (
    AnalysisOrchestrator,
    NOTE_CATALOG_INCOMPLETE,
    NOTE_DUPLICATES,
    NOTE_LINE_ERRORS,
    NOTE_LOW_STOCK,
    NOTE_NO_LINES,
    NOTE_NO_TEXT,
    NOTE_NOT_FOUND,
    NOTE_PRESCRIPTION_ONLY,
)
from rx_matching.utils.metrics import MetricsCollector


class ReferenceTimeoutCatalog(InMemoryCatalog):
    """Reference lookups time out; name search works."""

    async def find_reference(self, name):
        raise TimeoutError("reference lookup timed out")


class SearchTimeoutCatalog(InMemoryCatalog):
    """Every name search times out."""

    async def search_by_name(self, pattern, **kwargs):
        raise TimeoutError("search timed out")


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def orchestrator(catalog, metrics):
    return AnalysisOrchestrator(catalog, config={'enable_metrics': True}, metrics=metrics)


# ============================================================================
# Happy paths
# ============================================================================

@pytest.mark.asyncio
async def test_simple_prescription(orchestrator):
    result = await orchestrator.analyze("1. Paracetamol 500mg\n2. Oresol\n")

    assert [m.product_id for m in result.found_medicines] == ["P001", "P005"]
    assert result.found_medicines[0].match_type == MatchType.EXACT
    assert result.found_medicines[1].match_type == MatchType.NAME_ONLY
    assert result.not_found_medicines == ()
    assert result.total_estimated_price == 4000.0
    assert result.requires_consultation is False
    assert result.confidence == pytest.approx(0.95)
    assert result.analysis_notes == ()


@pytest.mark.asyncio
async def test_full_prescription(orchestrator, sample_prescription_text):
    result = await orchestrator.analyze(sample_prescription_text)

    assert [m.product_id for m in result.found_medicines] == ["P004", "P001", "P005"]
    assert [m.line_index for m in result.found_medicines] == [4, 7, 9]
    assert result.found_medicines[1].quantity == 20
    assert result.total_estimated_price == 50500.0
    assert result.requires_consultation is True
    assert NOTE_PRESCRIPTION_ONLY in result.analysis_notes
    assert result.confidence == pytest.approx(0.95)


@pytest.mark.asyncio
async def test_found_medicine_is_enriched(orchestrator):
    result = await orchestrator.analyze("1. Amoxicilin 500mg")

    [medicine] = result.found_medicines
    assert medicine.group_therapeutic == "Kháng sinh"
    assert medicine.contraindication == "Dị ứng penicilin"
    assert result.requires_consultation is True
    assert result.analysis_notes == (NOTE_PRESCRIPTION_ONLY,)


@pytest.mark.asyncio
async def test_otc_only_needs_no_consultation(orchestrator):
    result = await orchestrator.analyze("1. Paracetamol 500mg\n2. Vitamin C 500mg")

    assert result.requires_consultation is False
    assert result.total_estimated_price == 2500.0


# ============================================================================
# Consultation rules
# ============================================================================

@pytest.mark.asyncio
async def test_low_stock_requires_consultation(orchestrator):
    result = await orchestrator.analyze("1. Prednisolon 5mg")

    assert result.found_medicines[0].product_id == "P008"
    assert result.requires_consultation is True
    assert NOTE_LOW_STOCK in result.analysis_notes


@pytest.mark.asyncio
async def test_not_found_line(orchestrator):
    result = await orchestrator.analyze("1. Xyzabc 100mg")

    assert result.found_medicines == ()
    [missing] = result.not_found_medicines
    assert missing.medicine_name == "Xyzabc 100mg"
    assert missing.suggestions == ()
    assert result.requires_consultation is True
    assert result.confidence == pytest.approx(0.40)
    assert NOTE_NOT_FOUND in result.analysis_notes


@pytest.mark.asyncio
async def test_not_found_line_gets_suggestions(orchestrator):
    result = await orchestrator.analyze("1. Celecoxib 200mg", suggestion_limit=2)

    [missing] = result.not_found_medicines
    assert [s.product.id for s in missing.suggestions] == ["P006", "P012"]


@pytest.mark.asyncio
async def test_mixed_lines_confidence(orchestrator):
    result = await orchestrator.analyze("1. Paracetamol 500mg\n2. Xyzabc 100mg")

    assert len(result.found_medicines) == 1
    assert len(result.not_found_medicines) == 1
    assert result.confidence == pytest.approx(0.60)


# ============================================================================
# Deduplication
# ============================================================================

@pytest.mark.asyncio
async def test_duplicate_lines_are_merged(orchestrator):
    result = await orchestrator.analyze("1. Paracetamol 500mg\n2. Paracetamol 500mg")

    assert len(result.found_medicines) == 1
    assert result.total_estimated_price == 1500.0
    assert NOTE_DUPLICATES in result.analysis_notes
    # Confidence is computed over all matched lines, before merging
    assert result.confidence == pytest.approx(0.95)


@pytest.mark.asyncio
async def test_same_ingredient_is_merged(orchestrator):
    result = await orchestrator.analyze("1. Paracetamol 500mg\n2. Hapacol 650mg")

    assert [m.product_id for m in result.found_medicines] == ["P001"]


# ============================================================================
# Degraded input
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   \n  ", None])
async def test_empty_text(orchestrator, text):
    result = await orchestrator.analyze(text)

    assert result.line_count == 0
    assert result.requires_consultation is True
    assert result.confidence == pytest.approx(0.30)
    assert result.analysis_notes == (NOTE_NO_TEXT,)


@pytest.mark.asyncio
async def test_no_medicine_lines(orchestrator, metrics):
    result = await orchestrator.analyze("12345\n!!!")

    assert result.line_count == 0
    assert result.requires_consultation is True
    assert result.confidence == pytest.approx(0.30)
    assert result.analysis_notes == (NOTE_NO_LINES,)
    assert metrics.get_counter('analyses_without_lines') == 1


@pytest.mark.asyncio
async def test_catalog_outage(failing_catalog, metrics):
    orchestrator = AnalysisOrchestrator(failing_catalog, config={'enable_metrics': True}, metrics=metrics)

    result = await orchestrator.analyze("1. Paracetamol 500mg")

    assert result.found_medicines == ()
    assert len(result.not_found_medicines) == 1
    assert result.requires_consultation is True
    assert NOTE_CATALOG_INCOMPLETE in result.analysis_notes
    assert metrics.get_counter('catalog_failures') == 1


@pytest.mark.asyncio
async def test_enrichment_failure_keeps_the_match(metrics):
    catalog = ReferenceTimeoutCatalog([CatalogProduct(id="A", name="Paracetamol 500mg", price=1500)])
    orchestrator = AnalysisOrchestrator(catalog, config={'enable_metrics': True}, metrics=metrics)

    result = await orchestrator.analyze("1. Paracetamol 500mg")

    [medicine] = result.found_medicines
    assert medicine.product_id == "A"
    assert medicine.active_ingredient is None
    assert result.total_estimated_price == 1500.0
    assert NOTE_LINE_ERRORS in result.analysis_notes
    assert metrics.get_counter('line_errors') == 1


@pytest.mark.asyncio
async def test_unexpected_lookup_failure_is_reported(metrics):
    catalog = SearchTimeoutCatalog([CatalogProduct(id="A", name="Paracetamol 500mg")])
    orchestrator = AnalysisOrchestrator(catalog, config={'enable_metrics': True}, metrics=metrics)

    result = await orchestrator.analyze("1. Paracetamol 500mg")

    [missing] = result.not_found_medicines
    assert missing.suggestions == ()
    assert result.requires_consultation is True
    assert NOTE_LINE_ERRORS in result.analysis_notes
    assert NOTE_CATALOG_INCOMPLETE not in result.analysis_notes


@pytest.mark.asyncio
async def test_short_fragment_is_not_found():
    """A two-letter OCR fragment is never resolved to a longer name"""
    catalog = InMemoryCatalog([CatalogProduct(id="D", name="Dexa 0.5mg", price=500)])

    result = await AnalysisOrchestrator(catalog).analyze("1. De 0.5mg")

    assert result.found_medicines == ()
    assert len(result.not_found_medicines) == 1
    assert result.confidence == pytest.approx(0.40)


# ============================================================================
# Helpers
# ============================================================================

@pytest.mark.asyncio
async def test_metrics_recorded(orchestrator, metrics):
    await orchestrator.analyze("1. Paracetamol 500mg\n2. Oresol\n3. Xyzabc 100mg")

    assert metrics.get_counter('lines_processed') == 3
    assert metrics.get_counter('exact_matches') == 1
    assert metrics.get_counter('name_only_matches') == 1
    assert metrics.get_counter('lines_not_found') == 1
    assert metrics.get_timer_stats('analysis')['count'] == 1


@pytest.mark.asyncio
async def test_metrics_disabled(memory_catalog, metrics):
    orchestrator = AnalysisOrchestrator(memory_catalog, config={'enable_metrics': False}, metrics=metrics)

    await orchestrator.analyze("1. Paracetamol 500mg")

    assert metrics.get_counter('lines_processed') == 0


def test_overall_confidence_bands(memory_catalog):
    orchestrator = AnalysisOrchestrator(memory_catalog)

    assert orchestrator.overall_confidence(0, 0) == pytest.approx(0.30)
    assert orchestrator.overall_confidence(0, 3) == pytest.approx(0.40)
    assert orchestrator.overall_confidence(3, 3) == pytest.approx(0.95)
    assert orchestrator.overall_confidence(1, 4) == pytest.approx(0.55)
    assert orchestrator.overall_confidence(9, 10) == pytest.approx(0.68)


@pytest.mark.asyncio
async def test_to_dict_shape(orchestrator):
    result = (await orchestrator.analyze("1. Paracetamol 500mg")).to_dict()

    assert set(result) == {
        'foundMedicines', 'notFoundMedicines', 'totalEstimatedPrice',
        'requiresConsultation', 'confidence', 'analysisNotes',
    }
    assert result['foundMedicines'][0]['productId'] == "P001"
    assert result['foundMedicines'][0]['matchType'] == "exact"
