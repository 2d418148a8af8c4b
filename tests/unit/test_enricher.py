# ============================================================================
# FILE: tests/unit/test_enricher.py
# ============================================================================
"""
Unit tests for therapeutic metadata enrichment
"""

import pytest

from rx_matching.catalog.memory_catalog import InMemoryCatalog
from rx_matching.core.context.catalog_product import CatalogProduct
from rx_matching.enrichers import ProductEnricher, TherapeuticInfo


def test_fill_missing_never_overwrites():
    info = TherapeuticInfo(therapeutic_group="NSAID", sources={"therapeutic_group": "product"})

    filled = info.fill_missing("class_table", therapeutic_group="Other", indication="Giảm đau")

    assert filled.therapeutic_group == "NSAID"
    assert filled.indication == "Giảm đau"
    assert filled.sources == {"therapeutic_group": "product", "indication": "class_table"}
    # Original is untouched
    assert info.indication is None


def test_fill_missing_ignores_empty_values():
    info = TherapeuticInfo()
    assert info.fill_missing("product", indication="", contraindication=None) is info


def test_to_dict_uses_api_field_names():
    data = TherapeuticInfo(active_ingredient="Ibuprofen").fill_missing("x").to_dict()
    assert data["activeIngredient"] == "Ibuprofen"
    assert data["groupTherapeutic"] is None


@pytest.mark.asyncio
async def test_complete_product_is_used_as_is(memory_catalog, sample_products):
    paracetamol = next(p for p in sample_products if p.id == "P001")

    info = await ProductEnricher(memory_catalog).enrich(paracetamol)

    assert info.is_complete
    assert set(info.sources.values()) == {"product"}


@pytest.mark.asyncio
async def test_enrich_from_catalog_reference(catalog):
    product = CatalogProduct(id="X1", name="Amoxicilin 250mg")

    info = await ProductEnricher(catalog).enrich(product)

    assert info.active_ingredient == "Amoxicilin"
    assert info.therapeutic_group == "Kháng sinh"
    assert info.indication == "Điều trị nhiễm khuẩn"
    assert info.contraindication == "Dị ứng penicilin"
    assert info.sources["indication"] == "catalog_reference"


@pytest.mark.asyncio
async def test_enrich_from_class_table():
    product = CatalogProduct(id="X2", name="Celecoxib 200mg")

    info = await ProductEnricher(InMemoryCatalog([])).enrich(product)

    assert info.therapeutic_group == "NSAID"
    assert info.indication == "Giảm đau, kháng viêm"
    assert info.active_ingredient == "celecoxib"
    assert info.contraindication is None
    assert info.sources["therapeutic_group"] == "class_table"


@pytest.mark.asyncio
async def test_enrich_survives_catalog_failure(failing_catalog):
    product = CatalogProduct(id="X3", name="Prednisolon 5mg", active_ingredient="Prednisolon")

    info = await ProductEnricher(failing_catalog).enrich(product)

    assert info.active_ingredient == "Prednisolon"
    assert info.sources["active_ingredient"] == "product"
    assert info.therapeutic_group == "Corticosteroid"


@pytest.mark.asyncio
async def test_enrich_unknown_product():
    info = await ProductEnricher(InMemoryCatalog([])).enrich(CatalogProduct(id="X4", name="Xyzabc 10mg"))
    assert info == TherapeuticInfo()
