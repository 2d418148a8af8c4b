# ============================================================================
# FILE: tests/conftest.py
# ============================================================================
"""
Pytest configuration and shared fixtures for testing.
"""

import asyncio
import json
import sqlite3
from pathlib import Path

import pytest

from rx_matching.catalog.base import CatalogQuery
from rx_matching.catalog.memory_catalog import InMemoryCatalog
from rx_matching.catalog.sqlite_catalog import SQLiteCatalog, create_schema, insert_products
from rx_matching.core.context.catalog_product import CatalogProduct
from rx_matching.utils.exceptions import CatalogUnavailableError

SAMPLE_PRODUCTS_PATH = Path(__file__).parent.parent / "data" / "catalog" / "sample_products.json"


class FailingCatalog(CatalogQuery):
    """Catalog whose backend is down."""

    def __init__(self):
        self.calls = 0

    async def search_by_name(self, pattern, *, in_stock=None, prefix_only=False,
                             include_description=False, limit=50):
        self.calls += 1
        raise CatalogUnavailableError("catalog backend is down")

    async def find_by_active_ingredient(self, ingredient, *, in_stock=None, limit=20):
        self.calls += 1
        raise CatalogUnavailableError("catalog backend is down")

    async def find_by_therapeutic_group(self, group, *, in_stock=None, limit=20):
        self.calls += 1
        raise CatalogUnavailableError("catalog backend is down")


@pytest.fixture
def sample_products_path():
    return SAMPLE_PRODUCTS_PATH


@pytest.fixture
def sample_products(sample_products_path):
    """Products from the bundled seed file (P001-P012)"""
    with open(sample_products_path, 'r', encoding='utf-8') as f:
        return [CatalogProduct.from_dict(item) for item in json.load(f)]


@pytest.fixture
def memory_catalog(sample_products):
    """In-memory catalog with the sample products"""
    return InMemoryCatalog(sample_products)


@pytest.fixture
def sqlite_catalog(sample_products, tmp_path):
    """SQLite catalog with the sample products in a temporary database"""
    db_path = tmp_path / "catalog.db"
    conn = sqlite3.connect(db_path)
    create_schema(conn)
    insert_products(conn, sample_products)
    conn.close()

    catalog = SQLiteCatalog(db_path)
    yield catalog
    asyncio.run(catalog.close())


@pytest.fixture(params=["memory", "sqlite"])
def catalog(request, memory_catalog, sqlite_catalog):
    """Each catalog implementation in turn"""
    if request.param == "memory":
        return memory_catalog
    return sqlite_catalog


@pytest.fixture
def failing_catalog():
    return FailingCatalog()


@pytest.fixture
def sample_prescription_text():
    """Typical OCR output of a Vietnamese prescription"""
    return (
        "ĐƠN THUỐC\n"
        "Họ tên: Nguyễn Văn A    Tuổi: 45\n"
        "Chẩn đoán: Viêm họng cấp\n"
        "Thuốc điều trị:\n"
        "1. Augmentin\n"
        "875mg+125mg\n"
        "Sáng 1 viên, tối 1 viên\n"
        "2. Paracetamol 500mg\n"
        "SL: 20 viên\n"
        "3. Oresol\n"
        "Ngày uống 2 gói\n"
        "Lời dặn: uống nhiều nước\n"
        "Bác sĩ: Trần Văn B\n"
    )
