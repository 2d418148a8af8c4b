# ============================================================================
# src/rx_matching/catalog/sqlite_catalog.py
# ============================================================================
"""
SQLite Product Catalog

Catalog backed by a local SQLite database (see
data/catalog/populate_catalog_db.py). Search columns are precomputed at
load time: ``name_search`` holds the folded lowercase name and
``name_compact`` the same text with separators removed, so prefix,
substring and separator-flexible matching are plain LIKE queries.

Queries run in a worker thread (asyncio.to_thread) so concurrent line
tasks do not block the event loop.
"""

import asyncio
import sqlite3
import logging
import threading
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

from .base import CatalogQuery, search_text, compact_text
from ..core.context.catalog_product import CatalogProduct
from ..utils.exceptions import CatalogUnavailableError, CatalogQueryError

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS products (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        name_search TEXT NOT NULL,
        name_compact TEXT NOT NULL,
        description TEXT,
        description_search TEXT,
        price REAL DEFAULT 0,
        unit TEXT DEFAULT '',
        stock_quantity INTEGER DEFAULT 0,
        in_stock INTEGER DEFAULT 1,
        requires_prescription INTEGER DEFAULT 0,
        therapeutic_group TEXT,
        group_search TEXT,
        active_ingredient TEXT,
        ingredient_search TEXT,
        indication TEXT,
        contraindication TEXT,
        brand TEXT,
        is_hot INTEGER DEFAULT 0,
        is_new INTEGER DEFAULT 0
    );
    CREATE INDEX IF NOT EXISTS idx_products_name_search ON products(name_search);
    CREATE INDEX IF NOT EXISTS idx_products_name_compact ON products(name_compact);
    CREATE INDEX IF NOT EXISTS idx_products_in_stock ON products(in_stock);
"""

_PRODUCT_COLUMNS = (
    "id, name, description, price, unit, stock_quantity, in_stock, "
    "requires_prescription, therapeutic_group, active_ingredient, indication, "
    "contraindication, brand, is_hot, is_new"
)


def _like_escape(text: str) -> str:
    return text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the products table and its indexes."""
    conn.executescript(SCHEMA)


def insert_products(conn: sqlite3.Connection, products: Iterable[CatalogProduct]) -> int:
    """
    Insert (or replace) products with their precomputed search columns.

    Returns:
        Number of rows written
    """
    rows = [
        (
            p.id, p.name, search_text(p.name), compact_text(p.name),
            p.description, search_text(p.description),
            p.price, p.unit, p.stock_quantity, int(p.in_stock),
            int(p.requires_prescription),
            p.therapeutic_group, search_text(p.therapeutic_group),
            p.active_ingredient, search_text(p.active_ingredient),
            p.indication, p.contraindication, p.brand,
            int(p.is_hot), int(p.is_new),
        )
        for p in products
    ]
    conn.executemany(
        "INSERT OR REPLACE INTO products VALUES "
        "(?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        rows
    )
    conn.commit()
    return len(rows)


def _row_to_product(row: sqlite3.Row) -> CatalogProduct:
    return CatalogProduct(
        id=row['id'],
        name=row['name'],
        price=float(row['price'] or 0.0),
        unit=row['unit'] or '',
        stock_quantity=int(row['stock_quantity'] or 0),
        in_stock=bool(row['in_stock']),
        requires_prescription=bool(row['requires_prescription']),
        therapeutic_group=row['therapeutic_group'],
        active_ingredient=row['active_ingredient'],
        indication=row['indication'],
        contraindication=row['contraindication'],
        description=row['description'],
        brand=row['brand'],
        is_hot=bool(row['is_hot']),
        is_new=bool(row['is_new']),
    )


class SQLiteCatalog(CatalogQuery):
    """
    SQLite-backed product catalog.

    The connection is opened lazily and shared between worker threads;
    a lock serializes access to it.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    def _connect(self) -> sqlite3.Connection:
        """Open the database, raising CatalogUnavailableError if it is missing."""
        if self._conn is not None:
            return self._conn

        if not self.db_path.exists():
            raise CatalogUnavailableError(
                f"Catalog database not found at {self.db_path}. "
                "Run 'python data/catalog/populate_catalog_db.py' to create it."
            )

        try:
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            logger.info(f"Connected to catalog database: {self.db_path}")
        except sqlite3.Error as e:
            raise CatalogUnavailableError(f"Cannot open catalog database {self.db_path}: {e}") from e
        return self._conn

    def _query(self, sql: str, params: Sequence[Any]) -> List[CatalogProduct]:
        with self._lock:
            conn = self._connect()
            try:
                rows = conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                logger.error(f"Catalog query failed: {e}")
                raise CatalogQueryError(str(e)) from e
        return [_row_to_product(row) for row in rows]

    @staticmethod
    def _stock_clause(in_stock: Optional[bool], params: List[Any]) -> str:
        if in_stock is None:
            return ""
        params.append(int(in_stock))
        return " AND in_stock = ?"

    def _search_by_name_sync(
        self,
        pattern: str,
        in_stock: Optional[bool],
        prefix_only: bool,
        include_description: bool,
        limit: int
    ) -> List[CatalogProduct]:
        needle = _like_escape(search_text(pattern))
        compact_needle = _like_escape(compact_text(pattern))
        if not compact_needle or limit <= 0:
            return []

        prefix_clause = "(name_search LIKE ? ESCAPE '\\' OR name_compact LIKE ? ESCAPE '\\')"
        prefix_params = [f"{needle}%", f"{compact_needle}%"]

        params: List[Any] = []
        if prefix_only:
            where = prefix_clause
            params.extend(prefix_params)
        else:
            clauses = ["name_search LIKE ? ESCAPE '\\'", "name_compact LIKE ? ESCAPE '\\'"]
            params.extend([f"%{needle}%", f"%{compact_needle}%"])
            if include_description:
                clauses.append("description_search LIKE ? ESCAPE '\\'")
                params.append(f"%{needle}%")
            where = "(" + " OR ".join(clauses) + ")"

        where += self._stock_clause(in_stock, params)
        params.extend(prefix_params)
        params.append(limit)

        sql = (
            f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE {where} "
            f"ORDER BY CASE WHEN {prefix_clause} THEN 0 ELSE 1 END, rowid "
            "LIMIT ?"
        )
        return self._query(sql, params)

    def _find_by_column_sync(
        self,
        column: str,
        value: str,
        in_stock: Optional[bool],
        limit: int
    ) -> List[CatalogProduct]:
        needle = _like_escape(search_text(value))
        if not needle or limit <= 0:
            return []
        params: List[Any] = [f"%{needle}%"]
        where = f"{column} LIKE ? ESCAPE '\\'" + self._stock_clause(in_stock, params)
        params.append(limit)
        sql = f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE {where} ORDER BY rowid LIMIT ?"
        return self._query(sql, params)

    async def search_by_name(
        self,
        pattern: str,
        *,
        in_stock: Optional[bool] = None,
        prefix_only: bool = False,
        include_description: bool = False,
        limit: int = 50
    ) -> List[CatalogProduct]:
        return await asyncio.to_thread(
            self._search_by_name_sync, pattern, in_stock, prefix_only, include_description, limit
        )

    async def find_by_active_ingredient(
        self,
        ingredient: str,
        *,
        in_stock: Optional[bool] = None,
        limit: int = 20
    ) -> List[CatalogProduct]:
        return await asyncio.to_thread(
            self._find_by_column_sync, "ingredient_search", ingredient, in_stock, limit
        )

    async def find_by_therapeutic_group(
        self,
        group: str,
        *,
        in_stock: Optional[bool] = None,
        limit: int = 20
    ) -> List[CatalogProduct]:
        return await asyncio.to_thread(
            self._find_by_column_sync, "group_search", group, in_stock, limit
        )

    def count(self) -> int:
        """Number of products in the catalog."""
        with self._lock:
            conn = self._connect()
            return conn.execute("SELECT COUNT(*) FROM products").fetchone()[0]

    async def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
