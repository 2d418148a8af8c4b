# ============================================================================
# data/catalog/populate_catalog_db.py
# ============================================================================
"""
Build catalog.db from a JSON product export.

Usage:
    python data/catalog/populate_catalog_db.py [products.json] [catalog.db]

Defaults to sample_products.json and catalog.db next to this script.
"""

import json
import sqlite3
import sys
from pathlib import Path

from rx_matching.catalog.sqlite_catalog import create_schema, insert_products
from rx_matching.core.context.catalog_product import CatalogProduct


def create_catalog_db(seed_file: Path, db_path: Path) -> int:
    """Load ``seed_file`` into a fresh products table at ``db_path``."""

    print(f"Loading from: {seed_file}")
    print(f"Creating database: {db_path}\n")

    if not seed_file.exists():
        print(f"ERROR: product export not found at: {seed_file}")
        return 0

    db_path.parent.mkdir(parents=True, exist_ok=True)

    with open(seed_file, 'r', encoding='utf-8') as f:
        products = [CatalogProduct.from_dict(item) for item in json.load(f)]

    conn = sqlite3.connect(db_path)
    try:
        conn.execute("DROP TABLE IF EXISTS products")
        create_schema(conn)
        count = insert_products(conn, products)

        in_stock = conn.execute("SELECT COUNT(*) FROM products WHERE in_stock = 1").fetchone()[0]
        prescription = conn.execute(
            "SELECT COUNT(*) FROM products WHERE requires_prescription = 1"
        ).fetchone()[0]
    finally:
        conn.close()

    db_size = db_path.stat().st_size / 1024

    print(f"{'='*60}")
    print(f"✓ Loaded {count:,} products")
    print(f"  - {in_stock:,} in stock")
    print(f"  - {prescription:,} prescription-only")
    print(f"  - Database size: {db_size:.1f} KB")
    print(f"{'='*60}")
    return count


if __name__ == "__main__":
    script_dir = Path(__file__).parent
    seed = Path(sys.argv[1]) if len(sys.argv) > 1 else script_dir / "sample_products.json"
    db = Path(sys.argv[2]) if len(sys.argv) > 2 else script_dir / "catalog.db"
    create_catalog_db(seed, db)
