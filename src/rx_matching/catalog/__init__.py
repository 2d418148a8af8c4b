# ============================================================================
# src/rx_matching/catalog/__init__.py
# ============================================================================
"""
Read-only product catalog access.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from .base import CatalogQuery, search_text, compact_text
from .memory_catalog import InMemoryCatalog
from .sqlite_catalog import SQLiteCatalog
from ..utils.exceptions import ConfigurationError


def create_catalog(config: Optional[Dict[str, Any]] = None) -> CatalogQuery:
    """
    Build the catalog named by configuration.

    Args:
        config: Config dict (see core.config.get_config); uses
            ``catalog_backend``, ``catalog_db_path``, ``catalog_seed_path``

    Returns:
        CatalogQuery implementation
    """
    if config is None:
        from ..core.config import get_config
        config = get_config()

    backend = str(config.get('catalog_backend', 'sqlite')).lower()
    if backend == 'sqlite':
        return SQLiteCatalog(Path(config['catalog_db_path']))
    if backend == 'memory':
        return InMemoryCatalog.from_json(Path(config['catalog_seed_path']))
    raise ConfigurationError(f"Unknown catalog backend: '{backend}' (expected 'sqlite' or 'memory')")


__all__ = [
    'CatalogQuery',
    'InMemoryCatalog',
    'SQLiteCatalog',
    'create_catalog',
    'search_text',
    'compact_text',
]
