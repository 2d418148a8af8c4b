# ============================================================================
# src/rx_matching/core/config.py
# ============================================================================
"""
Centralized Runtime Configuration

Loads runtime wiring (catalog backend, concurrency, log level) from
environment variables (.env file) with sensible defaults. Scoring
thresholds live in rx_matching.config.

Usage:
    from rx_matching.core.config import get_config, Config

    # Get full config dict
    config = get_config()

    # Or use Config class for attribute access
    cfg = Config()
    print(cfg.catalog_backend)
"""

import os
from pathlib import Path
from typing import Dict, Any
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

from ..config import base_settings, matching_settings, logging_settings


def _load_dotenv():
    """Load .env file if it exists."""
    # Look for .env in project root
    env_path = Path(__file__).parent.parent.parent.parent / '.env'
    if env_path.exists():
        load_dotenv(env_path)
        return True

    # Also check current working directory
    cwd_env = Path.cwd() / '.env'
    if cwd_env.exists():
        load_dotenv(cwd_env)
        return True

    return False


def _get_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes', 'on')


def _get_int(key: str, default: int = 0) -> int:
    """Get integer from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class Config:
    """
    Configuration container with attribute access.

    All values are loaded from environment variables with defaults.
    """

    # General
    data_dir: str = field(default_factory=lambda: os.getenv('DATA_DIR', str(base_settings.DATA_DIR)))
    log_level: str = field(default_factory=lambda: os.getenv('LOG_LEVEL', logging_settings.LOG_LEVEL))
    log_json: bool = field(default_factory=lambda: _get_bool('LOG_JSON', logging_settings.LOG_JSON))
    enable_metrics: bool = field(default_factory=lambda: _get_bool('ENABLE_METRICS', logging_settings.ENABLE_METRICS))

    # Catalog ("sqlite" or "memory")
    catalog_backend: str = field(default_factory=lambda: os.getenv('CATALOG_BACKEND', 'sqlite'))
    catalog_db_path: str = field(default_factory=lambda: os.getenv('CATALOG_DB_PATH', str(base_settings.CATALOG_DB_PATH)))
    catalog_seed_path: str = field(default_factory=lambda: os.getenv('CATALOG_SEED_PATH', str(base_settings.CATALOG_SEED_PATH)))

    # Matching
    suggestion_limit: int = field(default_factory=lambda: _get_int('SUGGESTION_LIMIT', matching_settings.SUGGESTION_LIMIT))
    # Lines matched in parallel; each line issues several catalog queries
    max_concurrent_lines: int = field(default_factory=lambda: _get_int('MAX_CONCURRENT_LINES', matching_settings.MAX_CONCURRENT_LINES))

    def __post_init__(self):
        """Ensure .env is loaded before accessing values."""
        _load_dotenv()

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for passing to components."""
        return {
            # General
            'data_dir': self.data_dir,
            'log_level': self.log_level,
            'log_json': self.log_json,
            'enable_metrics': self.enable_metrics,

            # Catalog
            'catalog_backend': self.catalog_backend,
            'catalog_db_path': self.catalog_db_path,
            'catalog_seed_path': self.catalog_seed_path,

            # Matching
            'suggestion_limit': self.suggestion_limit,
            'max_concurrent_lines': self.max_concurrent_lines,
        }


@lru_cache(maxsize=1)
def get_config() -> Dict[str, Any]:
    """
    Get configuration dictionary.

    Cached - call once and pass to components.

    Returns:
        Configuration dictionary with all settings
    """
    _load_dotenv()
    return Config().to_dict()


def get_config_instance() -> Config:
    """
    Get Config instance for attribute access.

    Returns:
        Config instance with all settings
    """
    _load_dotenv()
    return Config()


def reload_config() -> Dict[str, Any]:
    """Reload configuration from environment."""
    get_config.cache_clear()
    return get_config()
