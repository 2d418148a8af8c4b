# ============================================================================
# src/rx_matching/utils/__init__.py
# ============================================================================
"""
Utility modules for the prescription matching engine.
"""

from .exceptions import (
    RxMatchingError,
    CatalogError,
    CatalogUnavailableError,
    CatalogQueryError,
    ConfigurationError,
)

from .logging import (
    setup_logging,
    JsonFormatter,
    LogAdapter,
    log_performance,
)

from .metrics import (
    MetricsCollector,
    Timer,
    get_metrics,
)

__all__ = [
    # Exceptions
    'RxMatchingError',
    'CatalogError',
    'CatalogUnavailableError',
    'CatalogQueryError',
    'ConfigurationError',

    # Logging
    'setup_logging',
    'JsonFormatter',
    'LogAdapter',
    'log_performance',

    # Metrics
    'MetricsCollector',
    'Timer',
    'get_metrics',
]
