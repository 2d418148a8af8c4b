# ============================================================================
# src/rx_matching/utils/exceptions.py
# ============================================================================
"""
Custom exceptions for the prescription matching engine.
"""


class RxMatchingError(Exception):
    """Base exception for all prescription matching errors."""
    pass


class CatalogError(RxMatchingError):
    """Error talking to the product catalog."""
    pass


class CatalogUnavailableError(CatalogError):
    """Catalog could not be reached or opened."""
    pass


class CatalogQueryError(CatalogError):
    """Catalog rejected or failed a query."""
    pass


class ConfigurationError(RxMatchingError):
    """Invalid configuration."""
    pass
