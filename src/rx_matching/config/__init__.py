# ============================================================================
# src/rx_matching/config/__init__.py
# ============================================================================
"""
Convenient imports for all settings
"""

from .base_config import base_settings
from .matching_config import matching_settings
from .thresholds_config import threshold_settings
from .logging_config import logging_settings
