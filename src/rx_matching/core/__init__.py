# ============================================================================
# src/rx_matching/core/__init__.py
# ============================================================================
"""
Core components for the prescription matching engine.

AnalysisOrchestrator lives in rx_matching.core.orchestrator and is not
imported here (it depends on the processors, which depend on core).
"""

from .context import (
    MatchType,
    MatchReason,
    MedicineLineRaw,
    ParsedMedicineName,
    CatalogProduct,
    MatchResult,
    Suggestion,
    AnalysisResult,
    FoundMedicine,
    NotFoundMedicine,
    LineContext,
)
from .agent_base import Agent
from .config import Config, get_config, get_config_instance, reload_config

__all__ = [
    "MatchType",
    "MatchReason",
    "MedicineLineRaw",
    "ParsedMedicineName",
    "CatalogProduct",
    "MatchResult",
    "Suggestion",
    "AnalysisResult",
    "FoundMedicine",
    "NotFoundMedicine",
    "LineContext",
    "Agent",
    "Config",
    "get_config",
    "get_config_instance",
    "reload_config",
]
