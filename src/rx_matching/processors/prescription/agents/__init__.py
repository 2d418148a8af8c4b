# src/rx_matching/processors/prescription/agents/__init__.py

from .catalog_match_agent import CatalogMatchAgent
from .suggestion_agent import SuggestionAgent

__all__ = ["CatalogMatchAgent", "SuggestionAgent"]
