# ============================================================================
# src/rx_matching/processors/prescription/agents/catalog_match_agent.py
# ============================================================================
"""
Catalog Match Agent

Resolves a line to one catalog product. Candidate spellings are tried
in order (cleaned entry, then the brand written in parentheses); the
first spelling that yields a match wins.
"""

from typing import Dict, Any, Optional

from ....core.agent_base import Agent
from ....core.context.line_context import LineContext
from ....core.context.match_result import MatchResult
from ..catalog_matcher import CatalogMatcher


class CatalogMatchAgent(Agent):
    """Wraps CatalogMatcher for one LineContext."""

    def __init__(self, matcher: CatalogMatcher, config: Dict[str, Any] = None):
        super().__init__(config)
        self.matcher = matcher

    def get_name(self) -> str:
        return "CatalogMatchAgent"

    async def execute(self, context: LineContext) -> Dict[str, Any]:
        best: Optional[MatchResult] = None

        for candidate in context.candidates:
            # CatalogError propagates to run(), which flags the line
            best = await self.matcher.match(candidate, context.line.original_text)
            if best is not None:
                break

        context.match = best

        if best is None:
            return {
                "decision": "no_match",
                "confidence": 0.0,
                "reasoning": f"No catalog product matches '{context.candidate}'",
            }

        return {
            "decision": best.match_type.value,
            "confidence": best.confidence,
            "reasoning": f"Matched '{best.product.name}' ({best.match_reason.value})",
            "product_id": best.product.id,
        }
