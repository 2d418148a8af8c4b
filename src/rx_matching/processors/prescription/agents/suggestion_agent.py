# ============================================================================
# src/rx_matching/processors/prescription/agents/suggestion_agent.py
# ============================================================================
"""
Suggestion Agent

Runs only for lines the catalog match agent left unresolved. Each
candidate spelling is ranked; suggestions from all spellings are merged
by product and re-sorted.
"""

from typing import Dict, Any, List, Optional

from ....core.agent_base import Agent
from ....core.context.line_context import LineContext
from ....core.context.match_result import Suggestion
from ..similarity_ranker import SimilarityRanker, sort_suggestions


class SuggestionAgent(Agent):
    """Wraps SimilarityRanker for one LineContext."""

    def __init__(
        self,
        ranker: SimilarityRanker,
        limit: Optional[int] = None,
        config: Dict[str, Any] = None
    ):
        super().__init__(config)
        self.ranker = ranker
        self.limit = limit

    def get_name(self) -> str:
        return "SuggestionAgent"

    async def execute(self, context: LineContext) -> Dict[str, Any]:
        if context.is_resolved:
            return {
                "decision": "skipped",
                "confidence": context.match.confidence,
                "reasoning": "Line already matched",
            }

        limit = context.suggestion_limit if context.suggestion_limit is not None else self.limit
        if limit is None:
            limit = self.config.get("suggestion_limit", self.ranker.settings.SUGGESTION_LIMIT)

        merged: Dict[str, Suggestion] = {}
        for candidate in context.candidates:
            for suggestion in await self.ranker.rank(candidate, context.line.original_text, limit):
                current = merged.get(suggestion.product.id)
                if current is None or (suggestion.score, suggestion.confidence) > (current.score, current.confidence):
                    merged[suggestion.product.id] = suggestion

        suggestions: List[Suggestion] = sort_suggestions(merged.values(), limit)
        context.suggestions = suggestions

        top = suggestions[0] if suggestions else None
        return {
            "decision": "suggested" if suggestions else "no_suggestions",
            "confidence": top.confidence if top else 0.0,
            "reasoning": (
                f"{len(suggestions)} suggestions, best '{top.product.name}' ({top.match_reason.value})"
                if top else f"No suggestions for '{context.candidate}'"
            ),
        }
