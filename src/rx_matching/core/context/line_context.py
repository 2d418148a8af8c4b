# ============================================================================
# src/rx_matching/core/context/line_context.py
# ============================================================================
"""
Line Context

Working state for one medicine line while agents run on it. Each
concurrent line task owns its own LineContext; nothing here is shared
across lines.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .medicine_line import MedicineLineRaw
from .match_result import MatchResult, Suggestion


@dataclass
class LineContext:
    line: MedicineLineRaw

    # Cleaned medicine name (usage/quantity removed) and alternate spellings
    # to try, e.g. a brand name written in parentheses
    candidate: str
    alternatives: List[str] = field(default_factory=list)
    quantity: int = 1
    # Per-request override of the suggestion count
    suggestion_limit: Optional[int] = None

    # Agent outputs
    match: Optional[MatchResult] = None
    suggestions: List[Suggestion] = field(default_factory=list)

    catalog_unavailable: bool = False
    warnings: List[str] = field(default_factory=list)
    # Unexpected failures (not catalog outages) while processing the line
    errors: List[str] = field(default_factory=list)
    agent_executions: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def candidates(self) -> List[str]:
        """Candidate spellings in the order they should be tried."""
        seen = []
        for text in [self.candidate, *self.alternatives]:
            if text and text not in seen:
                seen.append(text)
        return seen

    @property
    def is_resolved(self) -> bool:
        return self.match is not None

    def add_warning(self, warning: str):
        self.warnings.append(warning)

    def mark_catalog_unavailable(self, reason: str):
        self.catalog_unavailable = True
        self.add_warning(f"Catalog unavailable: {reason}")

    def add_error(self, error: str):
        self.errors.append(error)
        self.add_warning(error)

    def log_agent_execution(self, agent_name: str, decision: Dict[str, Any]):
        self.agent_executions.append({
            "agent": agent_name,
            "timestamp": datetime.now().isoformat(),
            **decision,
        })
