# ============================================================================
# src/rx_matching/config/matching_config.py
# ============================================================================
"""
Catalog Search Settings
- Candidate pool sizes
- Suggestion limit
- Per-line concurrency
"""

from pydantic import Field
from pydantic_settings import BaseSettings

class MatchingSettings(BaseSettings):
    EXACT_POOL_CAP: int = Field(
        default=50,
        ge=1,
        description="Maximum catalog candidates gathered for one exact-match lookup"
    )
    BROAD_SEARCH_TRIGGER: int = Field(
        default=10,
        ge=0,
        description="Below this pool size, add a broader first-word search"
    )
    FIRST_WORD_LIMIT: int = Field(
        default=30,
        ge=1,
        description="Result limit for the first-word fallback search"
    )
    SUGGESTION_LIMIT: int = Field(
        default=5,
        ge=1, le=50,
        description="Maximum suggestions returned for an unmatched line"
    )
    MAX_CONCURRENT_LINES: int = Field(
        default=8,
        ge=1,
        description="Medicine lines matched concurrently against the catalog"
    )
    CONTAINMENT_MIN_KEY_LENGTH: int = Field(
        default=5,
        ge=1,
        description="Shortest name key allowed to match by containment (recovers dropped leading letters)"
    )

matching_settings = MatchingSettings()
