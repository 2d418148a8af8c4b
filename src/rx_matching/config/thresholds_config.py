# ============================================================================
# src/rx_matching/config/thresholds_config.py
# ============================================================================
"""
Confidence Thresholds
- Catalog match bands (exact / name-only)
- Suggestion score bands and stock adjustments
- Overall analysis confidence
- Low-stock escalation
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

class ThresholdSettings(BaseSettings):
    # Catalog matcher
    EXACT_MATCH_CONFIDENCE: float = Field(
        default=0.95,
        ge=0.0, le=1.0,
        description="Same base name and same dosage"
    )
    NAME_ONLY_CONFIDENCE: float = Field(
        default=0.85,
        ge=0.0, le=1.0,
        description="Same base name, dosage missing on one side"
    )
    NAME_ONLY_DOSAGE_MISMATCH_CONFIDENCE: float = Field(
        default=0.80,
        ge=0.0, le=1.0,
        description="Same base name, both dosages present but different"
    )

    # Similarity ranker scores
    SAME_NAME_SAME_DOSAGE_SCORE: float = Field(default=0.95, ge=0.0, le=1.0)
    SAME_NAME_DIFFERENT_DOSAGE_SCORE: float = Field(default=0.80, ge=0.0, le=1.0)
    SIMILAR_NAME_SCORE: float = Field(default=0.70, ge=0.0, le=1.0)
    PARTIAL_NAME_SCORE: float = Field(default=0.40, ge=0.0, le=1.0)
    SAME_INDICATION_SAME_DOSAGE_SCORE: float = Field(default=0.35, ge=0.0, le=1.0)
    SAME_INDICATION_DIFFERENT_DOSAGE_SCORE: float = Field(default=0.30, ge=0.0, le=1.0)

    # Similarity ranker confidences (before stock adjustment)
    SAME_NAME_SAME_DOSAGE_CONFIDENCE: float = Field(default=0.90, ge=0.0, le=1.0)
    SAME_NAME_DIFFERENT_DOSAGE_CONFIDENCE: float = Field(default=0.75, ge=0.0, le=1.0)
    SIMILAR_NAME_CONFIDENCE: float = Field(default=0.65, ge=0.0, le=1.0)
    PARTIAL_NAME_CONFIDENCE: float = Field(default=0.45, ge=0.0, le=1.0)
    SAME_INDICATION_SAME_DOSAGE_CONFIDENCE: float = Field(default=0.35, ge=0.0, le=1.0)
    SAME_INDICATION_DIFFERENT_DOSAGE_CONFIDENCE: float = Field(default=0.30, ge=0.0, le=1.0)
    SUGGESTION_CONFIDENCE_CAP: float = Field(
        default=0.95,
        ge=0.0, le=1.0,
        description="Suggestions never claim more confidence than an exact match"
    )

    SIMILAR_NAME_THRESHOLD: float = Field(
        default=0.70,
        ge=0.0, le=1.0,
        description="Edit-distance similarity for the similar_name band"
    )
    MIN_SIMILARITY: float = Field(
        default=0.40,
        ge=0.0, le=1.0,
        description="Below this similarity a candidate is discarded outright"
    )

    # Stock / popularity adjustments
    STOCK_BONUS_DIVISOR: float = Field(
        default=100.0,
        gt=0.0,
        description="stock_quantity / divisor gives the in-stock bonus"
    )
    STOCK_BONUS_CAP: float = Field(default=0.10, ge=0.0, le=1.0)
    OUT_OF_STOCK_PENALTY: float = Field(default=0.10, ge=0.0, le=1.0)
    HOT_PRODUCT_BONUS: float = Field(default=0.05, ge=0.0, le=1.0)
    NEW_PRODUCT_BONUS: float = Field(default=0.03, ge=0.0, le=1.0)

    # Overall analysis confidence
    NO_LINES_CONFIDENCE: float = Field(
        default=0.30,
        ge=0.0, le=1.0,
        description="Nothing recognized as a medicine line; manual review required"
    )
    NONE_FOUND_CONFIDENCE: float = Field(default=0.40, ge=0.0, le=1.0)
    MIXED_BASE_CONFIDENCE: float = Field(default=0.50, ge=0.0, le=1.0)
    MIXED_RATIO_WEIGHT: float = Field(default=0.20, ge=0.0, le=1.0)
    MIXED_MAX_CONFIDENCE: float = Field(default=0.70, ge=0.0, le=1.0)
    ALL_FOUND_CONFIDENCE: float = Field(default=0.95, ge=0.0, le=1.0)

    LOW_STOCK_THRESHOLD: int = Field(
        default=10,
        ge=0,
        description="Matched products with fewer units than this require consultation"
    )

    @model_validator(mode="after")
    def check_band_order(self):
        """Match bands must stay strictly ordered so consumers can threshold safely."""
        match_bands = [
            self.EXACT_MATCH_CONFIDENCE,
            self.NAME_ONLY_CONFIDENCE,
            self.NAME_ONLY_DOSAGE_MISMATCH_CONFIDENCE,
        ]
        score_bands = [
            self.SAME_NAME_SAME_DOSAGE_SCORE,
            self.SAME_NAME_DIFFERENT_DOSAGE_SCORE,
            self.SIMILAR_NAME_SCORE,
            self.PARTIAL_NAME_SCORE,
            self.SAME_INDICATION_SAME_DOSAGE_SCORE,
            self.SAME_INDICATION_DIFFERENT_DOSAGE_SCORE,
        ]
        for bands in (match_bands, score_bands):
            if any(a <= b for a, b in zip(bands, bands[1:])):
                raise ValueError(f"Confidence bands must be strictly descending: {bands}")
        if self.MIN_SIMILARITY > self.SIMILAR_NAME_THRESHOLD:
            raise ValueError("MIN_SIMILARITY must not exceed SIMILAR_NAME_THRESHOLD")
        return self

threshold_settings = ThresholdSettings()
