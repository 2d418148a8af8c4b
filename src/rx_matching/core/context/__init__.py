# src/rx_matching/core/context/__init__.py

from .enums import MatchType, MatchReason
from .medicine_line import MedicineLineRaw, ParsedMedicineName
from .catalog_product import CatalogProduct
from .match_result import MatchResult, Suggestion
from .analysis_result import AnalysisResult, FoundMedicine, NotFoundMedicine
from .line_context import LineContext

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
]
