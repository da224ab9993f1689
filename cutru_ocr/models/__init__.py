"""
Data models for the residence-registration OCR application.

These models represent the core data structures and are designed
to be easily serializable to JSON.
"""

from .record import NormalizedRecord, RawOcrRecord, FIELD_ALIASES, CT3A_COLUMNS
from .corrections import CorrectionLog, CORRECTION_KEYS
from .processing_stats import ProcessingStats, PageResult, AIUsage
from .person import PersonInfo, map_records_to_persons
from .household import Household, HouseholdGroupResult, group_by_household

__all__ = [
    # Record models
    "NormalizedRecord",
    "RawOcrRecord",
    "FIELD_ALIASES",
    "CT3A_COLUMNS",

    # Corrections
    "CorrectionLog",
    "CORRECTION_KEYS",

    # Processing stats
    "ProcessingStats",
    "PageResult",
    "AIUsage",

    # Presentation models
    "PersonInfo",
    "map_records_to_persons",
    "Household",
    "HouseholdGroupResult",
    "group_by_household",
]
