"""
OCR field normalization.

Turns the vision model's loosely typed rows into NormalizedRecord values and
repairs known column-swap mistakes:

- values: null-ish string and integer coercion
- classifiers: nationality / HSCT code / detailed address predicates
- column_guard: swap and move repairs for one record
- records: batch entry point with an aggregate CorrectionLog
"""

from .values import (
    normalize_nullable_string,
    to_nullable_integer,
    to_required_positive_integer,
)
from .classifiers import (
    fold_text,
    is_likely_nationality,
    is_likely_detailed_address,
    is_likely_hsct_code,
)
from .column_guard import guard_columns
from .records import (
    NormalizationResult,
    clean_record,
    normalize_record,
    normalize_records,
)

__all__ = [
    "normalize_nullable_string",
    "to_nullable_integer",
    "to_required_positive_integer",
    "fold_text",
    "is_likely_nationality",
    "is_likely_detailed_address",
    "is_likely_hsct_code",
    "guard_columns",
    "NormalizationResult",
    "clean_record",
    "normalize_record",
    "normalize_records",
]
