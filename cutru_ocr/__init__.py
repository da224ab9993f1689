"""
Residence-registration (cư trú) OCR toolkit.

Extracts household member rows from scanned registration images and CT3A
table PDFs with a vision model, then normalizes the rows and repairs the
column mix-ups the model is known to make.
"""

__version__ = "0.1.0"

from .models import NormalizedRecord, CorrectionLog
from .normalization import normalize_records, guard_columns

__all__ = [
    "__version__",
    "NormalizedRecord",
    "CorrectionLog",
    "normalize_records",
    "guard_columns",
]
