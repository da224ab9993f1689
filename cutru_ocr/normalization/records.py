"""
Batch normalization of raw OCR records.

Entry point between the vision model's parsed JSON and everything
downstream. Output order and length always match the input, because the
review table binds rows by index.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from ..models.corrections import CorrectionLog
from ..models.record import NormalizedRecord, STRING_FIELDS, lookup_raw_value
from .column_guard import guard_columns
from .values import (
    normalize_nullable_string,
    to_nullable_integer,
    to_required_positive_integer,
)

logger = logging.getLogger(__name__)


@dataclass
class NormalizationResult:
    """Normalized records plus the corrections applied while producing them."""
    records: List[NormalizedRecord] = field(default_factory=list)
    corrections: CorrectionLog = field(default_factory=CorrectionLog)

    def __len__(self) -> int:
        return len(self.records)

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": [r.to_dict() for r in self.records],
            "corrections": self.corrections.to_dict(),
        }


def clean_record(raw: Any, position: int) -> NormalizedRecord:
    """
    Field-by-field cleanup without column repair.

    ``position`` is the 1-based index in the batch and becomes the household
    sequence when the model gave none. Non-mapping input yields an all-absent
    record.
    """
    if not isinstance(raw, Mapping):
        return NormalizedRecord(sequence_in_household=position)

    values = {
        name: normalize_nullable_string(lookup_raw_value(raw, name))
        for name in STRING_FIELDS
    }
    return NormalizedRecord(
        sequence_in_household=to_required_positive_integer(
            lookup_raw_value(raw, "sequence_in_household"), position
        ),
        row_index_hint=to_nullable_integer(lookup_raw_value(raw, "row_index_hint")),
        **values,
    )


def normalize_record(raw: Any, position: int) -> Tuple[NormalizedRecord, List[str]]:
    """Clean one raw record and run the column guard over it."""
    return guard_columns(clean_record(raw, position))


def normalize_records(raw_records: Optional[Sequence[Any]]) -> NormalizationResult:
    """
    Normalize a batch of raw OCR records.

    Args:
        raw_records: Records as decoded from the model's JSON. None yields an
            empty result; a single mapping is treated as a one-row batch.

    Returns:
        NormalizationResult with one record per input element, same order.
    """
    if raw_records is None:
        return NormalizationResult()
    if isinstance(raw_records, Mapping):
        raw_records = [raw_records]

    result = NormalizationResult()
    for index, raw in enumerate(raw_records):
        record, fired = normalize_record(raw, index + 1)
        result.records.append(record)
        result.corrections.record_all(fired)

    if result.corrections:
        logger.warning(
            f"Column guard applied {result.corrections.summary_str()} "
            f"across {len(result.records)} record(s)"
        )

    return result
