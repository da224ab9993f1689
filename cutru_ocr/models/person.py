"""
Presentation-level person row.

PersonInfo is what the review table and the export layer consume: every
field is a plain string, and missing demographics take the customary
defaults of the registration forms.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Optional

from .record import NormalizedRecord
from ..normalization.classifiers import fold_text

DEFAULT_ETHNICITY = "Kinh"
DEFAULT_NATIONALITY = "Việt Nam"
MALE = "Nam"
FEMALE = "Nữ"


def normalize_sex(value: Optional[str]) -> str:
    """Map free-text sex to Nam/Nữ; unknown values default to Nam."""
    folded = fold_text(value)
    if folded in ("nu", "female", "f"):
        return FEMALE
    return MALE


@dataclass
class PersonInfo:
    """One person as shown in the review table."""

    stt: int = 0
    ho_ten: str = ""
    so_cccd: str = ""
    ngay_sinh: str = ""
    gioi_tinh: str = MALE
    que_quan: str = ""
    dan_toc: str = DEFAULT_ETHNICITY
    quoc_tich: str = DEFAULT_NATIONALITY
    so_hsct: str = ""
    quan_he_voi_chu_ho: str = ""
    o_dau_den: str = ""
    ngay_den: str = ""
    dia_chi_thuong_tru: str = ""

    @classmethod
    def from_record(cls, record: NormalizedRecord, stt: Optional[int] = None) -> "PersonInfo":
        return cls(
            stt=stt if stt is not None else record.sequence_in_household,
            ho_ten=record.full_name or "",
            so_cccd=record.document_number or "",
            ngay_sinh=record.birth_date or "",
            gioi_tinh=normalize_sex(record.sex),
            que_quan=record.origin_place or "",
            dan_toc=record.ethnicity or DEFAULT_ETHNICITY,
            quoc_tich=record.nationality or DEFAULT_NATIONALITY,
            so_hsct=record.document_code or "",
            quan_he_voi_chu_ho=record.relation_to_head or "",
            o_dau_den=record.came_from or "",
            ngay_den=record.arrival_date or "",
            dia_chi_thuong_tru=record.permanent_address or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def map_records_to_persons(records: list[NormalizedRecord], start_index: int = 1) -> list[PersonInfo]:
    """Number persons consecutively from ``start_index`` in batch order."""
    return [
        PersonInfo.from_record(record, stt=start_index + i)
        for i, record in enumerate(records)
    ]
