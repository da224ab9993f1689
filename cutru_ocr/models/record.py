"""
Residence record models.

A raw OCR record is whatever mapping the vision model produced for one table
row. NormalizedRecord is the cleaned, fully-shaped row the rest of the
application binds to.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, fields, replace
from typing import Optional, Any, Mapping, Tuple

# A row as decoded from the oracle's JSON; keys and value types are untrusted.
RawOcrRecord = Mapping[str, Any]


# Attribute name -> oracle keys that may carry it, in lookup priority.
# The CT3A (PDF table) layout comes first, household-image keys follow.
FIELD_ALIASES: dict[str, Tuple[str, ...]] = {
    "sequence_in_household": ("sttTrongHo", "stt", "sequenceInHousehold"),
    "row_index_hint": ("sttChinh", "rowIndexHint"),
    "full_name": ("hoTen", "fullName"),
    "document_number": ("soDDCN_CCCD", "soCCCD", "documentNumber"),
    "birth_date": ("ngaySinh", "birthDate"),
    "sex": ("gioiTinh", "sex"),
    "origin_place": ("queQuan", "originPlace"),
    "ethnicity": ("danToc", "ethnicity"),
    "nationality": ("quocTich", "nationality"),
    "document_code": ("soHSCT", "documentCode"),
    "relation_to_head": ("quanHeVoiChuHo", "relationToHead"),
    "came_from": ("oDauDen", "cameFrom"),
    "arrival_date": ("ngayDen", "arrivalDate"),
    "permanent_address": ("diaChiThuongTru", "hoKhauThuongTru", "permanentAddress"),
}

STRING_FIELDS: Tuple[str, ...] = (
    "full_name",
    "document_number",
    "birth_date",
    "sex",
    "origin_place",
    "ethnicity",
    "nationality",
    "document_code",
    "relation_to_head",
    "came_from",
    "arrival_date",
    "permanent_address",
)

# Column headers of the CT3A table, in printed order.
CT3A_COLUMNS: dict[str, str] = {
    "row_index_hint": "STT",
    "sequence_in_household": "STT trong hộ",
    "full_name": "Họ và tên",
    "document_number": "Số ĐDCN/CCCD",
    "birth_date": "Ngày sinh",
    "sex": "Giới tính",
    "origin_place": "Quê quán",
    "ethnicity": "Dân tộc",
    "nationality": "Quốc tịch",
    "document_code": "Số HSCT",
    "relation_to_head": "Quan hệ với chủ hộ",
    "came_from": "Ở đâu đến",
    "arrival_date": "Ngày đến",
    "permanent_address": "Địa chỉ thường trú",
}


def lookup_raw_value(raw: RawOcrRecord, attribute: str) -> Any:
    """
    Return the raw value feeding ``attribute``.

    The first alias present in ``raw`` wins, even when its value is null;
    the snake_case attribute name is tried last.
    """
    for key in FIELD_ALIASES[attribute] + (attribute,):
        if key in raw:
            return raw[key]
    return None


@dataclass
class NormalizedRecord:
    """
    One cleaned residence row.

    String fields hold a trimmed non-empty string or None (absent).
    ``sequence_in_household`` is always a positive integer.
    """

    sequence_in_household: int = 1
    row_index_hint: Optional[int] = None

    full_name: Optional[str] = None
    document_number: Optional[str] = None
    birth_date: Optional[str] = None
    sex: Optional[str] = None
    origin_place: Optional[str] = None
    ethnicity: Optional[str] = None
    nationality: Optional[str] = None
    document_code: Optional[str] = None  # Số HSCT
    relation_to_head: Optional[str] = None
    came_from: Optional[str] = None
    arrival_date: Optional[str] = None
    permanent_address: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    def to_ocr_dict(self) -> dict[str, Any]:
        """Convert to the CT3A key layout the vision model emits."""
        return {
            FIELD_ALIASES[f.name][0]: getattr(self, f.name)
            for f in fields(self)
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NormalizedRecord":
        """Create NormalizedRecord from a dictionary produced by to_dict()."""
        return cls(**{
            k: v for k, v in data.items()
            if k in cls.__dataclass_fields__
        })

    def copy(self, **changes: Any) -> "NormalizedRecord":
        return replace(self, **changes)

    @property
    def is_empty(self) -> bool:
        """True when no string field carries a value."""
        return all(getattr(self, name) is None for name in STRING_FIELDS)
