"""
Column-swap repair for a single normalized record.

The vision model regularly shifts values between visually adjacent columns
of the registration table. Two failure modes are repaired here:

- Quốc tịch (nationality) and Số HSCT (document code) exchanged, or one of
  them landing in the other's empty slot.
- A street-level address read into Quê quán (origin place) instead of
  Địa chỉ thường trú (permanent address).

Repairs only fire on a strong classifier signal; otherwise the record is
left as the model returned it.
"""

from __future__ import annotations

from typing import List, Tuple

from ..models.corrections import (
    SWAP_HSCT_NATIONALITY,
    MOVE_HSCT_FROM_NATIONALITY,
    MOVE_NATIONALITY_FROM_HSCT,
    SWAP_ORIGIN_ADDRESS,
    MOVE_ADDRESS_FROM_ORIGIN,
)
from ..models.record import NormalizedRecord
from .classifiers import (
    is_likely_detailed_address,
    is_likely_hsct_code,
    is_likely_nationality,
)


def guard_nationality_code(record: NormalizedRecord) -> Tuple[NormalizedRecord, List[str]]:
    """Repair the nationality / document-code pair."""
    nationality = record.nationality
    code = record.document_code

    nationality_looks_nationality = is_likely_nationality(nationality)
    nationality_looks_code = is_likely_hsct_code(nationality)
    code_looks_nationality = is_likely_nationality(code)

    if code_looks_nationality and nationality_looks_code:
        return record.copy(nationality=code, document_code=nationality), [SWAP_HSCT_NATIONALITY]

    if nationality_looks_code and code is None:
        return record.copy(nationality=None, document_code=nationality), [MOVE_HSCT_FROM_NATIONALITY]

    if not nationality_looks_nationality and nationality is None and code_looks_nationality:
        return record.copy(nationality=code, document_code=None), [MOVE_NATIONALITY_FROM_HSCT]

    return record, []


def guard_origin_address(record: NormalizedRecord) -> Tuple[NormalizedRecord, List[str]]:
    """Repair the origin-place / permanent-address pair."""
    origin = record.origin_place
    address = record.permanent_address

    origin_looks_address = is_likely_detailed_address(origin)
    address_looks_address = is_likely_detailed_address(address)

    if origin is not None and address is not None and origin_looks_address and not address_looks_address:
        return record.copy(origin_place=address, permanent_address=origin), [SWAP_ORIGIN_ADDRESS]

    if address is None and origin is not None and origin_looks_address:
        return record.copy(origin_place=None, permanent_address=origin), [MOVE_ADDRESS_FROM_ORIGIN]

    return record, []


def guard_columns(record: NormalizedRecord) -> Tuple[NormalizedRecord, List[str]]:
    """
    Apply both guards to one record.

    Returns the (possibly new) record and the correction keys that fired, in
    order. The input record is never mutated.
    """
    record, fired = guard_nationality_code(record)
    record, address_fired = guard_origin_address(record)
    return record, fired + address_fired
