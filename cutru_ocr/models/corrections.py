"""
Column-correction bookkeeping.

Every repair applied by the column guard is identified by a stable key so
that OCR quality drift can be monitored across batches.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

SWAP_HSCT_NATIONALITY = "swap_soHSCT_quocTich"
MOVE_HSCT_FROM_NATIONALITY = "move_soHSCT_from_quocTich"
MOVE_NATIONALITY_FROM_HSCT = "move_quocTich_from_soHSCT"
SWAP_ORIGIN_ADDRESS = "swap_queQuan_diaChiThuongTru"
MOVE_ADDRESS_FROM_ORIGIN = "move_diaChiThuongTru_from_queQuan"

CORRECTION_KEYS = (
    SWAP_HSCT_NATIONALITY,
    MOVE_HSCT_FROM_NATIONALITY,
    MOVE_NATIONALITY_FROM_HSCT,
    SWAP_ORIGIN_ADDRESS,
    MOVE_ADDRESS_FROM_ORIGIN,
)


def _zero_counts() -> dict[str, int]:
    return {key: 0 for key in CORRECTION_KEYS}


@dataclass
class CorrectionLog:
    """Counts of each correction kind applied across a batch."""

    counts: dict[str, int] = field(default_factory=_zero_counts)

    def record(self, key: str, times: int = 1) -> None:
        if key not in self.counts:
            raise KeyError(f"Unknown correction kind: {key}")
        self.counts[key] += times

    def record_all(self, keys: Iterable[str]) -> None:
        for key in keys:
            self.record(key)

    def merge(self, other: "CorrectionLog") -> "CorrectionLog":
        """Add another log's counts into this one (returns self)."""
        for key, value in other.counts.items():
            self.record(key, value)
        return self

    def get(self, key: str) -> int:
        return self.counts.get(key, 0)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def __bool__(self) -> bool:
        return self.total > 0

    def to_dict(self) -> dict[str, int]:
        return dict(self.counts)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CorrectionLog":
        log = cls()
        for key, value in data.items():
            if key in log.counts:
                log.counts[key] = int(value)
        return log

    def summary_str(self) -> str:
        """One-line summary listing only the kinds that fired."""
        fired = [f"{key}={count}" for key, count in self.counts.items() if count]
        if not fired:
            return "no column corrections"
        return f"{self.total} column correction(s): " + ", ".join(fired)
