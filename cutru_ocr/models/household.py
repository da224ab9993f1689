"""
Household grouping.

Rows of a registration table are listed household by household: the head of
household ("Chủ hộ") opens a household and the following rows are its
members until the next head appears.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Any

from .person import PersonInfo
from ..normalization.classifiers import fold_text

HEAD_OF_HOUSEHOLD = "chu ho"


def is_head_of_household(relation: Optional[str]) -> bool:
    return fold_text(relation) == HEAD_OF_HOUSEHOLD


@dataclass
class Household:
    """A head of household plus members (head excluded from ``members``)."""
    id: str
    head: PersonInfo
    members: List[PersonInfo] = field(default_factory=list)

    @property
    def all_persons(self) -> List[PersonInfo]:
        return [self.head, *self.members]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "head": self.head.to_dict(),
            "members": [m.to_dict() for m in self.members],
        }


@dataclass
class HouseholdGroupResult:
    households: List[Household] = field(default_factory=list)
    total_persons: int = 0
    orphan_persons: List[PersonInfo] = field(default_factory=list)  # rows before any head

    def get_household(self, household_id: str) -> Optional[Household]:
        for household in self.households:
            if household.id == household_id:
                return household
        return None

    def household_summaries(self) -> List[dict[str, Any]]:
        """Short description of each household (for tabs/selection)."""
        return [
            {
                "id": h.id,
                "head_name": h.head.ho_ten,
                "member_count": len(h.all_persons),
                "address": h.head.dia_chi_thuong_tru,
            }
            for h in self.households
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "households": [h.to_dict() for h in self.households],
            "total_persons": self.total_persons,
            "orphan_persons": [p.to_dict() for p in self.orphan_persons],
        }


def group_by_household(persons: List[PersonInfo]) -> HouseholdGroupResult:
    """Split an ordered person list into households."""
    if not persons:
        return HouseholdGroupResult()

    households: List[Household] = []
    orphans: List[PersonInfo] = []
    current: Optional[Household] = None

    for person in persons:
        if is_head_of_household(person.quan_he_voi_chu_ho):
            current = Household(id=f"household-{len(households) + 1}", head=person)
            households.append(current)
        elif current is not None:
            current.members.append(person)
        else:
            orphans.append(person)

    return HouseholdGroupResult(
        households=households,
        total_persons=len(persons),
        orphan_persons=orphans,
    )
