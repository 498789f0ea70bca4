from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class SliceCategory(StrEnum):
    PERSON = "Person"
    COMPANY = "Company"
    REMAINING = "Remaining"
    CLASS = "Class"
    STATUS = "Status"


@dataclass(frozen=True)
class Slice:
    """One row of a breakdown: percentage in 0-100 plus the absolute share count."""

    name: str
    percentage: float
    shares: int
    category: SliceCategory


@dataclass(frozen=True)
class DistributionView:
    view_id: str
    label: str
    slices: tuple[Slice, ...] = ()
    total_raw: float = 0.0
    total_shares_sum: int = 0
    current_class_total: int = 0
    person_total: float = 0.0
    company_total: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.slices


@dataclass(frozen=True)
class Distribution:
    views: tuple[DistributionView, ...]

    @property
    def view_ids(self) -> list[str]:
        return [v.view_id for v in self.views]

    def view(self, view_id: str) -> DistributionView | None:
        for candidate in self.views:
            if candidate.view_id == view_id:
                return candidate
        return None


@dataclass(frozen=True)
class Tab:
    """Selectable view in the chart tab strip."""

    id: str
    label: str
