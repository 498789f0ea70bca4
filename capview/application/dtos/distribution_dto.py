from __future__ import annotations

from pydantic import BaseModel

from capview.domain.distribution.entities import DistributionView, Tab


class SliceDTO(BaseModel):
    name: str
    percentage: float    # 0-100
    shares: int
    category: str        # "Person" | "Company" | "Remaining" | "Class" | "Status"


class DistributionViewDTO(BaseModel):
    view_id: str
    label: str
    slices: list[SliceDTO]
    total_raw: float
    total_shares_sum: int
    current_class_total: int
    person_total: float = 0.0
    company_total: float = 0.0
    empty: bool = False   # True -> render the "no distribution data" state

    @classmethod
    def from_domain(cls, view: DistributionView) -> DistributionViewDTO:
        return cls(
            view_id=view.view_id,
            label=view.label,
            slices=[
                SliceDTO(name=s.name, percentage=s.percentage, shares=s.shares, category=s.category.value)
                for s in view.slices
            ],
            total_raw=view.total_raw,
            total_shares_sum=view.total_shares_sum,
            current_class_total=view.current_class_total,
            person_total=view.person_total,
            company_total=view.company_total,
            empty=view.is_empty,
        )


class TabDTO(BaseModel):
    id: str
    label: str

    @classmethod
    def from_domain(cls, tab: Tab) -> TabDTO:
        return cls(id=tab.id, label=tab.label)


class DistributionDTO(BaseModel):
    """One selected view plus the tab strip it was picked from."""

    company_id: str
    company_name: str
    tabs: list[TabDTO]
    selected: str
    view: DistributionViewDTO


class FullDistributionDTO(BaseModel):
    company_id: str
    company_name: str
    views: list[DistributionViewDTO]
