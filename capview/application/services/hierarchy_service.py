from __future__ import annotations

from capview.domain.company.repository import CompanyRepository
from capview.domain.company.value_objects import CompanyId
from capview.domain.hierarchy.entities import HierarchyLayout
from capview.domain.hierarchy.services import LayoutConfig, build_hierarchy

from ..dtos.hierarchy_dto import HierarchyDTO


class HierarchyService:
    def __init__(self, company_repo: CompanyRepository, config: LayoutConfig | None = None) -> None:
        self._company_repo = company_repo
        self._config = config or LayoutConfig()

    def get_layout(self, company_id: CompanyId) -> HierarchyLayout | None:
        company = self._company_repo.get_company(company_id)
        if company is None:
            return None
        return build_hierarchy(company, self._config)

    def get_hierarchy(self, company_id: CompanyId) -> HierarchyDTO | None:
        layout = self.get_layout(company_id)
        if layout is None:
            return None
        return HierarchyDTO.from_domain(company_id.valor, layout)
