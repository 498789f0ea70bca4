from __future__ import annotations

from capview.domain.company.repository import CompanyRepository
from capview.domain.company.value_objects import CompanyId
from capview.domain.distribution.services import AUTHORIZED_VIEW, available_views, compute_distribution

from ..dtos.distribution_dto import DistributionDTO, DistributionViewDTO, FullDistributionDTO, TabDTO


class UnknownViewError(LookupError):
    """The requested view id is not offered for this company."""


class DistributionService:
    """Imperative Shell: fetch the snapshot, hand it to the pure normalizer."""

    def __init__(self, company_repo: CompanyRepository) -> None:
        self._company_repo = company_repo

    def get_distribution(self, company_id: CompanyId, view_id: str | None = None) -> DistributionDTO | None:
        company = self._company_repo.get_company(company_id)
        if company is None:
            return None

        distribution = compute_distribution(company)
        tabs = available_views(company)

        if view_id is None:
            ids = distribution.view_ids
            view_id = AUTHORIZED_VIEW if AUTHORIZED_VIEW in ids else ids[0]

        view = distribution.view(view_id)
        if view is None:
            raise UnknownViewError(view_id)

        return DistributionDTO(
            company_id=company.id,
            company_name=company.name,
            tabs=[TabDTO.from_domain(t) for t in tabs],
            selected=view_id,
            view=DistributionViewDTO.from_domain(view),
        )

    def get_all_views(self, company_id: CompanyId) -> FullDistributionDTO | None:
        company = self._company_repo.get_company(company_id)
        if company is None:
            return None

        return FullDistributionDTO(
            company_id=company.id,
            company_name=company.name,
            views=[DistributionViewDTO.from_domain(v) for v in compute_distribution(company).views],
        )
