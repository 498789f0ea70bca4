# capview/interfaces/api/routes/distribution_routes.py
from fastapi import APIRouter, Depends, HTTPException, Query

from capview.application.dtos.distribution_dto import DistributionDTO
from capview.application.services.distribution_service import DistributionService, UnknownViewError
from capview.domain.company.repository import CompanySourceError
from capview.domain.company.value_objects import CompanyId
from capview.interfaces.api.dependencies import get_distribution_service

router = APIRouter()


@router.get("/companies/{company_id_raw}/distribution", response_model=DistributionDTO)
def get_distribution(
    company_id_raw: str,
    view: str | None = Query(default=None),
    service: DistributionService = Depends(get_distribution_service),  # noqa: B008
) -> DistributionDTO:
    try:
        company_id = CompanyId(company_id_raw)
    except ValueError as err:
        raise HTTPException(status_code=422, detail="Invalid company id") from err

    try:
        distribution = service.get_distribution(company_id, view)
    except CompanySourceError as err:
        raise HTTPException(status_code=502, detail="Company data source unavailable") from err
    except UnknownViewError as err:
        raise HTTPException(status_code=404, detail=f"View not available: {err}") from err

    if distribution is None:
        raise HTTPException(status_code=404, detail="Company not found")
    return distribution
