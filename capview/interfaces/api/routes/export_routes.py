# capview/interfaces/api/routes/export_routes.py
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from capview.application.services.distribution_service import DistributionService
from capview.application.services.export_service import ExportService
from capview.domain.company.repository import CompanySourceError
from capview.domain.company.value_objects import CompanyId
from capview.interfaces.api.dependencies import get_distribution_service, get_export_service

router = APIRouter()


@router.get("/companies/{company_id_raw}/distribution/export")
def export_distribution(
    company_id_raw: str,
    fmt: Literal["csv", "json"] = Query(..., alias="format"),
    distribution_service: DistributionService = Depends(get_distribution_service),  # noqa: B008
    export_service: ExportService = Depends(get_export_service),  # noqa: B008
) -> Response:
    try:
        company_id = CompanyId(company_id_raw)
    except ValueError as err:
        raise HTTPException(status_code=422, detail="Invalid company id") from err

    try:
        distribution = distribution_service.get_all_views(company_id)
    except CompanySourceError as err:
        raise HTTPException(status_code=502, detail="Company data source unavailable") from err
    if distribution is None:
        raise HTTPException(status_code=404, detail="Company not found")

    if fmt == "json":
        return Response(
            content=export_service.export_json(distribution),
            media_type="application/json",
        )
    return Response(
        content=export_service.export_csv(distribution),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={company_id.valor}-distribution.csv"},
    )
