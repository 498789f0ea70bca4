# capview/interfaces/api/routes/hierarchy_routes.py
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from capview.application.dtos.hierarchy_dto import HierarchyDTO
from capview.application.services.hierarchy_export import ExportInProgressError, HierarchyExporter
from capview.application.services.hierarchy_service import HierarchyService
from capview.domain.company.repository import CompanySourceError
from capview.domain.company.value_objects import CompanyId
from capview.infrastructure.log import log
from capview.infrastructure.pdf_generator import PdfBackendUnavailable
from capview.interfaces.api.dependencies import get_hierarchy_exporter, get_hierarchy_service

router = APIRouter()


def _content_disposition(filename: str) -> str:
    """Attachment header safe for any company name: an ASCII filename plus the
    RFC 6266 UTF-8 form. Header values must be Latin-1 encodable."""
    fallback = "".join(ch if ch.isascii() and ch.isprintable() and ch not in "\"\\/" else "_" for ch in filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _parse_id(company_id_raw: str) -> CompanyId:
    try:
        return CompanyId(company_id_raw)
    except ValueError as err:
        raise HTTPException(status_code=422, detail="Invalid company id") from err


@router.get("/companies/{company_id_raw}/hierarchy", response_model=HierarchyDTO)
def get_hierarchy(
    company_id_raw: str,
    service: HierarchyService = Depends(get_hierarchy_service),  # noqa: B008
) -> HierarchyDTO:
    company_id = _parse_id(company_id_raw)
    try:
        hierarchy = service.get_hierarchy(company_id)
    except CompanySourceError as err:
        raise HTTPException(status_code=502, detail="Company data source unavailable") from err

    if hierarchy is None:
        raise HTTPException(status_code=404, detail="Company not found")
    return hierarchy


@router.get("/companies/{company_id_raw}/hierarchy/export")
async def export_hierarchy(
    company_id_raw: str,
    service: HierarchyService = Depends(get_hierarchy_service),  # noqa: B008
    exporter: HierarchyExporter = Depends(get_hierarchy_exporter),  # noqa: B008
) -> Response:
    company_id = _parse_id(company_id_raw)
    try:
        layout = await run_in_threadpool(service.get_layout, company_id)
    except CompanySourceError as err:
        raise HTTPException(status_code=502, detail="Company data source unavailable") from err
    if layout is None:
        raise HTTPException(status_code=404, detail="Company not found")

    try:
        document = await exporter.export(layout)
    except ExportInProgressError as err:
        raise HTTPException(status_code=409, detail=str(err)) from err
    except PdfBackendUnavailable as err:
        raise HTTPException(status_code=501, detail=str(err)) from err
    except (RuntimeError, OSError, ValueError) as err:
        log(f"hierarchy export failed: {err!r}", company=company_id)
        raise HTTPException(status_code=503, detail="Export failed, safe to retry") from err

    if document is None:
        raise HTTPException(status_code=503, detail="Nothing to export, safe to retry")
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": _content_disposition(document.filename)},
    )
