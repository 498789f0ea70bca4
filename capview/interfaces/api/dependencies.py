# capview/interfaces/api/dependencies.py
from functools import lru_cache

from capview.application.services.distribution_service import DistributionService
from capview.application.services.export_service import ExportService
from capview.application.services.hierarchy_export import HierarchyExporter
from capview.application.services.hierarchy_service import HierarchyService
from capview.domain.hierarchy.services import LayoutConfig
from capview.infrastructure.config import get_settings
from capview.infrastructure.http_client import get_client
from capview.infrastructure.pdf_generator import WeasyPrintAssembler
from capview.infrastructure.rendering.svg_snapshotter import SvgSnapshotter
from capview.infrastructure.rendering.svg_viewport import SvgViewport
from capview.infrastructure.repositories.http_company_repo import HttpCompanyRepo


def get_company_repo() -> HttpCompanyRepo:
    return HttpCompanyRepo(get_client())


def get_distribution_service() -> DistributionService:
    return DistributionService(company_repo=get_company_repo())


def get_hierarchy_service() -> HierarchyService:
    settings = get_settings()
    return HierarchyService(
        company_repo=get_company_repo(),
        config=LayoutConfig(nodes_per_row=settings.nodes_per_row),
    )


def get_export_service() -> ExportService:
    return ExportService()


# One viewport per process: exports share it and are serialized by the exporter.
@lru_cache(maxsize=1)
def get_hierarchy_exporter() -> HierarchyExporter:
    return HierarchyExporter(
        viewport=SvgViewport(),
        snapshotter=SvgSnapshotter(),
        assembler=WeasyPrintAssembler(),
        settle_seconds=get_settings().export_settle_seconds,
    )
