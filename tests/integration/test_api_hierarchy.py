# tests/integration/test_api_hierarchy.py
import threading
from collections.abc import Generator
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from capview.application.services.hierarchy_export import HierarchyExporter
from capview.application.services.hierarchy_service import HierarchyService
from capview.domain.company.entities import Company, Involvement, PersonHolder, ShareAmounts
from capview.domain.company.value_objects import CompanyId
from capview.domain.hierarchy.export import Snapshot
from capview.domain.hierarchy.export_geometry import PagePlan
from capview.infrastructure.pdf_generator import PdfBackendUnavailable
from capview.infrastructure.rendering.svg_snapshotter import SvgSnapshotter
from capview.infrastructure.rendering.svg_viewport import SvgViewport
from capview.interfaces.api.dependencies import get_hierarchy_exporter, get_hierarchy_service
from capview.interfaces.api.main import app


class StubAssembler:
    media_type = "application/pdf"

    async def assemble(self, snapshot: Snapshot, plan: PagePlan, title: str) -> bytes:
        return b"%PDF-1.7 stub"


class MissingBackendAssembler:
    media_type = "application/pdf"

    async def assemble(self, snapshot: Snapshot, plan: PagePlan, title: str) -> bytes:
        raise PdfBackendUnavailable("PDF export requires weasyprint")


@pytest.fixture()
def stub_exporter(client: TestClient) -> Generator[None, None, None]:
    exporter = HierarchyExporter(SvgViewport(), SvgSnapshotter(), StubAssembler())
    app.dependency_overrides[get_hierarchy_exporter] = lambda: exporter
    yield
    app.dependency_overrides.pop(get_hierarchy_exporter, None)


def test_hierarchy_returns_nodes_and_edges(client: TestClient) -> None:
    response = client.get("/api/companies/acme/hierarchy")
    assert response.status_code == 200
    data = response.json()
    kinds = [n["kind"] for n in data["nodes"]]
    assert kinds == ["root", "group-header", "shareholder", "shareholder", "group-header", "representative"]
    assert len(data["edges"]) == 5


def test_shareholders_ordered_by_stake(client: TestClient) -> None:
    data = client.get("/api/companies/acme/hierarchy").json()
    shareholders = [n for n in data["nodes"] if n["kind"] == "shareholder"]
    assert [n["data"]["title"] for n in shareholders] == ["Alice Smith", "Beta Ltd"]
    assert shareholders[0]["data"]["nationality"] == "British"


def test_representative_roles_are_readable(client: TestClient) -> None:
    data = client.get("/api/companies/acme/hierarchy").json()
    rep = next(n for n in data["nodes"] if n["kind"] == "representative")
    assert rep["data"]["roles"] == ["NON EXECUTIVE DIRECTOR"]


def test_empty_company_has_only_root(client: TestClient) -> None:
    data = client.get("/api/companies/empty-co/hierarchy").json()
    assert [n["kind"] for n in data["nodes"]] == ["root"]
    assert data["edges"] == []


def test_hierarchy_unknown_company_returns_404(client: TestClient) -> None:
    assert client.get("/api/companies/nobody/hierarchy").status_code == 404


def test_hierarchy_upstream_failure_returns_502(client: TestClient) -> None:
    assert client.get("/api/companies/garbled/hierarchy").status_code == 502


def test_hierarchy_export_returns_pdf(client: TestClient, stub_exporter: None) -> None:
    response = client.get("/api/companies/acme/hierarchy/export")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "Acme Holdings-hierarchy.pdf" in response.headers["content-disposition"]
    assert response.content == b"%PDF-1.7 stub"


def test_hierarchy_export_without_pdf_backend_returns_501(client: TestClient) -> None:
    exporter = HierarchyExporter(SvgViewport(), SvgSnapshotter(), MissingBackendAssembler())
    app.dependency_overrides[get_hierarchy_exporter] = lambda: exporter
    try:
        response = client.get("/api/companies/acme/hierarchy/export")
    finally:
        app.dependency_overrides.pop(get_hierarchy_exporter, None)
    assert response.status_code == 501


def test_hierarchy_export_unknown_company_returns_404(client: TestClient, stub_exporter: None) -> None:
    assert client.get("/api/companies/nobody/hierarchy/export").status_code == 404


def test_export_of_non_latin_name_has_utf8_filename(client: TestClient, stub_exporter: None) -> None:
    response = client.get("/api/companies/kk/hierarchy/export")
    assert response.status_code == 200
    disposition = response.headers["content-disposition"]
    assert disposition.isascii()
    assert 'filename="____ Tokyo-hierarchy.pdf"' in disposition
    assert f"filename*=UTF-8''{quote('株式会社 Tokyo-hierarchy.pdf', safe='')}" in disposition


def test_export_of_quoted_name_keeps_header_well_formed(client: TestClient, stub_exporter: None) -> None:
    response = client.get("/api/companies/quoted/hierarchy/export")
    assert response.status_code == 200
    disposition = response.headers["content-disposition"]
    assert 'filename="Say _Hi_ _ Co-hierarchy.pdf";' in disposition
    assert "filename*=UTF-8''Say%20%22Hi%22%20%2F%20Co-hierarchy.pdf" in disposition


class ThreadRecordingRepo:
    """Remembers which thread fetched the company."""

    def __init__(self) -> None:
        self.fetch_thread: int | None = None

    def get_company(self, company_id: CompanyId) -> Company | None:
        self.fetch_thread = threading.get_ident()
        return Company(
            id=company_id.valor,
            name="Acme",
            issued_shares=1,
            involvements=(Involvement(id="p1", holder=PersonHolder(name="Owner"), shares=ShareAmounts(ordinary=1)),),
        )


class ThreadRecordingAssembler:
    media_type = "application/pdf"

    def __init__(self) -> None:
        self.loop_thread: int | None = None

    async def assemble(self, snapshot: Snapshot, plan: PagePlan, title: str) -> bytes:
        self.loop_thread = threading.get_ident()
        return b"%PDF-1.7 stub"


def test_export_fetches_company_off_the_event_loop(client: TestClient) -> None:
    """The blocking upstream fetch runs in a worker thread, not on the loop thread."""
    repo = ThreadRecordingRepo()
    assembler = ThreadRecordingAssembler()
    exporter = HierarchyExporter(SvgViewport(), SvgSnapshotter(), assembler)
    app.dependency_overrides[get_hierarchy_service] = lambda: HierarchyService(company_repo=repo)
    app.dependency_overrides[get_hierarchy_exporter] = lambda: exporter
    try:
        response = client.get("/api/companies/acme/hierarchy/export")
    finally:
        app.dependency_overrides.pop(get_hierarchy_service, None)
        app.dependency_overrides.pop(get_hierarchy_exporter, None)

    assert response.status_code == 200
    assert repo.fetch_thread is not None and assembler.loop_thread is not None
    assert repo.fetch_thread != assembler.loop_thread
