# tests/integration/conftest.py
from __future__ import annotations

import json
from collections.abc import Generator
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

UPSTREAM_URL = "http://companies.test/api"

ACME: dict[str, Any] = {
    "id": "acme",
    "name": "Acme Holdings",
    "address": "1 Main Street, London",
    "authorizedShares": 1000,
    "issuedShares": 600,
    "shareClasses": [
        {"class": "ORDINARY", "issued": 400},
        {"class": "CLASS_A", "issued": 200},
    ],
    "involvements": [
        {
            "id": "inv-alice",
            "partyType": "PERSON",
            "person": {"name": "Alice Smith", "address": "2 High Street", "nationality": "British"},
            "ordinary": 300,
            "classA": 100,
            "role": ["SHAREHOLDER"],
        },
        {
            "id": "inv-beta",
            "partyType": "COMPANY",
            "holderCompany": {"name": "Beta Ltd", "address": "3 Dock Road"},
            "ordinary": 100,
            "classA": 100,
        },
        {
            "id": "inv-carol",
            "partyType": "PERSON",
            "person": {"name": "Carol Jones"},
            "role": ["NON_EXECUTIVE_DIRECTOR"],
        },
    ],
}

EMPTY_CO: dict[str, Any] = {"id": "empty-co", "name": "Empty Co"}

# Company names that cannot go verbatim into a header value.
AWKWARD_NAMES = {
    "kk": "株式会社 Tokyo",
    "quoted": "Say \"Hi\" / Co",
}


def _single_owner(company_id: str, name: str) -> dict[str, Any]:
    return {
        "id": company_id,
        "name": name,
        "issuedShares": 1,
        "involvements": [{"id": "p1", "partyType": "PERSON", "person": {"name": "Owner"}, "ordinary": 1}],
    }


def upstream_handler(request: httpx.Request) -> httpx.Response:
    """Fake company API: a few known companies, broken ids, 404 otherwise."""
    path = request.url.path
    if path == "/api/companies/acme":
        return httpx.Response(200, json={"data": ACME})
    if path == "/api/companies/empty-co":
        return httpx.Response(200, json=EMPTY_CO)
    company_id = path.rsplit("/", 1)[-1]
    if company_id in AWKWARD_NAMES:
        return httpx.Response(200, json=_single_owner(company_id, AWKWARD_NAMES[company_id]))
    if path == "/api/companies/broken":
        return httpx.Response(500, text="upstream exploded")
    if path == "/api/companies/garbled":
        return httpx.Response(200, content=b"<html>not json</html>")
    return httpx.Response(404, content=json.dumps({"error": "not found"}).encode())


@pytest.fixture()
def upstream_client() -> Generator[httpx.Client, None, None]:
    client = httpx.Client(transport=httpx.MockTransport(upstream_handler), base_url=UPSTREAM_URL)
    yield client
    client.close()


@pytest.fixture(scope="session")
def client() -> Generator[TestClient, None, None]:
    """TestClient with the upstream company API replaced by a MockTransport."""
    from capview.infrastructure import http_client
    http_client.set_client(
        httpx.Client(transport=httpx.MockTransport(upstream_handler), base_url=UPSTREAM_URL)
    )

    from capview.infrastructure.config import get_settings
    get_settings.cache_clear()

    from capview.interfaces.api.main import app
    with TestClient(app) as c:
        yield c
