# capview/infrastructure/repositories/http_company_repo.py
#
# Read-only adapter over the remote company API.
#
# Design decisions:
#   - One GET per snapshot: /companies/{id}. The payload may be wrapped in
#     {"data": ...} or returned bare; both are accepted.
#   - Parsing is lenient. Missing, null, negative or non-numeric share counts
#     become 0 and missing strings become "". The views downstream must render
#     something for partial upstream data rather than fail.
#   - Only structural failures raise: transport errors, error answers and a
#     body that is not a JSON object become CompanySourceError. A 404 is a
#     normal "not found" and returns None.
#   - Role tags arrive as enum-like strings (NON_EXECUTIVE_DIRECTOR); they
#     are turned into display text by replacing underscores with spaces.
from __future__ import annotations

import math
from dataclasses import replace
from typing import Any

import httpx

from capview.domain.company.entities import (
    Company,
    CompanyHolder,
    Involvement,
    PersonHolder,
    ShareAmounts,
    ShareClassTotal,
)
from capview.domain.company.repository import CompanySourceError
from capview.domain.company.value_objects import CompanyId, HolderType, normalize_class_label
from capview.infrastructure.log import log


def _count(value: object) -> int:
    """Non-negative integer share count; anything unusable is 0."""
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number) or number <= 0:
        return 0
    return int(number)


def _percentage(value: object) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _text(value: object) -> str:
    return str(value).strip() if value is not None else ""


def _as_dict(value: object) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _parse_involvement(raw: dict[str, Any]) -> Involvement:
    party_type = _text(raw.get("partyType")).upper()
    if party_type == HolderType.COMPANY:
        company = _as_dict(raw.get("holderCompany"))
        holder: PersonHolder | CompanyHolder = CompanyHolder(
            name=_text(company.get("name")),
            address=_text(company.get("address")),
        )
    else:
        person = _as_dict(raw.get("person"))
        holder = PersonHolder(
            name=_text(person.get("name")),
            address=_text(person.get("address")),
            nationality=_text(person.get("nationality")),
        )

    roles = raw.get("role") or raw.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]

    return Involvement(
        id=_text(raw.get("id") or raw.get("_id")),
        holder=holder,
        shares=ShareAmounts(
            a=_count(raw.get("classA")),
            b=_count(raw.get("classB")),
            c=_count(raw.get("classC")),
            ordinary=_count(raw.get("ordinary")),
        ),
        roles=tuple(_text(role).replace("_", " ") for role in roles if _text(role)),
        share_percentage=_percentage(raw.get("sharePercentage")),
    )


def parse_company(payload: dict[str, Any]) -> Company:
    """Map the remote JSON shape onto the Company aggregate."""
    share_classes = tuple(
        ShareClassTotal(label=normalize_class_label(_text(sc.get("class"))), issued=_count(sc.get("issued")))
        for sc in (payload.get("shareClasses") or [])
        if isinstance(sc, dict) and _text(sc.get("class"))
    )
    involvements = tuple(
        _parse_involvement(inv) for inv in (payload.get("involvements") or []) if isinstance(inv, dict)
    )
    return Company(
        id=_text(payload.get("id") or payload.get("_id")),
        name=_text(payload.get("name")),
        address=_text(payload.get("address")),
        authorized_shares=_count(payload.get("authorizedShares")),
        issued_shares=_count(payload.get("issuedShares")),
        share_classes=share_classes,
        involvements=involvements,
    )


class HttpCompanyRepo:
    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def get_company(self, company_id: CompanyId) -> Company | None:
        try:
            response = self._client.get(f"/companies/{company_id.valor}")
        except httpx.HTTPError as err:
            log(f"upstream request failed ({type(err).__name__})", company=company_id)
            raise CompanySourceError(f"Company API unreachable: {err}") from err

        if response.status_code == 404:
            return None
        if response.is_error:
            log(f"upstream answered {response.status_code}", company=company_id)
            raise CompanySourceError(f"Company API answered {response.status_code}")

        try:
            body = response.json()
        except ValueError as err:
            raise CompanySourceError("Company API returned invalid JSON") from err

        payload = body.get("data", body) if isinstance(body, dict) else None
        if not isinstance(payload, dict):
            raise CompanySourceError("Company API returned an unexpected payload")

        company = parse_company(payload)
        if not company.id:
            company = replace(company, id=company_id.valor)
        log(f"{len(company.involvements)} involvements fetched", company=company_id)
        return company
