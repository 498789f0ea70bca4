from __future__ import annotations

from typing import Protocol

from .entities import Company
from .value_objects import CompanyId


class CompanySourceError(RuntimeError):
    """The upstream company API failed or answered with an unusable payload."""


class CompanyRepository(Protocol):
    def get_company(self, company_id: CompanyId) -> Company | None: ...
