from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    company_api_url: str
    company_api_token: str
    company_api_timeout: float
    nodes_per_row: int
    export_settle_seconds: float
    cors_origins: tuple[str, ...]
    debug: bool


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        company_api_url=os.environ.get("COMPANY_API_URL", "http://localhost:8080/api").rstrip("/"),
        company_api_token=os.environ.get("COMPANY_API_TOKEN", ""),
        company_api_timeout=float(os.environ.get("COMPANY_API_TIMEOUT", "10")),
        nodes_per_row=int(os.environ.get("HIERARCHY_NODES_PER_ROW", "3")),
        export_settle_seconds=float(os.environ.get("EXPORT_SETTLE_SECONDS", "0")),
        cors_origins=tuple(
            origin.strip()
            for origin in os.environ.get("CORS_ORIGINS", "http://localhost:5173").split(",")
            if origin.strip()
        ),
        debug=os.environ.get("API_DEBUG", "false").lower() == "true",
    )
