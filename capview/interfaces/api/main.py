# capview/interfaces/api/main.py
from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from capview.infrastructure.config import get_settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    from capview.infrastructure.http_client import close_client
    yield
    close_client()


app = FastAPI(
    title="capview API",
    debug=get_settings().debug,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url=None,
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next: object) -> Response:
    response = await call_next(request)  # type: ignore[misc]
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response  # type: ignore[return-value]


app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().cors_origins),
    allow_methods=["GET"],
    allow_headers=["*"],
)

from capview.interfaces.api.routes.export_routes import router as export_router  # noqa: E402
from capview.interfaces.api.routes.distribution_routes import router as distribution_router  # noqa: E402
from capview.interfaces.api.routes.hierarchy_routes import router as hierarchy_router  # noqa: E402

app.include_router(export_router, prefix="/api")
app.include_router(distribution_router, prefix="/api")
app.include_router(hierarchy_router, prefix="/api")
