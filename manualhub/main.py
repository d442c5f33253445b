"""Application entry point for the FastAPI backend."""
from __future__ import annotations

import logging
from typing import Any, Iterable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .database import init_db, session_scope
from .errors import CatalogError
from .routers import auth_router, brands_router, categories_router, chat_router, manuals_router, models_router
from .schemas import CommonResponse
from .services import IngestionError, ModelNameError, ensure_default_admin

logger = logging.getLogger(__name__)

settings = get_settings()
APP_NAME = settings.app_name
API_VERSION = settings.api_version

app = FastAPI(title=APP_NAME, version=API_VERSION)

if settings.cors_origins:
    origins: Iterable[str] = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
else:
    origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(brands_router)
app.include_router(categories_router)
app.include_router(models_router)
app.include_router(manuals_router)
app.include_router(chat_router)


def _error_details(exc: CatalogError) -> dict[str, Any] | None:
    details: dict[str, Any] = {}
    cause = exc
    if isinstance(exc, IngestionError):
        details["stage"] = exc.stage.value
        details["modelName"] = exc.model_name
        cause = exc.cause
    if isinstance(cause, ModelNameError):
        details["reason"] = cause.reason.value
    return details or None


@app.exception_handler(CatalogError)
async def _catalog_error_handler(_request: Request, exc: CatalogError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed: %s (%s)", exc.message, type(exc).__name__)
    body = CommonResponse(message=exc.message, data=_error_details(exc))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.on_event("startup")
async def _startup() -> None:
    """Ensure database schema and the default administrator exist before serving."""

    try:
        init_db()
    except Exception:
        logger.exception("Database initialisation failed")
        raise

    with session_scope() as session:
        ensure_default_admin(session)


@app.get("/api", tags=["system"])
def api_info() -> dict[str, str]:
    return {"service": APP_NAME, "version": API_VERSION}


@app.get("/health", tags=["system"])
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
