"""
app/main.py

FastAPI application factory for the weekly KPI service.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import inspect as sa_inspect
from sqlalchemy import text
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def _validate_env() -> None:
    """
    Fail fast when no database URL is configured.

    Raises RuntimeError listing every problem so the operator can fix them
    in one restart cycle.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    database_url = os.getenv("DATABASE_URL", "").strip()
    cloud_database_url = os.getenv("CLOUD_DATABASE_URL", "").strip()
    local_database_url = os.getenv("LOCAL_DATABASE_URL", "").strip()
    if not (database_url or cloud_database_url or local_database_url):
        errors.append(
            "No database URL configured. Set DATABASE_URL, LOCAL_DATABASE_URL "
            "or CLOUD_DATABASE_URL."
        )

    for name in ("GOOGLE_SHEETS_TIMEOUT_SECONDS",):
        raw_value = os.getenv(name)
        if raw_value is None:
            continue
        try:
            float(raw_value)
        except ValueError:
            errors.append(f"{name}='{raw_value}' is not a number.")

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db(engine: Engine) -> None:
    """Run SELECT 1. Raises RuntimeError if the DB is unreachable."""

    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema(engine: Engine) -> None:
    """
    Abort startup when a table registered on Base.metadata is missing.

    Does NOT auto-migrate; run ``alembic upgrade head`` first.
    """

    import db.models  # noqa: F401
    from db.base import Base

    actual: set[str] = set(sa_inspect(engine).get_table_names())
    missing = set(Base.metadata.tables.keys()) - actual
    if missing:
        logger.critical(
            "Schema mismatch tables_missing=%s. Run 'alembic upgrade head' and restart.",
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Build the engine and session factory on app.state; dispose on exit."""

    from db.session import create_db_engine, create_session_factory

    engine = create_db_engine()
    _check_db(engine)
    logger.info("Database connectivity confirmed")
    _check_schema(engine)
    logger.info("Database schema validated")

    application.state.engine = engine
    application.state.session_factory = create_session_factory(engine)
    try:
        yield
    finally:
        application.state.session_factory = None
        engine.dispose()
        logger.info("Database engine disposed")


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Render every HTTP error as ``{"success": false, "error": ...}``.
    """

    if isinstance(exc.detail, dict):
        body = {"success": False, **exc.detail}
        body.setdefault("error", "Request failed.")
    else:
        body = {"success": False, "error": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Weekly KPI API",
        version="1.0.0",
        lifespan=_lifespan,
    )
    application.add_exception_handler(StarletteHTTPException, _http_exception_handler)

    from app.api.routers import (
        cleanup_router,
        kpi_router,
        local_data_router,
        sync_router,
        upload_router,
    )

    application.include_router(kpi_router)
    application.include_router(sync_router)
    application.include_router(upload_router)
    application.include_router(cleanup_router)
    application.include_router(local_data_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
