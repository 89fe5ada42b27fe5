from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from manufacturing_api.core.config import settings
from manufacturing_api.db.session import engine, get_db
from manufacturing_api import models  # noqa: F401
from manufacturing_api.models.base import Base
from manufacturing_api.services.errors import ServiceError, is_unique_violation

from manufacturing_api.routes.boms import router as boms_router
from manufacturing_api.routes.items import router as items_router
from manufacturing_api.routes.workstations import router as workstations_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# ============================================================
# DB table creation (DEV ONLY)
# - In production, prefer Alembic migrations.
# - Guarded so a transient DB outage doesn't prevent app startup.
# ============================================================
if settings.RUN_CREATE_ALL:
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("DB tables ensured via create_all (RUN_CREATE_ALL=1).")
    except Exception:
        logger.exception("Base.metadata.create_all failed; continuing startup without it.")

# FastAPI app
app = FastAPI(
    title="Manufacturing BOM API",
    version="1.0.0",
)

# ============================================================
# CORS
# - Include localhost for dev and FRONTEND_URL for production.
# ============================================================
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

if settings.FRONTEND_URL and settings.FRONTEND_URL.strip():
    origins.append(settings.FRONTEND_URL.strip())

# Deduplicate + drop empties
allow_origins = sorted({o for o in origins if o})

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

API_PREFIX = "/api/v1"


# ========================================
# Error handlers
# ========================================
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    if is_unique_violation(exc):
        logger.warning("IntegrityError on %s %s: %s", request.method, request.url.path, exc.orig)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": "Resource already exists", "code": "CONFLICT"},
        )

    # foreign key / not-null failures are not client conflicts
    logger.error("Constraint violation on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database constraint violated", "code": "INTEGRITY_ERROR"},
    )


# ========================================
# Root / Health
# ========================================
@app.api_route("/", methods=["GET", "HEAD"], status_code=status.HTTP_200_OK)
def root():
    return {
        "status": "ok",
        "service": "manufacturing-api",
        "version": "1.0.0",
    }


@app.api_route("/health", methods=["GET", "HEAD"], status_code=status.HTTP_200_OK)
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint for uptime monitoring."""
    try:
        db.execute(text("SELECT 1"))
        return {
            "status": "ok",
            "service": "manufacturing-api",
            "version": "1.0.0",
            "database": "connected",
        }

    except SQLAlchemyError:
        logger.exception("Health check failed")
        return {
            "status": "error",
            "service": "manufacturing-api",
            "database": "disconnected",
        }


# Routers
app.include_router(items_router, prefix=API_PREFIX)
app.include_router(boms_router, prefix=API_PREFIX)
app.include_router(workstations_router, prefix=API_PREFIX)
