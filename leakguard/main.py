"""
LeakGuard FastAPI application entry point.

Pipeline: direct booking → pattern detector → integrity signals → score → review
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from leakguard import __version__
from leakguard.config import get_settings
from leakguard.db.session import check_db_connection, engine
from leakguard.services.integrity import IntegrityStorageError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def validate_integrity_settings() -> None:
    """Fail fast on band thresholds that would make the medium band unreachable."""
    settings = get_settings()
    medium = settings.integrity_medium_risk_threshold
    high = settings.integrity_high_risk_threshold
    if not 0 <= medium < high:
        raise ValueError(
            f"INTEGRITY_MEDIUM_RISK_THRESHOLD ({medium}) must be >= 0 and below "
            f"INTEGRITY_HIGH_RISK_THRESHOLD ({high})"
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    logger.info("LeakGuard starting")
    try:
        try:
            check_db_connection()
            logger.info("Database connection verified")
        except Exception as e:
            logger.critical("Database unreachable: %s", e)
            raise

        try:
            validate_integrity_settings()
        except ValueError as e:
            logger.critical("Invalid integrity settings: %s", e)
            raise

        yield
    finally:
        logger.info("LeakGuard shutting down")
        engine.dispose()
        logger.info("Database connection pool closed")


async def integrity_storage_error_handler(request: Request, exc: IntegrityStorageError):
    """Store failures surface as 503 so callers can retry the whole operation."""
    logger.warning("Integrity storage failure on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.add_exception_handler(IntegrityStorageError, integrity_storage_error_handler)

    # Booking workflow and review dashboard (token-authenticated)
    from leakguard.api.integrity import router as integrity_router

    app.include_router(integrity_router, tags=["integrity"])

    @app.get("/health")
    def health():
        """Liveness plus DB reachability; 503 when the database is down."""
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.warning("Health check failed: %s", e)
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "version": __version__,
                    "database": "disconnected",
                },
            )
        return {"status": "ok", "version": __version__, "database": "connected"}

    return app


app = create_app()
