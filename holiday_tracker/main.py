"""Holiday Tracker: FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from holiday_tracker.absences.router import router as absences_router
from holiday_tracker.auth.router import router as auth_router
from holiday_tracker.common.exceptions import register_exception_handlers
from holiday_tracker.common.rate_limit import limiter
from holiday_tracker.config import settings
from holiday_tracker.database import engine
from holiday_tracker.requests.router import router as requests_router
from holiday_tracker.staff.router import employees_router, stores_router

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("holiday tracker starting (%s)", settings.ENVIRONMENT)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    _configure_logging()

    app = FastAPI(
        title="Holiday Tracker",
        description="Staff absences, holiday requests and approvals across stores",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(auth_router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(stores_router, prefix="/api/v1/stores", tags=["stores"])
    app.include_router(employees_router, prefix="/api/v1/employees", tags=["employees"])
    app.include_router(absences_router, prefix="/api/v1/absences", tags=["absences"])
    app.include_router(requests_router, prefix="/api/v1/requests", tags=["requests"])

    return app


app = create_app()
