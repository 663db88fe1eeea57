"""
AuraGold Clinic - FastAPI Application

Treatment transparency and staff session service behind the AuraGold
facial analysis app.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from auragold.config import settings
from auragold.api.routes import router
from auragold.api.middleware import (
    RequestLoggingMiddleware,
    ErrorHandlingMiddleware,
    setup_rate_limiting
)
from auragold.services.session_timer import session_ticker
from auragold.utils.logger import get_logger, configure_logging

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    logger.info(
        "Starting AuraGold Clinic",
        version=settings.app_version,
        debug=settings.debug
    )

    configure_logging(
        log_level=settings.log_level,
        json_format=not settings.debug
    )

    logger.info("Application ready")

    yield

    await session_ticker.stop()
    logger.info("Shutting down AuraGold Clinic")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    app = FastAPI(
        title=settings.app_name,
        description="""
## AuraGold Clinic - Treatment Transparency Service

Explains why a cosmetic treatment is or isn't recommended and guards the
clinic staff session.

### Endpoints

| Endpoint | Method | Description |
|----------|--------|-------------|
| `/transparency` | POST | Compile a treatment transparency record |
| `/safety-check` | POST | Screen a treatment for contraindications |
| `/interactions` | POST | Scheduling conflicts with planned treatments |
| `/post-care` | GET | Post-care follow-up suggestions |
| `/conditions` | GET | Health questionnaire condition catalogue |
| `/session/login` | POST | Staff passcode login |
| `/session/status` | GET | Session countdown and warning flag |
| `/session/extend` | POST | Extend the staff session |
| `/session/logout` | POST | End the staff session |
| `/audit/events` | GET | Audit trail (staff only) |
| `/health` | GET | Health check |
        """,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc" if settings.debug else None,
    )

    # Setup middleware (order matters - last added is outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ErrorHandlingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_rate_limiting(app)

    app.include_router(router, tags=["API"])

    return app


# Create app instance
app = create_app()


# Run with: uvicorn auragold.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "auragold.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
