"""FastAPI application setup for the City Dashboard API."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from citydash import config
from citydash.api import router as api_router
from citydash.dashboard_service import DashboardService
from citydash.domain import HealthResponse
from citydash.errors import MissingParameter
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="citydash/main")

APP_TITLE = "City Dashboard API"
APP_VERSION = "1.0.0"


def create_app(
    settings: Optional[config.Settings] = None,
    *,
    service: Optional[DashboardService] = None,
) -> FastAPI:
    """Build the FastAPI app.

    The DashboardService is created when the app starts (or taken from
    `service`), stored on `app.state` and closed on shutdown.
    """
    settings = settings or config.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        dashboard = service or DashboardService.from_settings(settings)
        app.state.dashboard = dashboard
        logger.info("City dashboard service started")
        try:
            yield
        finally:
            dashboard.close()

    app = FastAPI(title=APP_TITLE, version=APP_VERSION, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(MissingParameter)
    async def missing_parameter_handler(request: Request, exc: MissingParameter):
        logger.info(f"Rejected {request.url.path}: missing '{exc.parameter}'")
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"error": "Route not found"})
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Something went wrong!"})

    # Health check at "/"
    @app.get("/", response_model=HealthResponse)
    def health():
        """Report that the API is up."""
        return HealthResponse(
            message="Smart City Dashboard API is running!",
            version=APP_VERSION,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    # API routes
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
