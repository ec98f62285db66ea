"""
FastAPI application for the Contact Form API.

This module initializes and configures the FastAPI application, wires the
shared clients (database pool, S3, CloudWatch) into the request pipeline and
installs the error handlers and request telemetry.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from contact_api.api.endpoints import contact
from contact_api.api.middleware import RequestMetricsMiddleware
from contact_api.config.settings import Settings, settings
from contact_api.core.errors import ContactAPIError
from contact_api.core.pipeline import ContactPipeline
from contact_api.core.submission_store import SubmissionStore
from contact_api.integrations.cloudwatch import TelemetryEmitter, build_cloudwatch_client
from contact_api.integrations.s3 import S3ObjectStore, build_s3_client
from contact_api.monitoring.metrics import PrometheusExporter
from contact_api.utils.db_health import check_db_connection, probe_database
from contact_api.utils.db_session import build_async_engine, build_session_factory
from contact_api.utils.logging_utils import setup_logging

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "Welcome to the Contact System API!"
INTERNAL_SERVER_ERROR = "Internal Server Error"


def build_services(app: FastAPI, app_settings: Settings) -> None:
    """
    Create the clients and the pipeline from ``app_settings`` and attach them to ``app.state``.
    """
    cloudwatch_client = build_cloudwatch_client(app_settings) if app_settings.METRICS_ENABLED else None
    telemetry = TelemetryEmitter(client=cloudwatch_client, namespace=app_settings.METRICS_NAMESPACE)
    object_store = S3ObjectStore(
        client=build_s3_client(app_settings),
        bucket=app_settings.AWS_S3_BUCKET,
        region=app_settings.AWS_REGION,
    )
    engine = build_async_engine(app_settings)
    store = SubmissionStore(build_session_factory(engine))

    app.state.engine = engine
    app.state.telemetry = telemetry
    app.state.pipeline = ContactPipeline(store=store, object_store=object_store, telemetry=telemetry)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown events.

    Builds the shared clients unless they were injected beforehand, and starts
    the database probe as a background task so a dead database never delays
    or aborts startup.
    """
    setup_logging()
    app_settings: Settings = app.state.settings
    logger.info(f"Starting {app_settings.APP_NAME} v{app_settings.APP_VERSION}")

    if getattr(app.state, "pipeline", None) is None:
        build_services(app, app_settings)

    probe_task: Optional[asyncio.Task] = None
    engine = getattr(app.state, "engine", None)
    if engine is not None:
        probe_task = asyncio.create_task(
            probe_database(engine, create_tables=app_settings.DB_AUTO_CREATE_SCHEMA)
        )

    logger.info(f"Server running on port {app_settings.PORT}")

    yield

    # Shutdown
    logger.info("Shutting down application")

    if probe_task is not None and not probe_task.done():
        probe_task.cancel()
        try:
            await probe_task
        except asyncio.CancelledError:
            logger.info("Database probe cancelled")

    telemetry = getattr(app.state, "telemetry", None)
    if telemetry is not None:
        await telemetry.drain()

    if engine is not None:
        await engine.dispose()


async def contact_api_error_handler(request: Request, exc: ContactAPIError) -> JSONResponse:
    """Answer known failures with their status code and their own message."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Answer anything unexpected with a generic 500 and count it by exception type."""
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    telemetry = getattr(request.app.state, "telemetry", None)
    if telemetry is not None:
        try:
            telemetry.record_error(type(exc).__name__ or "UnknownError")
        except Exception as metric_error:
            logger.error(f"Failed to record error metric: {metric_error}")
    return JSONResponse(status_code=500, content={"error": INTERNAL_SERVER_ERROR})


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use; the process-wide settings when omitted.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title=app_settings.APP_NAME,
        version=app_settings.APP_VERSION,
        description="Contact form API: stores submissions with an optional image and lists them.",
        debug=app_settings.DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if app_settings.DEBUG else None,
        redoc_url="/redoc" if app_settings.DEBUG else None,
        openapi_tags=[
            {"name": "contact", "description": "Contact form submissions"},
            {"name": "health", "description": "Health check and monitoring"},
        ],
    )
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestMetricsMiddleware)

    app.add_exception_handler(ContactAPIError, contact_api_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(contact.router, prefix="/api", tags=["contact"])

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    async def root() -> str:
        return WELCOME_MESSAGE

    @app.get("/health", tags=["health"], summary="Health Check")
    async def health_check(request: Request):
        """
        Health check endpoint.

        Returns:
            dict: Service status, version, timestamp and database reachability.
        """
        engine = getattr(request.app.state, "engine", None)
        database_ok = engine is not None and await check_db_connection(engine)
        return {
            "status": "healthy",
            "service": app_settings.APP_NAME,
            "version": app_settings.APP_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": "ok" if database_ok else "unavailable",
        }

    @app.get("/metrics", tags=["health"], include_in_schema=False)
    async def metrics() -> Response:
        body, content_type = PrometheusExporter.render()
        return Response(content=body, media_type=content_type)

    return app


# Create the application instance
app = create_app()
