"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from loguru import logger
from starlette.responses import JSONResponse

from person_api import __version__
from person_api.api.http.app_data import ApplicationDependencies
from person_api.api.http.routers.health import router as health_router
from person_api.api.http.routers.person import router as person_router
from person_api.core.exceptions import FieldValidationError, MalformedInputError, PersonError
from person_api.core.services import DbSessionService
from person_api.runtime.config.config_data import ConfigData
from person_api.runtime.context import get_config

# Every other PersonError is reported as a generic service failure
ERROR_STATUS_CODES: dict[type[PersonError], int] = {
    FieldValidationError: 400,
    MalformedInputError: 422,
}
SERVICE_FAILURE_STATUS = 501


def status_for(exc: PersonError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return SERVICE_FAILURE_STATUS


async def handle_person_error(request: Request, exc: PersonError) -> JSONResponse:
    """Render a failure as its message, the whole body being a JSON string."""
    status_code = status_for(exc)
    logger.bind(status_code=status_code, error_type=type(exc).__name__).error(
        "{} {} failed: {}", request.method, request.url.path, exc
    )
    return JSONResponse(status_code=status_code, content=exc.message)


# --- Request logging middleware ---
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": request.client.host if request.client else "unknown",
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content="Internal Server Error",
                headers={"X-Request-ID": request_id},
            )

        duration_ms = (time.perf_counter() - start) * 1000
        logger.bind(
            status_code=response.status_code,
            duration_ms=round(duration_ms, 1),
        ).info("request.end")

        response.headers.setdefault("X-Request-ID", request_id)
        return response


# --- Lifecycle hooks ---
async def startup(app: FastAPI, config: ConfigData) -> None:
    logger.info("Starting up application in {} environment", config.app.environment)

    database_service = DbSessionService(config)
    if config.database.create_tables:
        database_service.create_all()

    app.state.app_dependencies = ApplicationDependencies(
        config=config,
        database_service=database_service,
    )


async def shutdown(app: FastAPI) -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies = app.state.app_dependencies
    app_dependencies.database_service.dispose()


def create_app(config: ConfigData | None = None) -> FastAPI:
    """Build the FastAPI application.

    Uses the process-wide configuration when ``config`` is not given, so
    ``uvicorn --factory person_api.api.http.app:create_app`` works as is.
    """
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await startup(app, config)
        try:
            yield
        finally:
            await shutdown(app)

    is_production = config.app.environment == "production"
    app = FastAPI(
        title="Person API",
        version=__version__,
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )

    app.add_exception_handler(PersonError, handle_person_error)
    app.middleware("http")(log_requests)

    app.include_router(health_router)
    app.include_router(person_router)

    return app


__all__ = ["create_app", "startup", "shutdown"]
