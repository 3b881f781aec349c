from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from client_registry.api.routes import clients, health
from client_registry.core.config import settings
from client_registry.core.exceptions import (
    ClientAlreadyExists,
    ClientNotFound,
    GeocodingFailure,
    InvalidClientData,
)
from client_registry.core.logging_setup import logger
from client_registry.db.session import init_db
from client_registry.schemas.common import ErrorResponse
from client_registry.utils.tracing import generate_trace_id

GEOCODING_ERROR_MESSAGE = "An error occurred while retrieving geographic coordinates."


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncGenerator[None, None]:
    init_db()
    yield


def _error_response(
    request: Request,
    *,
    trace_id: str,
    status_code: int,
    error: str,
    message: str,
    suggestion: str | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        timestamp=datetime.now(timezone.utc),
        status=status_code,
        error=error,
        message=message,
        path=request.url.path,
        suggestion=suggestion,
        trace_id=trace_id,
    )
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def register_exception_handlers(application: FastAPI) -> None:
    @application.exception_handler(ClientAlreadyExists)
    async def handle_already_exists(request: Request, exc: ClientAlreadyExists) -> JSONResponse:
        trace_id = generate_trace_id()
        logger.error("[TRACE-ID: %s] - Client already exists: %s (path=%s)", trace_id, exc.message, request.url.path)
        return _error_response(
            request,
            trace_id=trace_id,
            status_code=status.HTTP_400_BAD_REQUEST,
            error="Bad Request",
            message=exc.message,
            suggestion="Please use a different email or SIN number.",
        )

    @application.exception_handler(ClientNotFound)
    async def handle_not_found(request: Request, exc: ClientNotFound) -> JSONResponse:
        trace_id = generate_trace_id()
        logger.error("[TRACE-ID: %s] - Client not found: %s (path=%s)", trace_id, exc.message, request.url.path)
        return _error_response(
            request,
            trace_id=trace_id,
            status_code=status.HTTP_404_NOT_FOUND,
            error="Not Found",
            message=exc.message,
        )

    @application.exception_handler(InvalidClientData)
    async def handle_invalid_data(request: Request, exc: InvalidClientData) -> JSONResponse:
        trace_id = generate_trace_id()
        logger.error("[TRACE-ID: %s] - Invalid client data: %s (path=%s)", trace_id, exc.message, request.url.path)
        return _error_response(
            request,
            trace_id=trace_id,
            status_code=status.HTTP_400_BAD_REQUEST,
            error="Bad Request",
            message=exc.message,
        )

    @application.exception_handler(GeocodingFailure)
    async def handle_geocoding_failure(request: Request, exc: GeocodingFailure) -> JSONResponse:
        trace_id = generate_trace_id()
        # Provider details stay in the log; callers get a generic message.
        logger.error(
            "[TRACE-ID: %s] - Geocoding API error (%s): %s (path=%s)",
            trace_id,
            type(exc).__name__,
            exc.message,
            request.url.path,
        )
        return _error_response(
            request,
            trace_id=trace_id,
            status_code=status.HTTP_502_BAD_GATEWAY,
            error="Bad Gateway",
            message=GEOCODING_ERROR_MESSAGE,
        )


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.project_name,
        debug=settings.debug,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(application)

    application.include_router(health.router, prefix="/health")
    application.include_router(clients.router, prefix=settings.api_v1_str)

    @application.get("/")
    def root():
        return {"service": settings.project_name}

    logger.info("Client Registry API initialized")
    return application


app = create_app()
