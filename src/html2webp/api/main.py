"""
FastAPI Application
==================

Main FastAPI application exposing the HTML to WebP screenshot endpoint.
Runs under uvicorn locally and under Mangum on serverless platforms.
"""

from contextlib import asynccontextmanager
import time
import uuid
from typing import AsyncGenerator, Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from mangum import Mangum
import uvicorn

from html2webp.api.request_parsing import BadInputError, MethodNotAllowedError
from html2webp.api.routes.health import router as health_router
from html2webp.api.routes.screenshot import router as screenshot_router
from html2webp.config.logging import get_logger
from html2webp.config.settings import get_settings
from html2webp.core.exceptions import RenderTimeoutError, ScreenshotGenerationError
from html2webp.models.schemas import ErrorResponse, UsageHint

logger = get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "Starting FastAPI application",
        environment=settings.environment,
        executable_source=settings.executable_source,
        navigation_timeout=settings.navigation_timeout,
    )
    try:
        yield
    finally:
        logger.info("Shutting down FastAPI application")


def error_response(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


settings = get_settings()
app = FastAPI(
    title=settings.app_name,
    description="Render HTML documents to WebP screenshots with headless Chromium",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.include_router(screenshot_router)
app.include_router(health_router)


# Request ID and CORS middleware
@app.middleware("http")
async def add_response_headers(request: Request, call_next) -> Response:  # type: ignore
    """Tag every response with a request ID and permissive CORS headers."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    started = time.monotonic()

    try:
        response = await call_next(request)
    except Exception as exc:
        logger.error(
            "Unhandled exception",
            exception=str(exc),
            path=request.url.path,
            request_id=request_id,
            exc_info=True,
        )
        response = error_response(
            500, ErrorResponse(error="Internal server error", message=str(exc))
        )

    response.headers.update(CORS_HEADERS)
    response.headers["X-Request-ID"] = request_id

    logger.info(
        "Request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        elapsed=round(time.monotonic() - started, 3),
        request_id=request_id,
    )
    return response


# Exception handlers
@app.exception_handler(MethodNotAllowedError)
async def method_not_allowed_handler(request: Request, exc: MethodNotAllowedError) -> JSONResponse:
    """Reject anything other than POST and OPTIONS."""
    logger.warning(
        "Method not allowed",
        method=exc.method,
        request_id=getattr(request.state, "request_id", None),
    )
    return error_response(405, ErrorResponse(error="Method not allowed. Use POST."))


@app.exception_handler(BadInputError)
async def bad_input_handler(request: Request, exc: BadInputError) -> JSONResponse:
    """Missing or blank HTML: answer with the expected request shape."""
    logger.warning(
        "Bad screenshot request",
        error=exc.message,
        content_type=request.headers.get("content-type"),
        request_id=getattr(request.state, "request_id", None),
    )
    return error_response(400, ErrorResponse(error=exc.message, usage=UsageHint()))


@app.exception_handler(ScreenshotGenerationError)
async def screenshot_generation_handler(
    request: Request, exc: ScreenshotGenerationError
) -> JSONResponse:
    """Render, launch and capture failures, including navigation timeouts."""
    logger.error(
        "Screenshot error",
        error_code="RENDER_TIMEOUT" if isinstance(exc, RenderTimeoutError) else "RENDER_FAILURE",
        error_message=str(exc),
        request_id=getattr(request.state, "request_id", None),
        exc_info=exc,
    )
    return error_response(
        500, ErrorResponse(error="Failed to generate screenshot", message=str(exc))
    )


# Root endpoint
@app.get("/", tags=["General"])
async def root() -> dict[str, Any]:
    """
    Root endpoint with basic API information.
    """
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Render HTML documents to WebP screenshots",
        "health_check": "/health",
        "endpoints": {
            "screenshot": "POST /screenshot",
            "preflight": "OPTIONS /screenshot",
        },
        "query_params": UsageHint().queryParams.model_dump(),
    }


# Serverless entry point
handler = Mangum(app, lifespan="off")


# Development server runner
def run_development_server() -> None:
    """Run development server with auto-reload."""
    uvicorn.run(
        "html2webp.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    run_development_server()
