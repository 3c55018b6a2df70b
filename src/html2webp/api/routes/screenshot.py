"""
Screenshot Routes
=================

The screenshot endpoint: one HTML document in, one WebP image out.
"""

from typing import Mapping, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from starlette.datastructures import Headers

from html2webp.api.request_parsing import (
    MethodNotAllowedError,
    extract_html,
    parse_render_options,
    validate_html,
)
from html2webp.config.logging import get_logger
from html2webp.config.settings import Settings, get_settings
from html2webp.core.rendering.screenshot_generator import (
    ScreenshotGenerator,
    get_screenshot_generator,
)

logger = get_logger(__name__)

router = APIRouter(tags=["Screenshot"])

ROUTE_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


async def handle_screenshot_request(
    method: str,
    headers: Mapping[str, str],
    body: bytes,
    query_params: Mapping[str, str],
    generator: ScreenshotGenerator,
    settings: Optional[Settings] = None,
) -> Response:
    """
    Render one HTML payload to a WebP screenshot.

    Errors are raised (BadInputError, MethodNotAllowedError,
    ScreenshotGenerationError) and mapped to JSON responses by the
    application's exception handlers. CORS headers are added by middleware.
    """
    settings = settings or get_settings()
    method = method.upper()

    if method == "OPTIONS":
        return Response(status_code=200)
    if method != "POST":
        raise MethodNotAllowedError(method)

    content_type = Headers(headers=dict(headers)).get("content-type")
    html = validate_html(extract_html(content_type, body))
    options = parse_render_options(query_params, settings)

    result = await generator.generate_screenshot(html, options)

    return Response(
        content=result.image_data,
        status_code=200,
        media_type=result.media_type,
        headers={
            "Content-Length": str(result.file_size),
            "Cache-Control": "no-store",
        },
    )


@router.api_route("/screenshot", methods=ROUTE_METHODS)
async def screenshot(
    request: Request,
    generator: ScreenshotGenerator = Depends(get_screenshot_generator),
) -> Response:
    """Screenshot endpoint; POST renders, OPTIONS answers pre-flight."""
    body = await request.body()
    return await handle_screenshot_request(
        request.method,
        request.headers,
        body,
        request.query_params,
        generator,
    )
