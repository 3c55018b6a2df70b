"""
Request Parsing
===============

Turns a raw HTTP request (content type, body, query string) into the HTML to
render and its RenderOptions.
"""

import json
import re
from typing import Any, Mapping, Optional

from html2webp.config.settings import Settings
from html2webp.models.schemas import RenderOptions

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class BadInputError(Exception):
    """The request did not carry usable HTML."""

    def __init__(self, message: str = "Missing or empty HTML content"):
        super().__init__(message)
        self.message = message


class MethodNotAllowedError(Exception):
    """The request used a method other than POST or OPTIONS."""

    def __init__(self, method: str):
        super().__init__(f"Method not allowed: {method}")
        self.method = method


def _decode(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


def _load_json_object(body: bytes) -> Optional[dict]:
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None
    return data if isinstance(data, dict) else None


def extract_html(content_type: Optional[str], body: bytes) -> Any:
    """
    Resolve the HTML payload according to the request content type.

    The result is not validated; a JSON field may be any JSON value.
    """
    content_type = (content_type or "").lower()

    if "application/json" in content_type:
        data = _load_json_object(body)
        return data.get("html") if data is not None else None

    if "text/html" in content_type or "text/plain" in content_type:
        return _decode(body)

    # Unknown content type: a JSON object must carry an html field
    data = _load_json_object(body)
    if data is not None:
        return data.get("html")
    return _decode(body)


def validate_html(html: Any) -> str:
    """Return html if it is a non-blank string, else raise BadInputError."""
    if not isinstance(html, str) or not html.strip():
        raise BadInputError()
    return html


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse a leading integer ("12px" -> 12); None when there is none."""
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def parse_render_options(query_params: Mapping[str, str], settings: Settings) -> RenderOptions:
    """Build RenderOptions from the width, quality and fullPage query parameters."""
    width = parse_int(query_params.get("width")) or settings.default_width
    width = min(settings.max_viewport_width, max(1, width))

    quality = parse_int(query_params.get("quality")) or settings.default_quality
    quality = min(100, max(1, quality))

    full_page = query_params.get("fullPage") != "false"

    return RenderOptions(
        viewport_width=width,
        viewport_height=settings.viewport_height,
        device_scale_factor=settings.device_scale_factor,
        quality=quality,
        full_page=full_page,
    )
