"""
Pydantic Models and Schemas
===========================

Data models for render options, render results and API responses.
"""

from typing import Optional, Dict, Any

from pydantic import BaseModel, Field


# Rendering Models
class RenderOptions(BaseModel):
    """Options for rendering one HTML document to WebP."""
    viewport_width: int = Field(800, gt=0, description="Viewport width in CSS pixels")
    viewport_height: int = Field(900, gt=0, description="Viewport height in CSS pixels")
    device_scale_factor: float = Field(2.0, gt=0, description="Device pixel ratio")
    quality: int = Field(80, ge=1, le=100, description="WebP quality (1-100)")
    full_page: bool = Field(True, description="Capture full page instead of viewport")


class RenderResult(BaseModel):
    """Result of a screenshot capture."""
    image_data: bytes = Field(..., description="WebP binary data", exclude=True)
    file_size: int = Field(..., ge=0, description="File size in bytes")
    media_type: str = Field("image/webp", description="MIME type of image_data")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Capture metadata")


# API Response Models
class QueryParamsUsage(BaseModel):
    """Recognized query options."""
    width: str = "viewport width in px (default: 800)"
    quality: str = "webp quality 1-100 (default: 80)"
    fullPage: str = "true/false (default: true)"


class UsageHint(BaseModel):
    """Expected request shape, echoed on bad input."""
    method: str = "POST"
    headers: Dict[str, str] = Field(default_factory=lambda: {"Content-Type": "application/json"})
    body: Dict[str, str] = Field(default_factory=lambda: {"html": "<your HTML string here>"})
    queryParams: QueryParamsUsage = Field(default_factory=QueryParamsUsage)


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str = Field(..., description="Human-readable error summary")
    message: Optional[str] = Field(None, description="Underlying failure detail")
    usage: Optional[UsageHint] = Field(None, description="Expected request shape")


class HealthStatus(BaseModel):
    """Liveness information."""
    status: str = Field(..., description="Overall status")
    version: str = Field(..., description="Application version")
    executable_source: str = Field(..., description="bundled, local or remote")
