"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Annotated, Optional, List, Union
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
import json
from pathlib import Path


DEFAULT_CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--hide-scrollbars",
    "--mute-audio",
]


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="html2webp", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # Rendering Configuration
    default_width: int = Field(default=800, gt=0, description="Default viewport width")
    max_viewport_width: int = Field(default=4096, gt=0, description="Maximum viewport width")
    viewport_height: int = Field(default=900, gt=0, description="Fixed viewport height")
    device_scale_factor: float = Field(default=2.0, gt=0, description="Device pixel ratio")
    default_quality: int = Field(default=80, ge=1, le=100, description="Default WebP quality")
    navigation_timeout: float = Field(
        default=30.0, gt=0, description="Load and network-idle timeout in seconds"
    )
    settle_delay_ms: int = Field(
        default=500, ge=0, description="Grace period after load before capture"
    )
    request_budget_seconds: float = Field(
        default=60.0, gt=0, description="Execution budget enforced by the hosting platform"
    )
    blocked_resource_types: Annotated[List[str], NoDecode] = Field(
        default=["media", "websocket", "manifest"],
        description="Resource types aborted by request interception",
    )

    # Browser Configuration
    browser_headless: bool = Field(default=True, description="Run browser in headless mode")
    chromium_args: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_CHROMIUM_ARGS),
        description="Chromium launch arguments",
    )
    chromium_executable_path: Optional[Path] = Field(
        default=None, description="Local Chromium binary; bundled Playwright build if unset"
    )
    chromium_pack_url: Optional[str] = Field(
        default=None, description="Version-pinned Chromium archive downloaded at cold start"
    )
    chromium_cache_dir: Path = Field(
        default=Path("/tmp/html2webp-chromium"), description="Extraction directory for packs"
    )
    pack_download_timeout: float = Field(
        default=45.0, gt=0, description="Cold-start pack download timeout in seconds"
    )

    # Monitoring Configuration
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("blocked_resource_types", "chromium_args", mode="before")
    @classmethod
    def parse_string_list(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse a list from a JSON array string or a comma-separated string."""
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @model_validator(mode="after")
    def check_timeouts(self) -> "Settings":
        """The navigation timeout must fit inside the platform budget."""
        if self.navigation_timeout >= self.request_budget_seconds:
            raise ValueError(
                "navigation_timeout must be lower than request_budget_seconds "
                f"({self.navigation_timeout} >= {self.request_budget_seconds})"
            )
        if self.pack_download_timeout >= self.request_budget_seconds:
            raise ValueError(
                "pack_download_timeout must be lower than request_budget_seconds "
                f"({self.pack_download_timeout} >= {self.request_budget_seconds})"
            )
        if self.default_width > self.max_viewport_width:
            raise ValueError("default_width cannot exceed max_viewport_width")
        return self

    @property
    def executable_source(self) -> str:
        """Where the browser executable comes from: remote, local or bundled."""
        if self.chromium_pack_url:
            return "remote"
        if self.chromium_executable_path:
            return "local"
        return "bundled"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="HTML2WEBP_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings
