"""
Test Configuration
==================

Pytest configuration with fixtures shared by unit and integration tests.
No fixture launches a real browser: Playwright is replaced by mocks.
"""

import io
import os
from typing import Generator
from unittest.mock import AsyncMock, patch

os.environ.setdefault("HTML2WEBP_ENVIRONMENT", "testing")

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from pydantic_settings import SettingsConfigDict

from html2webp.api.main import app
from html2webp.config.settings import Settings
from html2webp.core.rendering.executable import ExecutableResolver
from html2webp.core.rendering.screenshot_generator import (
    PlaywrightScreenshotGenerator,
    get_screenshot_generator,
)
from html2webp.models.schemas import RenderResult

from tests.utils.mocks import MockPlaywrightSession, create_mock_playwright


# Test settings override
class TestSettings(Settings):
    """Test-specific settings."""

    environment: str = "testing"
    debug: bool = True
    log_level: str = "DEBUG"
    settle_delay_ms: int = 0

    model_config = SettingsConfigDict(env_file=None, env_prefix="HTML2WEBP_TEST_")


@pytest.fixture
def test_settings() -> TestSettings:
    """Test settings fixture."""
    return TestSettings()


@pytest.fixture(scope="session")
def png_bytes() -> bytes:
    """A small PNG as returned by page.screenshot."""
    image = Image.new("RGB", (40, 30), color=(200, 30, 60))
    output = io.BytesIO()
    image.save(output, format="PNG")
    return output.getvalue()


@pytest.fixture
def mock_playwright(png_bytes: bytes) -> Generator[MockPlaywrightSession, None, None]:
    """Patch async_playwright in the generator module with a mocked session."""
    session = create_mock_playwright(png_bytes)
    with patch(
        "html2webp.core.rendering.screenshot_generator.async_playwright",
        session.async_playwright,
    ):
        yield session


@pytest.fixture
def generator(test_settings: TestSettings) -> PlaywrightScreenshotGenerator:
    """Screenshot generator using Playwright's bundled browser."""
    return PlaywrightScreenshotGenerator(
        settings=test_settings, executable_resolver=ExecutableResolver(test_settings)
    )


@pytest.fixture
def fake_generator() -> AsyncMock:
    """Stand-in generator recording the options it was called with."""
    image_data = b"RIFF\x1a\x00\x00\x00WEBPVP8 fake-webp-payload"
    fake = AsyncMock(spec=PlaywrightScreenshotGenerator)
    fake.generate_screenshot.return_value = RenderResult(
        image_data=image_data, file_size=len(image_data)
    )
    return fake


@pytest.fixture
def client(fake_generator: AsyncMock) -> Generator[TestClient, None, None]:
    """FastAPI test client with the generator replaced by fake_generator."""
    app.dependency_overrides[get_screenshot_generator] = lambda: fake_generator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def rendering_client(
    generator: PlaywrightScreenshotGenerator, mock_playwright: MockPlaywrightSession
) -> Generator[TestClient, None, None]:
    """FastAPI test client driving the real generator over mocked Playwright."""
    app.dependency_overrides[get_screenshot_generator] = lambda: generator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
