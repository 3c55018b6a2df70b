"""
Screenshot Generator
====================

Playwright-based WebP screenshot generation from HTML content.

Every capture runs in its own browser session: the Playwright driver and the
Chromium process are started for one request and torn down before the request
completes, whatever the outcome.
"""

from typing import Optional, AsyncGenerator
import asyncio
import io
import time
from contextlib import asynccontextmanager

from playwright.async_api import (
    async_playwright,
    Browser,
    Page,
    Route,
    TimeoutError as PlaywrightTimeoutError,
)
from PIL import Image

from html2webp.config.logging import get_logger
from html2webp.config.settings import Settings, get_settings
from html2webp.core.exceptions import RenderTimeoutError, ScreenshotGenerationError
from html2webp.core.rendering.executable import ExecutableResolver, get_executable_resolver
from html2webp.models.schemas import RenderOptions, RenderResult

logger = get_logger(__name__)


def encode_webp(png_bytes: bytes, quality: int) -> bytes:
    """Re-encode a PNG capture as WebP at the given quality."""
    with Image.open(io.BytesIO(png_bytes)) as image:
        if image.mode not in ("RGB", "RGBA"):
            image = image.convert("RGBA")
        output = io.BytesIO()
        image.save(output, format="WEBP", quality=quality, method=4)
    return output.getvalue()


class PlaywrightScreenshotGenerator:
    """Render HTML in a dedicated headless Chromium and capture it as WebP."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        executable_resolver: Optional[ExecutableResolver] = None,
    ):
        self.settings = settings or get_settings()
        self.executable_resolver = executable_resolver or get_executable_resolver()
        self.logger = logger.bind(generator="playwright")
        self.blocked_resource_types = frozenset(self.settings.blocked_resource_types)

    @asynccontextmanager
    async def browser_session(self) -> AsyncGenerator[Browser, None]:
        """Launch a browser for one request and always terminate it."""
        executable_path = await self.executable_resolver.resolve()

        playwright = await async_playwright().start()
        browser: Optional[Browser] = None
        try:
            browser = await playwright.chromium.launch(
                headless=self.settings.browser_headless,
                args=list(self.settings.chromium_args),
                executable_path=str(executable_path) if executable_path else None,
            )
            self.logger.debug(
                "Browser launched",
                executable_source=self.executable_resolver.source,
                executable_path=str(executable_path) if executable_path else None,
            )
            yield browser
        finally:
            try:
                if browser is not None:
                    await browser.close()
                    self.logger.debug("Browser closed")
            finally:
                await playwright.stop()

    async def generate_screenshot(self, html_content: str, options: RenderOptions) -> RenderResult:
        """
        Generate a WebP screenshot from HTML content.

        Args:
            html_content: HTML content to render
            options: Rendering options

        Returns:
            RenderResult containing WebP data and metadata

        Raises:
            RenderTimeoutError: If load or network quiescence is not reached in time
            ScreenshotGenerationError: If any other browser step fails
        """
        started = time.monotonic()
        self.logger.info(
            "Generating screenshot from HTML",
            html_length=len(html_content),
            width=options.viewport_width,
            quality=options.quality,
            full_page=options.full_page,
        )

        try:
            async with self.browser_session() as browser:
                page = await browser.new_page(
                    viewport={"width": options.viewport_width, "height": options.viewport_height},
                    device_scale_factor=options.device_scale_factor,
                )
                await self._configure_page(page)
                await self._load_content(page, html_content)

                # Late image decode and paint
                await page.wait_for_timeout(self.settings.settle_delay_ms)

                png_bytes = await page.screenshot(type="png", full_page=options.full_page)

            image_data = await asyncio.to_thread(encode_webp, png_bytes, options.quality)

        except ScreenshotGenerationError:
            raise
        except Exception as e:
            raise ScreenshotGenerationError(str(e)) from e

        elapsed = time.monotonic() - started
        result = RenderResult(
            image_data=image_data,
            file_size=len(image_data),
            metadata={
                "generator": "playwright",
                "viewport_width": options.viewport_width,
                "quality": options.quality,
                "full_page": options.full_page,
                "elapsed_seconds": round(elapsed, 3),
            },
        )

        self.logger.info(
            "Screenshot generation completed", file_size=result.file_size, elapsed=elapsed
        )
        return result

    async def _configure_page(self, page: Page) -> None:
        """Configure timeouts and request interception."""
        page.set_default_timeout(self.settings.navigation_timeout * 1000)
        await page.route("**/*", self._handle_route)

    async def _handle_route(self, route: Route) -> None:
        """Abort non-visual requests, let everything else through."""
        if route.request.resource_type in self.blocked_resource_types:
            await route.abort()
        else:
            await route.continue_()

    async def _load_content(self, page: Page, html_content: str) -> None:
        """Set the page content and wait for load plus network quiescence."""
        timeout = self.settings.navigation_timeout

        async def navigate() -> None:
            await page.set_content(html_content, wait_until="load", timeout=timeout * 1000)
            await page.wait_for_load_state("networkidle", timeout=timeout * 1000)

        try:
            await asyncio.wait_for(navigate(), timeout=timeout)
        except (asyncio.TimeoutError, PlaywrightTimeoutError) as e:
            raise RenderTimeoutError(
                f"Navigation timeout of {int(timeout * 1000)} ms exceeded"
            ) from e


_generator: Optional[PlaywrightScreenshotGenerator] = None


def get_screenshot_generator() -> PlaywrightScreenshotGenerator:
    """FastAPI dependency returning the screenshot generator."""
    global _generator
    if _generator is None:
        _generator = PlaywrightScreenshotGenerator()
    return _generator


# Alias used by route handlers and tests
ScreenshotGenerator = PlaywrightScreenshotGenerator
