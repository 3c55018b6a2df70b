"""
Unit Tests for the Screenshot Handler
=====================================

handle_screenshot_request called directly, without the FastAPI app.
"""

import pytest

from html2webp.api.request_parsing import BadInputError, MethodNotAllowedError
from html2webp.api.routes.screenshot import handle_screenshot_request
from html2webp.core.exceptions import ScreenshotGenerationError


@pytest.mark.asyncio
async def test_post_returns_image(fake_generator, test_settings):
    response = await handle_screenshot_request(
        "post",
        {"content-type": "application/json"},
        b'{"html": "<p>hi</p>"}',
        {"width": "640"},
        fake_generator,
        settings=test_settings,
    )

    assert response.status_code == 200
    assert response.media_type == "image/webp"
    assert response.headers["cache-control"] == "no-store"
    assert response.headers["content-length"] == str(len(response.body))
    _, options = fake_generator.generate_screenshot.await_args.args
    assert options.viewport_width == 640


@pytest.mark.asyncio
async def test_options_short_circuits(fake_generator, test_settings):
    response = await handle_screenshot_request(
        "OPTIONS", {}, b"", {}, fake_generator, settings=test_settings
    )
    assert response.status_code == 200
    assert response.body == b""
    fake_generator.generate_screenshot.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_is_rejected(fake_generator, test_settings):
    with pytest.raises(MethodNotAllowedError):
        await handle_screenshot_request("GET", {}, b"", {}, fake_generator, settings=test_settings)


@pytest.mark.asyncio
async def test_blank_html_is_rejected(fake_generator, test_settings):
    with pytest.raises(BadInputError):
        await handle_screenshot_request(
            "POST", {"content-type": "text/html"}, b"  ", {}, fake_generator, settings=test_settings
        )
    fake_generator.generate_screenshot.assert_not_awaited()


@pytest.mark.asyncio
async def test_render_errors_propagate(fake_generator, test_settings):
    fake_generator.generate_screenshot.side_effect = ScreenshotGenerationError("crash")
    with pytest.raises(ScreenshotGenerationError, match="crash"):
        await handle_screenshot_request(
            "POST", {"content-type": "text/html"}, b"<p>", {}, fake_generator, settings=test_settings
        )


@pytest.mark.asyncio
async def test_content_type_lookup_ignores_header_case(fake_generator, test_settings):
    await handle_screenshot_request(
        "POST",
        {"Content-Type": "text/plain"},
        b'{"html": "<p>x</p>"}',
        {},
        fake_generator,
        settings=test_settings,
    )

    html, _ = fake_generator.generate_screenshot.await_args.args
    assert html == '{"html": "<p>x</p>"}'
