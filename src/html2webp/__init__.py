"""
html2webp
=========

HTTP service that renders an HTML document in headless Chromium and returns
the screenshot as a WebP image.

This package provides:
- FastAPI endpoint accepting JSON or raw HTML bodies
- Browser automation with Playwright, one browser per request
- WebP encoding with Pillow
- Serverless entry point through Mangum
"""

__version__ = "1.0.0"
__author__ = "html2webp Team"
