"""
Rendering Exceptions
====================

Failures raised while locating, driving or capturing the headless browser.
"""


class ScreenshotGenerationError(Exception):
    """Exception raised when screenshot generation fails."""

    pass


class RenderTimeoutError(ScreenshotGenerationError):
    """Page load or network quiescence was not reached in time."""

    pass


class BrowserExecutableError(ScreenshotGenerationError):
    """Exception raised when the browser executable cannot be located."""

    pass
