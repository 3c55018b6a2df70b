"""
Rendering Module
===============

Browser automation for WebP screenshot generation.

Components:
- executable: Locate the Chromium binary (bundled, local or remote pack)
- screenshot_generator: Per-request browser session and capture
"""
