"""
Core Rendering Logic
====================

Browser executable resolution and HTML to WebP capture.
"""
