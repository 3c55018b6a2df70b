"""
HTTP API
========

FastAPI application, request parsing and routes.
"""
