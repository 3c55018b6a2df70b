"""
Configuration Management
=======================

Environment-based configuration using Pydantic Settings.

Components:
- settings: Application, rendering and browser executable settings
- logging: Structured logging configuration
"""
