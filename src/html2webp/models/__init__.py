"""
Data Models
===========

Pydantic models for render options, results and API payloads.
"""
