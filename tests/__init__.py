"""
Test Suite
==========

Test Categories:
- unit: Unit tests for individual components
- integration: FastAPI endpoint contracts
"""
