"""
Test Utilities
==============

Mocks for the Playwright collaborator.
"""

from .mocks import *
