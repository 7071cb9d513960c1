"""
Testing utilities module.

Provides helpers and utilities for testing applications using wirebox.
"""

from .utilities import TestInjector, create_mock_injector

__all__ = [
    "TestInjector",
    "create_mock_injector",
]
