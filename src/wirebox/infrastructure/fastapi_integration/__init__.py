"""
FastAPI integration module.

Provides helpers and utilities for integrating wirebox with FastAPI.
"""

from .integration import (
    InjectorMiddleware,
    create_fastapi_dependency,
    create_request_dependency,
    inject,
)

__all__ = [
    "create_fastapi_dependency",
    "create_request_dependency",
    "inject",
    "InjectorMiddleware",
]
