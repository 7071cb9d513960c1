"""Framework adapters for the wirebox container.

``fastapi_integration`` exposes injectors to FastAPI routes and ``testing``
provides injectors with overridable bindings. Both build on the application
layer and are imported on demand.
"""

__all__ = [
    "fastapi_integration",
    "testing",
]
