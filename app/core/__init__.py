"""
==============================================================================
Core Package
==============================================================================

Core utilities and infrastructure for the application.

This package provides:
- Custom exception handling with consistent error responses
- Catalog error types (fetch, format, row, persistence)
- Exception factory functions for common error scenarios

Modules:
--------
- exceptions: AppException class and error factory functions
- dependencies: FastAPI dependency injection functions (import directly)

Usage:
------
    from app.core import AppException, register_exception_handlers

    # Or use exception factory functions via module
    from app.core import exceptions
    raise exceptions.product_not_found(product_id)

==============================================================================
"""

from .exceptions import (
    AppException,
    FetchError,
    FormatError,
    PersistenceError,
    RowError,
    register_exception_handlers,
)

__all__ = [
    "AppException",
    "FetchError",
    "FormatError",
    "PersistenceError",
    "RowError",
    "register_exception_handlers",
]
