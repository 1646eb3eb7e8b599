"""
Application Exception Handling

AppException is the base for all application errors, with FastAPI integration.
Catalog-level failures (fetch, format, row, persistence) are subclasses so
the catalog layer can raise and catch them without knowing about HTTP.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Unified application exception for all error scenarios.

    Provides consistent error response format across the entire API.

    Usage:
        raise AppException("Product not found", "PRODUCT_NOT_FOUND", 404)
        raise AppException("Bad file", "INVALID_FORMAT", 422, {"record": 3})

    Error Codes:
        Catalog:
            - PRODUCT_NOT_FOUND (404)
            - INVALID_CATEGORY (422)
            - CATALOG_NOT_LOADED (500)
            - SNAPSHOT_UNAVAILABLE (503)
            - PERSISTENCE_FAILED (507)

        Import / Export:
            - INVALID_FORMAT (422)
            - INVALID_ROW (422)
            - UNSUPPORTED_FORMAT (415)
            - IMPORT_TOO_LARGE (413)
            - EMPTY_IMPORT (400)

        Cart:
            - NOT_IN_CART (404)

        General:
            - INTERNAL_ERROR (500)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "PRODUCT_NOT_FOUND")
            status_code: HTTP status code (default: 400)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


# ============================================
# CATALOG ERRORS
# ============================================

class FetchError(AppException):
    """The authoritative catalog snapshot could not be retrieved."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "SNAPSHOT_UNAVAILABLE", 503, details)


class FormatError(AppException):
    """A structured document is malformed or misses required fields."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "INVALID_FORMAT", 422, details)


class RowError(AppException):
    """
    A single delimited row could not be read as-is.

    Row errors are recorded by the codec next to the value it substituted;
    they never abort an import.
    """

    def __init__(
        self,
        line: int,
        message: str,
        field: Optional[str] = None,
        value: Optional[str] = None
    ):
        details: Dict[str, Any] = {"line": line}
        if field is not None:
            details["field"] = field
        if value is not None:
            details["value"] = value
        self.line = line
        self.field = field
        self.value = value
        super().__init__(f"Line {line}: {message}", "INVALID_ROW", 422, details)


class PersistenceError(AppException):
    """The persistence collaborator failed to load or save a document."""

    def __init__(self, message: str, key: Optional[str] = None):
        details = {"key": key} if key else None
        super().__init__(message, "PERSISTENCE_FAILED", 507, details)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    FastAPI exception handler for AppException.

    Converts AppException to consistent JSON error response.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def product_not_found(product_id: Optional[str] = None) -> AppException:
    """Create product not found exception."""
    details = {"product_id": product_id} if product_id else {}
    return AppException("Product not found", "PRODUCT_NOT_FOUND", 404, details)


def product_exists(product_id: str) -> AppException:
    """Create duplicate product id exception."""
    return AppException(
        "A product with this id already exists",
        "PRODUCT_EXISTS",
        409,
        {"product_id": product_id}
    )


def invalid_category(value: str) -> AppException:
    """Create unknown category exception."""
    return AppException(
        f"Unknown category: {value}",
        "INVALID_CATEGORY",
        422,
        {"category": value}
    )


def not_in_cart(product_id: str) -> AppException:
    """Create cart line not found exception."""
    return AppException(
        "Product is not in the cart",
        "NOT_IN_CART",
        404,
        {"product_id": product_id}
    )


def unsupported_format(filename: str) -> AppException:
    """Create unsupported import file exception."""
    return AppException(
        "Formato no soportado. Usa .json o .csv",
        "UNSUPPORTED_FORMAT",
        415,
        {"filename": filename}
    )


def import_too_large(size: int, limit: int) -> AppException:
    """Create oversized import exception."""
    return AppException(
        f"Import file is too large ({size} bytes, limit {limit})",
        "IMPORT_TOO_LARGE",
        413,
        {"size": size, "limit": limit}
    )


def empty_import(filename: str) -> AppException:
    """Create exception for an import file without records."""
    return AppException(
        "The file does not contain any products",
        "EMPTY_IMPORT",
        400,
        {"filename": filename}
    )


def catalog_not_loaded() -> AppException:
    """Create catalog not loaded exception."""
    return AppException(
        "Product catalog not loaded",
        "CATALOG_NOT_LOADED",
        500
    )
