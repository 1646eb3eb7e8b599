"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Common: Shared response schemas
- Product: Catalog CRUD and suggestion schemas
- Cart: Current order schemas
- Inventory: Import / export / refresh schemas

==============================================================================
"""

from .common import MessageResponse
from .product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    SuggestionRequest,
)
from .cart import AddToCartRequest, QuantityUpdate, CartResponse
from .inventory import (
    ImportPreviewResponse,
    ImportResultResponse,
    RefreshResponse,
    RowWarning,
)

__all__ = [
    # Common
    "MessageResponse",
    # Product
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ProductListResponse",
    "SuggestionRequest",
    # Cart
    "AddToCartRequest",
    "QuantityUpdate",
    "CartResponse",
    # Inventory
    "ImportPreviewResponse",
    "ImportResultResponse",
    "RefreshResponse",
    "RowWarning",
]
