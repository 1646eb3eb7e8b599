"""
==============================================================================
Services Package - Business Logic Layer
==============================================================================

Service classes between the API routes and the catalog core.

This package provides:
- ProductService: Catalog CRUD, search and filter
- CartService: Current order with persistence
- InventoryService: File import (merge / replace) and export
- SuggestionService: Optional AI prefill for new products

Architecture Pattern: Service Layer
----------------------------------
    ┌─────────────────┐
    │   API Router    │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │    Service      │  ← Business Logic
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │  CatalogStore   │  ← Single owner of the catalog
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │  KeyValueStore  │  ← Local persistence
    └─────────────────┘

==============================================================================
"""

from .cart_service import CartLine, CartService, get_cart_service, init_cart_service
from .product_service import ProductService
from .inventory_service import (
    ExportArtifact,
    FileFormat,
    ImportDecision,
    ImportPreview,
    InventoryService,
    always,
)
from .suggestion_service import ProductSuggestion, SuggestionService

__all__ = [
    "CartLine",
    "CartService",
    "get_cart_service",
    "init_cart_service",
    "ProductService",
    "ExportArtifact",
    "FileFormat",
    "ImportDecision",
    "ImportPreview",
    "InventoryService",
    "always",
    "ProductSuggestion",
    "SuggestionService",
]
