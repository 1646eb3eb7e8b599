"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Dependency injection for the catalog, cart and inventory services.

The catalog store, cart and reconciler are process-wide singletons created
during application startup. Services are cheap wrappers and are built per
request on top of them.

Dependency Hierarchy:
--------------------
                    ┌──────────────────────┐
                    │ get_catalog_store_dep│
                    └──────────┬───────────┘
                               │
        ┌──────────────────────┼──────────────────────┐
        │                      │                      │
┌───────▼────────┐   ┌────────▼────────┐   ┌─────────▼────────┐
│get_product_svc │   │get_inventory_svc│   │  get_cart_dep    │
└────────────────┘   └─────────────────┘   └──────────────────┘

Usage Examples:
--------------
    @router.get("/products")
    async def list_products(service: ProductService = Depends(get_product_service)):
        return service.search()

==============================================================================
"""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends

from app.catalog.reconciler import CatalogReconciler, get_reconciler
from app.catalog.store import CatalogStore, get_catalog_store
from app.config import get_settings
from app.core import exceptions
from app.services.cart_service import CartService, get_cart_service
from app.services.inventory_service import InventoryService
from app.services.product_service import ProductService
from app.services.suggestion_service import SuggestionService


# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON DEPENDENCIES
# =============================================================================

def get_catalog_store_dep() -> CatalogStore:
    """
    FastAPI dependency that provides the catalog store.

    Raises:
        AppException: CATALOG_NOT_LOADED if startup has not run
    """
    store = get_catalog_store()
    if store is None:
        logger.error("Catalog store requested before startup")
        raise exceptions.catalog_not_loaded()
    return store


def get_cart_dep() -> CartService:
    """FastAPI dependency that provides the current cart."""
    cart = get_cart_service()
    if cart is None:
        logger.error("Cart requested before startup")
        raise exceptions.catalog_not_loaded()
    return cart


def get_reconciler_dep() -> CatalogReconciler:
    """FastAPI dependency that provides the catalog reconciler."""
    reconciler = get_reconciler()
    if reconciler is None:
        logger.error("Reconciler requested before startup")
        raise exceptions.catalog_not_loaded()
    return reconciler


@lru_cache()
def get_suggestion_service() -> SuggestionService:
    """FastAPI dependency that provides the suggestion service."""
    return SuggestionService()


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_product_service(
    store: CatalogStore = Depends(get_catalog_store_dep),
    cart: CartService = Depends(get_cart_dep)
) -> ProductService:
    """FastAPI dependency that provides a ProductService."""
    return ProductService(store, cart)


def get_inventory_service(
    store: CatalogStore = Depends(get_catalog_store_dep),
    cart: CartService = Depends(get_cart_dep)
) -> InventoryService:
    """
    FastAPI dependency that provides an InventoryService.

    Export file name and upload size limit come from settings.
    """
    settings = get_settings()
    return InventoryService(
        store,
        cart,
        export_basename=settings.export_basename,
        max_import_bytes=settings.max_import_bytes,
    )
