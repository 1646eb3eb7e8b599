"""
==============================================================================
Product Service Module
==============================================================================

Catalog CRUD for the point of sale.

This module implements:
- Listing with text search (name or code) and category filter
- Creation with client-side id generation
- In-place edits (the product keeps its position)
- Permanent deletion, which also drops the product from the cart

All mutations go through the CatalogStore.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List, Optional

from app.catalog.models import Category, Product, new_product_id
from app.catalog.store import CatalogStore
from app.core import exceptions
from app.schemas.product import ProductCreate, ProductUpdate
from app.services.cart_service import CartService


# Module logger
logger = logging.getLogger(__name__)


class ProductService:
    """
    Catalog management service.

    Attributes:
        _store: Catalog store
        _cart: Cart to keep consistent on deletion

    Example:
        >>> service = ProductService(store, cart)
        >>> product = service.create(ProductCreate(nombre="Latte", precio=3.5))
        >>> service.search("lat")
        [Product(id=..., name='Latte', ...)]
    """

    def __init__(self, store: CatalogStore, cart: Optional[CartService] = None) -> None:
        self._store = store
        self._cart = cart

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    def search(
        self,
        query: Optional[str] = None,
        category: Optional[Category] = None
    ) -> List[Product]:
        """
        Filter the catalog.

        Args:
            query: Case-insensitive text matched against name or code
            category: Category filter (None = all categories)

        Returns:
            Matching products in catalog order
        """
        results = []
        for product in self._store.get():
            if category is not None and product.category != category:
                continue
            if query and not product.matches(query):
                continue
            results.append(product)
        return results

    def get(self, product_id: str) -> Product:
        """
        Get product by id.

        Raises:
            AppException: PRODUCT_NOT_FOUND if the id is unknown
        """
        product = self._store.find(product_id)
        if product is None:
            raise exceptions.product_not_found(product_id)
        return product

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    def create(self, data: ProductCreate) -> Product:
        """
        Add a product to the catalog.

        Raises:
            AppException: PRODUCT_EXISTS if the supplied id is taken;
                existing products are changed with update()
        """
        if data.id and data.id in self._store:
            raise exceptions.product_exists(data.id)
        product = Product(
            id=data.id or new_product_id(),
            **data.model_dump(exclude={"id"}),
        )
        self._store.upsert(product)
        logger.info(f"✅ Created product {product.id}: {product.name}")
        return product

    def update(self, product_id: str, data: ProductUpdate) -> Product:
        """
        Replace the editable fields of an existing product.

        Raises:
            AppException: PRODUCT_NOT_FOUND if the id is unknown
        """
        self.get(product_id)
        product = Product(id=product_id, **data.model_dump())
        self._store.upsert(product)
        logger.info(f"Updated product {product_id}: {product.name}")
        return product

    def delete(self, product_id: str) -> bool:
        """
        Delete a product permanently. Unknown ids are a no-op.

        Returns:
            True if a product was removed
        """
        try:
            removed = self._store.remove(product_id)
        finally:
            if self._cart is not None:
                self._cart.remove(product_id)
        if removed:
            logger.info(f"Deleted product {product_id}")
        return removed
