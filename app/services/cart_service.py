"""
==============================================================================
Cart Service Module
==============================================================================

Current order (cart) of the point of sale.

A cart line holds a snapshot of the product taken when it was added and a
positive quantity. The cart is persisted under its own storage key after
every change, as a JSON array of ``{"producto": ..., "cantidad": n}``.

==============================================================================
"""

from __future__ import annotations

import json
import logging
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.catalog.models import Product
from app.core import exceptions
from app.core.exceptions import PersistenceError
from app.db.kv_store import KeyValueStore


# Module logger
logger = logging.getLogger(__name__)


class CartLine(BaseModel):
    """
    One product in the cart.

    Attributes:
        product: Product snapshot
        quantity: Units ordered (at least 1)
    """

    model_config = ConfigDict(populate_by_name=True)

    product: Product = Field(..., alias="producto")
    quantity: int = Field(..., ge=1, alias="cantidad")

    @property
    def subtotal(self) -> float:
        return round(self.product.price * self.quantity, 2)


class CartService:
    """
    Cart aggregation over products.

    Attributes:
        _persistence: Key/value collaborator
        _key: Storage key of the cart document
        _persistence_failing: True while saves fail; only the first failure raises

    Example:
        >>> cart = CartService(SqlKeyValueStore(), "cafe_carrito")
        >>> cart.add(latte)
        >>> cart.update_quantity(latte.id, +2)
        >>> cart.total()
        10.5
    """

    def __init__(self, persistence: KeyValueStore, key: str) -> None:
        self._persistence = persistence
        self._key = key
        self._lines: Dict[str, CartLine] = {}
        self._persistence_failing = False

    @property
    def persistence_failing(self) -> bool:
        """True while the last save attempt failed."""
        return self._persistence_failing

    # =========================================================================
    # LOADING
    # =========================================================================

    def load_persisted(self) -> int:
        """
        Load the cart saved by the previous session.

        Returns:
            Number of cart lines loaded
        """
        try:
            text = self._persistence.load(self._key)
        except PersistenceError as e:
            logger.error(f"Saved cart unavailable: {e.message}")
            return 0

        if text is None:
            return 0

        try:
            data = json.loads(text)
            lines = [CartLine.model_validate(item) for item in data]
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            logger.error(f"Saved cart is corrupt, starting empty: {e}")
            return 0

        self._lines = {line.product.id: line for line in lines}
        logger.info(f"Loaded cart with {len(self._lines)} lines")
        return len(self._lines)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def lines(self) -> List[CartLine]:
        """Cart lines in the order they were added."""
        return list(self._lines.values())

    def get_line(self, product_id: str) -> Optional[CartLine]:
        return self._lines.get(product_id)

    def item_count(self) -> int:
        """Total units in the cart."""
        return sum(line.quantity for line in self._lines.values())

    def total(self) -> float:
        """Order total."""
        return round(sum(line.product.price * line.quantity for line in self._lines.values()), 2)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def add(self, product: Product) -> CartLine:
        """Add one unit of a product."""
        line = self._lines.get(product.id)
        if line is None:
            line = CartLine(product=product, quantity=1)
        else:
            line = line.model_copy(update={"quantity": line.quantity + 1})
        self._lines[product.id] = line
        self._persist()
        return line

    def update_quantity(self, product_id: str, delta: int) -> CartLine:
        """
        Change the quantity of a line; it never drops below 1.

        Raises:
            AppException: NOT_IN_CART if the product has no line
        """
        line = self._lines.get(product_id)
        if line is None:
            raise exceptions.not_in_cart(product_id)
        line = line.model_copy(update={"quantity": max(1, line.quantity + delta)})
        self._lines[product_id] = line
        self._persist()
        return line

    def remove(self, product_id: str) -> bool:
        """Remove a line; unknown ids are ignored."""
        removed = self._lines.pop(product_id, None) is not None
        if removed:
            self._persist()
        return removed

    def prune(self, product_ids: Iterable[str]) -> List[str]:
        """
        Remove the lines of products that left the catalog.

        Returns:
            Ids whose lines were removed
        """
        pruned = [pid for pid in product_ids if pid in self._lines]
        for pid in pruned:
            del self._lines[pid]
        if pruned:
            logger.info(f"Removed {len(pruned)} deleted products from the cart")
            self._persist()
        return pruned

    def clear(self) -> None:
        """Empty the cart."""
        self._lines.clear()
        self._persist()

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _persist(self) -> None:
        document = json.dumps(
            [line.model_dump(by_alias=True, exclude_none=True, mode="json") for line in self._lines.values()],
            ensure_ascii=False,
        )
        try:
            self._persistence.save(self._key, document)
        except PersistenceError:
            if self._persistence_failing:
                logger.debug("Cart still not persisted")
                return
            self._persistence_failing = True
            logger.error("Cart could not be persisted; changes are kept in memory only")
            raise

        if self._persistence_failing:
            logger.info("Cart persistence recovered")
        self._persistence_failing = False


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

_cart_instance: Optional[CartService] = None


def get_cart_service() -> Optional[CartService]:
    """Get the global cart instance."""
    return _cart_instance


def init_cart_service(persistence: KeyValueStore, key: str) -> CartService:
    """Initialize the global cart and load the saved cart."""
    global _cart_instance
    _cart_instance = CartService(persistence, key)
    _cart_instance.load_persisted()
    return _cart_instance
