"""
==============================================================================
Catalog Store Module
==============================================================================

Single owner of the live product catalog.

Every mutation goes through this class and is written to the persistence
collaborator before the call returns. Internally the catalog is an
insertion-ordered mapping from id to product; callers see a list.

Persistence Failures:
--------------------
The in-memory catalog is updated first, then saved. When saving fails the
store raises ``PersistenceError`` once; further consecutive failures are
only logged until a save succeeds again. The in-memory catalog remains the
session's source of truth either way.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from app.catalog.codec import decode_structured, encode_structured
from app.catalog.models import Product
from app.core.exceptions import FormatError, PersistenceError
from app.db.kv_store import KeyValueStore


# Module logger
logger = logging.getLogger(__name__)


class CatalogStore:
    """
    In-memory catalog mirrored to local persistence.

    Attributes:
        persistence: Key/value collaborator holding the catalog document
        key: Storage key of the catalog document

    Example:
        >>> store = CatalogStore(SqlKeyValueStore(), "cafe_productos")
        >>> store.load_persisted()
        >>> store.upsert(product)
        >>> store.remove("local-9")
    """

    def __init__(self, persistence: KeyValueStore, key: str) -> None:
        self._persistence = persistence
        self._key = key
        self._by_id: Dict[str, Product] = {}
        self._persistence_failing = False

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def persistence(self) -> KeyValueStore:
        """Persistence collaborator."""
        return self._persistence

    @property
    def key(self) -> str:
        """Storage key of the catalog document."""
        return self._key

    @property
    def persistence_failing(self) -> bool:
        """True while the last save attempt failed."""
        return self._persistence_failing

    # =========================================================================
    # LOADING
    # =========================================================================

    def load_persisted(self) -> int:
        """
        Load the catalog saved by the previous session.

        A missing or unreadable document leaves the catalog empty.

        Returns:
            Number of products loaded
        """
        try:
            text = self._persistence.load(self._key)
        except PersistenceError as e:
            logger.error(f"Local catalog unavailable: {e.message}")
            return 0

        if text is None:
            logger.info("No local catalog saved yet")
            return 0

        try:
            products = decode_structured(text)
        except FormatError as e:
            logger.error(f"Local catalog is corrupt, ignoring it: {e.message}")
            return 0

        self._by_id = self._index(products)
        logger.info(f"Loaded {len(self._by_id)} products from local storage")
        return len(self._by_id)

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    def get(self) -> List[Product]:
        """Current catalog, in order."""
        return list(self._by_id.values())

    def find(self, product_id: str) -> Optional[Product]:
        """Find a product by id."""
        return self._by_id.get(product_id)

    def ids(self) -> List[str]:
        """Product ids, in catalog order."""
        return list(self._by_id.keys())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._by_id

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def set(self, products: Iterable[Product]) -> None:
        """Replace the whole catalog and persist it."""
        self._by_id = self._index(products)
        self._persist()

    def upsert(self, product: Product) -> bool:
        """
        Insert or update a product by id.

        An updated product keeps its position; a new one is appended.

        Returns:
            True if the product was inserted, False if it was updated
        """
        inserted = product.id not in self._by_id
        self._by_id[product.id] = product
        self._persist()
        return inserted

    def remove(self, product_id: str) -> bool:
        """
        Delete a product. Removing an unknown id is a no-op.

        Returns:
            True if a product was removed
        """
        removed = self._by_id.pop(product_id, None) is not None
        self._persist()
        return removed

    # =========================================================================
    # INTERNALS
    # =========================================================================

    @staticmethod
    def _index(products: Iterable[Product]) -> Dict[str, Product]:
        """Build the id mapping; a repeated id keeps its first position."""
        index: Dict[str, Product] = {}
        for product in products:
            index[product.id] = product
        return index

    def _persist(self) -> None:
        try:
            self._persistence.save(self._key, encode_structured(self._by_id.values()))
        except PersistenceError:
            if self._persistence_failing:
                logger.debug("Catalog still not persisted")
                return
            self._persistence_failing = True
            logger.error("Catalog could not be persisted; changes are kept in memory only")
            raise

        if self._persistence_failing:
            logger.info("Catalog persistence recovered")
        self._persistence_failing = False


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

_store_instance: Optional[CatalogStore] = None


def get_catalog_store() -> Optional[CatalogStore]:
    """Get the global catalog store instance."""
    return _store_instance


def init_catalog_store(persistence: KeyValueStore, key: str) -> CatalogStore:
    """
    Initialize the global catalog store and load the persisted catalog.

    Args:
        persistence: Key/value collaborator
        key: Storage key of the catalog document

    Returns:
        CatalogStore instance
    """
    global _store_instance
    _store_instance = CatalogStore(persistence, key)
    _store_instance.load_persisted()
    return _store_instance
