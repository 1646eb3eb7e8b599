"""
==============================================================================
Catalog Reconciliation Module
==============================================================================

Computes the startup catalog from the authoritative snapshot and the
catalog saved by the previous session.

Policy:
-------
1. The authoritative snapshot is the baseline; its products are taken
   verbatim and win on id collision.
2. Local products whose id is not in the snapshot (created on this
   device) are appended in their saved order.
3. Local edits to a product that also exists in the snapshot are NOT
   kept. The bundled catalog is the single source of truth for shared
   products.

Failure Handling:
----------------
- Snapshot unavailable or malformed: the current catalog is left as is.
- Saved catalog corrupt: the store starts empty, so nothing local is kept.
- Saves failing: the in-memory catalog is the local side, so products
  added while persistence is down are kept.
- Result cannot be persisted: logged, the in-memory result stands.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from app.catalog.models import Product
from app.catalog.snapshot import SnapshotSource
from app.catalog.store import CatalogStore
from app.core.exceptions import FetchError, FormatError, PersistenceError


# Module logger
logger = logging.getLogger(__name__)


def reconcile(
    authoritative: Sequence[Product],
    local: Optional[Sequence[Product]] = None
) -> List[Product]:
    """
    Merge the authoritative snapshot with the local catalog.

    Args:
        authoritative: Products of the authoritative snapshot
        local: Products saved by the previous session, if any

    Returns:
        Authoritative products followed by local-only products

    Example:
        >>> reconcile([latte], [old_latte, house_brew])
        [latte, house_brew]
    """
    baseline: Dict[str, Product] = {}
    for product in authoritative:
        baseline[product.id] = product

    result = list(baseline.values())
    if not local:
        return result

    seen = set(baseline)
    for product in local:
        if product.id in seen:
            continue
        seen.add(product.id)
        result.append(product)

    return result


class CatalogReconciler:
    """
    Refreshes the catalog store from the authoritative snapshot.

    Attributes:
        store: Catalog store to refresh
        source: Where the authoritative snapshot comes from

    Example:
        >>> reconciler = CatalogReconciler(store, SnapshotSource("data/productos.json"))
        >>> await reconciler.refresh()
        True
    """

    def __init__(self, store: CatalogStore, source: SnapshotSource) -> None:
        self._store = store
        self._source = source

    @property
    def source(self) -> SnapshotSource:
        return self._source

    async def refresh(self) -> bool:
        """
        Reconcile the store with the authoritative snapshot.

        Returns:
            True if the store was replaced, False if the snapshot could not
            be used and the store was left untouched
        """
        try:
            authoritative = await self._source.fetch()
        except (FetchError, FormatError) as e:
            logger.warning(f"Authoritative catalog unavailable, keeping current state: {e.message}")
            return False

        # The store holds the saved catalog plus any edits not yet persisted
        products = reconcile(authoritative, self._store.get())
        local_only = len(products) - len({p.id for p in authoritative})

        try:
            self._store.set(products)
        except PersistenceError as e:
            logger.error(f"Reconciled catalog not persisted: {e.message}")

        logger.info(
            f"✅ Catalog reconciled: {len(products)} products "
            f"({local_only} local-only) from {self._source.location}"
        )
        return True


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

_reconciler_instance: Optional[CatalogReconciler] = None


def get_reconciler() -> Optional[CatalogReconciler]:
    """Get the global reconciler instance."""
    return _reconciler_instance


def init_reconciler(store: CatalogStore, source: SnapshotSource) -> CatalogReconciler:
    """Initialize the global reconciler instance."""
    global _reconciler_instance
    _reconciler_instance = CatalogReconciler(store, source)
    return _reconciler_instance
