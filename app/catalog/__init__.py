"""
==============================================================================
Catalog Package - Inventory Core
==============================================================================

Product catalog with reconciliation and import/export.

Modules:
--------
- models: Product and Category
- codec: JSON and CSV encoding/decoding
- merge: Import strategies (merge / replace)
- snapshot: Authoritative catalog retrieval
- reconciler: Startup reconciliation
- store: CatalogStore, the single owner of the live catalog

==============================================================================
"""

from .models import Category, Product, new_product_id
from .codec import (
    decode_delimited,
    decode_structured,
    encode_delimited,
    encode_structured,
)
from .merge import ImportOutcome, ImportStrategy, apply_import, merge_catalogs, replace_catalog
from .snapshot import SnapshotSource
from .store import CatalogStore, get_catalog_store, init_catalog_store
from .reconciler import CatalogReconciler, get_reconciler, init_reconciler, reconcile

__all__ = [
    "Category",
    "Product",
    "new_product_id",
    "decode_delimited",
    "decode_structured",
    "encode_delimited",
    "encode_structured",
    "ImportOutcome",
    "ImportStrategy",
    "apply_import",
    "merge_catalogs",
    "replace_catalog",
    "SnapshotSource",
    "CatalogStore",
    "get_catalog_store",
    "init_catalog_store",
    "CatalogReconciler",
    "get_reconciler",
    "init_reconciler",
    "reconcile",
]
