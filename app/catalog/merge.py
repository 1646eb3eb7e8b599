"""
==============================================================================
Import Merge Module
==============================================================================

Combines an imported product list with the current catalog.

Strategies:
----------
- MERGE: imported products overlay the current catalog by id. Existing ids
  keep their position and take the imported version; new ids follow in
  import order.
- REPLACE: the imported list becomes the catalog.

There is no default strategy; the caller always chooses one.

The outcome lists the ids that were added, updated and removed, so that
collaborators holding product references (the cart) can prune.

==============================================================================
"""

from __future__ import annotations

import enum
from typing import Dict, List, Sequence

from pydantic import BaseModel, Field

from app.catalog.models import Product


class ImportStrategy(str, enum.Enum):
    """How an imported catalog is applied."""

    MERGE = "merge"
    REPLACE = "replace"

    def __str__(self) -> str:
        """Return the enum value as string."""
        return self.value


class ImportOutcome(BaseModel):
    """
    Result of applying an import.

    Attributes:
        strategy: Strategy that produced the result
        products: Resulting catalog, in order
        added_ids: Ids not present before the import
        updated_ids: Ids present before and overwritten by the import
        removed_ids: Ids present before and absent from the result
    """

    strategy: ImportStrategy
    products: List[Product]
    added_ids: List[str] = Field(default_factory=list)
    updated_ids: List[str] = Field(default_factory=list)
    removed_ids: List[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        """Number of products in the resulting catalog."""
        return len(self.products)


def _by_id(products: Sequence[Product]) -> Dict[str, Product]:
    index: Dict[str, Product] = {}
    for product in products:
        index[product.id] = product
    return index


def merge_catalogs(current: Sequence[Product], imported: Sequence[Product]) -> ImportOutcome:
    """
    Overlay imported products on the current catalog.

    Args:
        current: Current catalog
        imported: Products read from the import file

    Returns:
        ImportOutcome with the imported version of every shared id
    """
    merged = _by_id(current)
    added: List[str] = []
    updated: List[str] = []

    for product in imported:
        if product.id in merged:
            if product.id not in updated and product.id not in added:
                updated.append(product.id)
        else:
            added.append(product.id)
        merged[product.id] = product

    return ImportOutcome(
        strategy=ImportStrategy.MERGE,
        products=list(merged.values()),
        added_ids=added,
        updated_ids=updated,
    )


def replace_catalog(current: Sequence[Product], imported: Sequence[Product]) -> ImportOutcome:
    """
    Discard the current catalog in favor of the imported one.

    A repeated id inside the import keeps its first position and its last
    version.

    Args:
        current: Current catalog
        imported: Products read from the import file

    Returns:
        ImportOutcome whose products are the imported list
    """
    previous = _by_id(current)
    result = _by_id(imported)

    return ImportOutcome(
        strategy=ImportStrategy.REPLACE,
        products=list(result.values()),
        added_ids=[pid for pid in result if pid not in previous],
        updated_ids=[pid for pid in result if pid in previous],
        removed_ids=[pid for pid in previous if pid not in result],
    )


def apply_import(
    current: Sequence[Product],
    imported: Sequence[Product],
    strategy: ImportStrategy
) -> ImportOutcome:
    """Apply an import with the chosen strategy."""
    strategy = ImportStrategy(strategy)
    if strategy is ImportStrategy.MERGE:
        return merge_catalogs(current, imported)
    if strategy is ImportStrategy.REPLACE:
        return replace_catalog(current, imported)
    raise ValueError(f"Unknown import strategy: {strategy!r}")
