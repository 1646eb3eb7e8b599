"""
==============================================================================
Inventory Service Module
==============================================================================

Import and export of the whole catalog as files.

Import Flow:
-----------
    upload (name + bytes)
        │
        ▼
    FileFormat.from_filename  ── unsupported ──▶ UNSUPPORTED_FORMAT, no change
        │
        ▼
    decode (JSON strict / CSV permissive) ── malformed JSON ──▶ INVALID_FORMAT
        │
        ▼
    ImportPreview (record count, row warnings)
        │
        ▼
    decide(preview) ── None ──▶ cancelled, no change
        │ merge / replace
        ▼
    apply_import → CatalogStore.set → cart prune of removed ids

The decision is an injected callback so the flow runs without any UI.

==============================================================================
"""

from __future__ import annotations

import enum
import logging
from pathlib import PurePath
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from app.catalog.codec import (
    decode_delimited,
    decode_structured,
    encode_delimited,
    encode_structured,
)
from app.catalog.merge import ImportOutcome, ImportStrategy, apply_import
from app.catalog.models import Product
from app.catalog.store import CatalogStore
from app.core import exceptions
from app.core.exceptions import FormatError, RowError
from app.services.cart_service import CartService


# Module logger
logger = logging.getLogger(__name__)


class FileFormat(str, enum.Enum):
    """Interchange formats, named by file extension."""

    STRUCTURED = "json"
    DELIMITED = "csv"

    def __str__(self) -> str:
        """Return the enum value as string."""
        return self.value

    @property
    def media_type(self) -> str:
        if self is FileFormat.STRUCTURED:
            return "application/json"
        return "text/csv;charset=utf-8"

    @classmethod
    def from_filename(cls, filename: str) -> "FileFormat":
        """
        Infer the format from a file extension.

        Raises:
            AppException: UNSUPPORTED_FORMAT for anything but .json/.csv
        """
        suffix = PurePath(filename or "").suffix.lower().lstrip(".")
        for member in cls:
            if member.value == suffix:
                return member
        raise exceptions.unsupported_format(filename)


class ImportPreview(BaseModel):
    """Summary shown before the operator picks a strategy."""

    filename: str
    format: FileFormat
    record_count: int
    warnings: List[RowError] = Field(default_factory=list)

    model_config = ConfigDict(arbitrary_types_allowed=True)


class ExportArtifact(BaseModel):
    """A downloadable inventory file."""

    filename: str
    media_type: str
    content: str

    def encode(self) -> bytes:
        return self.content.encode("utf-8")


ImportDecision = Callable[[ImportPreview], Optional[ImportStrategy]]


def always(strategy: ImportStrategy) -> ImportDecision:
    """Decision callback that always answers ``strategy``."""
    def decide(preview: ImportPreview) -> ImportStrategy:
        return strategy
    return decide


class InventoryService:
    """
    Import/export orchestration over the catalog store.

    Attributes:
        _store: Catalog store
        _cart: Cart pruned after a replace import
        _export_basename: File name of exported artifacts
        _max_import_bytes: Largest accepted upload

    Example:
        >>> service = InventoryService(store, cart)
        >>> outcome = service.import_file("menu.csv", data, always(ImportStrategy.MERGE))
        >>> artifact = service.export(FileFormat.DELIMITED)
    """

    def __init__(
        self,
        store: CatalogStore,
        cart: Optional[CartService] = None,
        export_basename: str = "inventario_cafeteria",
        max_import_bytes: Optional[int] = None
    ) -> None:
        self._store = store
        self._cart = cart
        self._export_basename = export_basename
        self._max_import_bytes = max_import_bytes

    @property
    def max_import_bytes(self) -> Optional[int]:
        """Largest accepted upload, or None for no limit."""
        return self._max_import_bytes

    def check_size(self, size: int) -> None:
        """
        Reject an upload larger than the configured limit.

        Raises:
            AppException: IMPORT_TOO_LARGE
        """
        if self._max_import_bytes is not None and size > self._max_import_bytes:
            raise exceptions.import_too_large(size, self._max_import_bytes)

    # =========================================================================
    # IMPORT
    # =========================================================================

    def parse_file(self, filename: str, data: bytes) -> Tuple[List[Product], ImportPreview]:
        """
        Decode an uploaded inventory without touching the catalog.

        Raises:
            AppException: UNSUPPORTED_FORMAT, IMPORT_TOO_LARGE
            FormatError: If a JSON file is malformed
        """
        file_format = FileFormat.from_filename(filename)

        self.check_size(len(data))

        warnings: List[RowError] = []
        if file_format is FileFormat.STRUCTURED:
            try:
                text = data.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise FormatError(f"File is not valid UTF-8: {e.reason}") from e
            products = decode_structured(text)
        else:
            text = data.decode("utf-8-sig", errors="replace")
            products = decode_delimited(text, errors=warnings)

        preview = ImportPreview(
            filename=filename,
            format=file_format,
            record_count=len(products),
            warnings=warnings,
        )
        logger.info(
            f"Parsed {filename}: {preview.record_count} products, "
            f"{len(warnings)} row warnings"
        )
        return products, preview

    def import_file(
        self,
        filename: str,
        data: bytes,
        decide: ImportDecision
    ) -> Tuple[ImportPreview, Optional[ImportOutcome]]:
        """
        Parse an upload, ask for a strategy and commit the result.

        Args:
            filename: Original file name (selects the format)
            data: Raw file bytes
            decide: Callback choosing merge/replace, or None to cancel

        Returns:
            Tuple of (preview, outcome). The outcome is None when the file
            holds no products or the decision was to cancel.

        Raises:
            AppException: UNSUPPORTED_FORMAT, IMPORT_TOO_LARGE
            FormatError: If a JSON file is malformed
        """
        products, preview = self.parse_file(filename, data)

        if not products:
            logger.info(f"Import of {filename} skipped: no products")
            return preview, None

        strategy = decide(preview)
        if strategy is None:
            logger.info(f"Import of {filename} cancelled")
            return preview, None

        outcome = self.apply(products, strategy)
        return preview, outcome

    def apply(self, products: List[Product], strategy: ImportStrategy) -> ImportOutcome:
        """Commit parsed products with the given strategy."""
        outcome = apply_import(self._store.get(), products, strategy)
        try:
            self._store.set(outcome.products)
        finally:
            if outcome.removed_ids and self._cart is not None:
                self._cart.prune(outcome.removed_ids)

        logger.info(
            f"✅ Import committed ({outcome.strategy}): {outcome.total} products, "
            f"{len(outcome.added_ids)} added, {len(outcome.updated_ids)} updated, "
            f"{len(outcome.removed_ids)} removed"
        )
        return outcome

    # =========================================================================
    # EXPORT
    # =========================================================================

    def export(self, file_format: FileFormat) -> ExportArtifact:
        """Serialize the current catalog as a downloadable file."""
        file_format = FileFormat(file_format)
        products = self._store.get()
        if file_format is FileFormat.STRUCTURED:
            content = encode_structured(products)
        else:
            content = encode_delimited(products)

        artifact = ExportArtifact(
            filename=f"{self._export_basename}.{file_format.value}",
            media_type=file_format.media_type,
            content=content,
        )
        logger.info(f"Exported {len(products)} products as {artifact.filename}")
        return artifact
