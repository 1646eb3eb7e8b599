"""
==============================================================================
Inventory Endpoints
==============================================================================

Catalog file export, import (merge / replace) and snapshot refresh.

Import is two-step for interactive clients: ``/import/preview`` parses the
upload and reports what it holds; ``/import`` commits it with an explicit
strategy.

==============================================================================
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import Response

from app.catalog.merge import ImportStrategy
from app.catalog.reconciler import CatalogReconciler
from app.catalog.store import CatalogStore
from app.core import exceptions
from app.core.dependencies import (
    get_catalog_store_dep,
    get_inventory_service,
    get_reconciler_dep,
)
from app.core.exceptions import RowError
from app.schemas.inventory import (
    ImportPreviewResponse,
    ImportResultResponse,
    RefreshResponse,
    RowWarning,
)
from app.services.inventory_service import FileFormat, InventoryService, always


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inventory", tags=["Inventory"])


def _warnings(errors: List[RowError]) -> List[RowWarning]:
    return [RowWarning(line=e.line, message=e.message, field=e.field) for e in errors]


class InventoryController:
    """Controller for inventory file operations."""

    def __init__(self, service: InventoryService):
        self._service = service

    async def _read(self, upload: UploadFile) -> bytes:
        """Read an upload, stopping one byte past the size limit."""
        limit = self._service.max_import_bytes
        if limit is None:
            return await upload.read()
        if upload.size is not None:
            self._service.check_size(upload.size)
        data = await upload.read(limit + 1)
        self._service.check_size(len(data))
        return data

    def export(self, file_format: FileFormat) -> Response:
        """Build the download response for the current catalog."""
        artifact = self._service.export(file_format)
        return Response(
            content=artifact.encode(),
            media_type=artifact.media_type,
            headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
        )

    async def preview(self, upload: UploadFile) -> ImportPreviewResponse:
        """Parse an upload without committing it."""
        filename = upload.filename or ""
        data = await self._read(upload)
        _, preview = self._service.parse_file(filename, data)
        return ImportPreviewResponse(
            filename=preview.filename,
            format=preview.format.value,
            record_count=preview.record_count,
            warnings=_warnings(preview.warnings),
        )

    async def import_file(self, upload: UploadFile, strategy: ImportStrategy) -> ImportResultResponse:
        """
        Parse an upload and commit it with the given strategy.

        Raises:
            AppException: EMPTY_IMPORT if the file holds no products
        """
        filename = upload.filename or ""
        data = await self._read(upload)
        preview, outcome = self._service.import_file(filename, data, always(strategy))

        if outcome is None:
            raise exceptions.empty_import(filename)

        return ImportResultResponse(
            committed=True,
            message=f"Inventario actualizado: {outcome.total} productos",
            strategy=outcome.strategy,
            record_count=preview.record_count,
            total=outcome.total,
            added=len(outcome.added_ids),
            updated=len(outcome.updated_ids),
            removed_ids=outcome.removed_ids,
            warnings=_warnings(preview.warnings),
        )


@router.get("/export")
async def export_inventory(
    file_format: FileFormat = Query(FileFormat.STRUCTURED, alias="format"),
    service: InventoryService = Depends(get_inventory_service)
):
    """Download the catalog as JSON or CSV."""
    return InventoryController(service).export(file_format)


@router.post("/import/preview", response_model=ImportPreviewResponse)
async def preview_import(
    file: UploadFile = File(...),
    service: InventoryService = Depends(get_inventory_service)
):
    """Parse an inventory file and report its contents; nothing is changed."""
    return await InventoryController(service).preview(file)


@router.post("/import", response_model=ImportResultResponse)
async def import_inventory(
    strategy: ImportStrategy = Query(..., description="merge or replace"),
    file: UploadFile = File(...),
    service: InventoryService = Depends(get_inventory_service)
):
    """Import an inventory file, merging into or replacing the catalog."""
    return await InventoryController(service).import_file(file, strategy)


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_catalog(
    reconciler: CatalogReconciler = Depends(get_reconciler_dep),
    store: CatalogStore = Depends(get_catalog_store_dep)
):
    """Re-run reconciliation against the authoritative snapshot."""
    refreshed = await reconciler.refresh()
    return RefreshResponse(
        refreshed=refreshed,
        total=len(store),
        source=reconciler.source.location,
    )
