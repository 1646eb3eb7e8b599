"""
==============================================================================
Inventory Schemas Module
==============================================================================

Response schemas for inventory import, export and refresh.

==============================================================================
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from app.catalog.merge import ImportStrategy


class RowWarning(BaseModel):
    """A CSV row field that was replaced by a default."""
    line: int
    message: str
    field: Optional[str] = None


class ImportPreviewResponse(BaseModel):
    """Parsed upload summary; nothing is committed."""
    success: bool = Field(default=True)
    filename: str
    format: str
    record_count: int = Field(ge=0)
    warnings: List[RowWarning] = Field(default_factory=list)


class ImportResultResponse(BaseModel):
    """Committed import summary."""
    success: bool = Field(default=True)
    committed: bool
    message: str
    strategy: Optional[ImportStrategy] = None
    record_count: int = Field(ge=0)
    total: int = Field(ge=0)
    added: int = Field(default=0, ge=0)
    updated: int = Field(default=0, ge=0)
    removed_ids: List[str] = Field(default_factory=list)
    warnings: List[RowWarning] = Field(default_factory=list)


class RefreshResponse(BaseModel):
    """Result of re-running the catalog reconciliation."""
    success: bool = Field(default=True)
    refreshed: bool
    total: int = Field(ge=0)
    source: str
