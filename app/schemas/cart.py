"""
==============================================================================
Cart Schemas Module
==============================================================================

Request and response schemas for the current order.

==============================================================================
"""

from typing import Any, Dict, List
from pydantic import BaseModel, Field


class AddToCartRequest(BaseModel):
    """Add one unit of a catalog product."""
    product_id: str = Field(..., min_length=1)


class QuantityUpdate(BaseModel):
    """Relative quantity change; the result never drops below 1."""
    delta: int = Field(..., ge=-999, le=999)


class CartResponse(BaseModel):
    """Cart contents with totals."""
    success: bool = Field(default=True)
    items: List[Dict[str, Any]]
    item_count: int = Field(ge=0)
    total: float = Field(ge=0)
