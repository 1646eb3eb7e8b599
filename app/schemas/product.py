"""
==============================================================================
Product Schemas Module
==============================================================================

Request and response schemas for catalog operations.

Request bodies accept the wire keys (nombre, precio, ...) as well as the
English field names.

==============================================================================
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.catalog.models import Category, Product


class ProductFields(BaseModel):
    """Editable product fields."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=200, alias="nombre")
    price: float = Field(..., ge=0, alias="precio")
    code: Optional[str] = Field(default=None, max_length=50, alias="codigo")
    category: Category = Field(default=Category.OTHER, alias="categoria")
    description: Optional[str] = Field(default=None, max_length=1000, alias="descripcion")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v

    @field_validator("code", "description")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v if v else None

    @field_validator("category", mode="before")
    @classmethod
    def resolve_category(cls, v):
        if isinstance(v, str):
            return Category.parse(v) or v
        return v


class ProductCreate(ProductFields):
    """Product creation request; the id is generated when omitted."""
    id: Optional[str] = Field(default=None, min_length=1, max_length=100)


class ProductUpdate(ProductFields):
    """Product edit request (full replacement of the editable fields)."""


class SuggestionRequest(BaseModel):
    """Suggestion request for the product form."""
    name: str = Field(..., min_length=1, max_length=200, alias="nombre")

    model_config = ConfigDict(populate_by_name=True)


class ProductResponse(BaseModel):
    """Single product response."""
    success: bool = Field(default=True)
    product: Dict[str, Any]

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(product=product.to_wire())


class ProductListResponse(BaseModel):
    """Product list response."""
    success: bool = Field(default=True)
    total: int
    products: List[Dict[str, Any]]

    @classmethod
    def from_products(cls, products: List[Product]) -> "ProductListResponse":
        return cls(total=len(products), products=[p.to_wire() for p in products])
