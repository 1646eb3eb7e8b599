"""
==============================================================================
Product Catalog Endpoints
==============================================================================

Endpoints for browsing, searching and editing the product catalog.

==============================================================================
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from app.catalog.models import Category
from app.core import exceptions
from app.core.dependencies import get_product_service, get_suggestion_service
from app.schemas.common import MessageResponse
from app.schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    SuggestionRequest,
)
from app.services.product_service import ProductService
from app.services.suggestion_service import SuggestionService


router = APIRouter(prefix="/products", tags=["Products"])


class ProductController:
    """Controller for product catalog operations."""

    def __init__(self, service: ProductService):
        self._service = service

    @staticmethod
    def _resolve_category(value: Optional[str]) -> Optional[Category]:
        if value is None or not value.strip():
            return None
        category = Category.parse(value)
        if category is None:
            raise exceptions.invalid_category(value)
        return category

    def list_products(self, query: Optional[str], category: Optional[str]) -> ProductListResponse:
        """List products filtered by text and category."""
        products = self._service.search(query, self._resolve_category(category))
        return ProductListResponse.from_products(products)

    def get_categories(self) -> dict:
        """Get all categories."""
        return {
            "success": True,
            "categories": [
                {"value": c.value, "label": c.english_label}
                for c in Category
            ]
        }

    def get_product(self, product_id: str) -> ProductResponse:
        return ProductResponse.from_product(self._service.get(product_id))

    def create(self, data: ProductCreate) -> ProductResponse:
        return ProductResponse.from_product(self._service.create(data))

    def update(self, product_id: str, data: ProductUpdate) -> ProductResponse:
        return ProductResponse.from_product(self._service.update(product_id, data))

    def delete(self, product_id: str) -> MessageResponse:
        removed = self._service.delete(product_id)
        message = "Product deleted" if removed else "Product was not in the catalog"
        return MessageResponse(message=message)


@router.get("", response_model=ProductListResponse)
async def list_products(
    q: Optional[str] = Query(None, description="Text matched against name or code"),
    category: Optional[str] = Query(None, description="Category label"),
    service: ProductService = Depends(get_product_service)
):
    """List products with optional search text and category filter."""
    controller = ProductController(service)
    return controller.list_products(q, category)


@router.get("/categories")
async def get_categories(service: ProductService = Depends(get_product_service)):
    """Get all product categories."""
    controller = ProductController(service)
    return controller.get_categories()


@router.post("/suggest")
async def suggest_product(
    request: SuggestionRequest,
    suggestions: SuggestionService = Depends(get_suggestion_service)
):
    """
    Suggest price, code, description and category for a product name.

    Returns ``suggestion: null`` when suggestions are unavailable.
    """
    suggestion = await suggestions.suggest(request.name)
    return {
        "success": True,
        "suggestion": suggestion.model_dump(by_alias=True, mode="json") if suggestion else None
    }


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    """Get product by id."""
    controller = ProductController(service)
    return controller.get_product(product_id)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(
    data: ProductCreate,
    service: ProductService = Depends(get_product_service)
):
    """Create a product; the id is generated when omitted, and a taken id is a 409."""
    controller = ProductController(service)
    return controller.create(data)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    data: ProductUpdate,
    service: ProductService = Depends(get_product_service)
):
    """Edit a product in place."""
    controller = ProductController(service)
    return controller.update(product_id, data)


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(product_id: str, service: ProductService = Depends(get_product_service)):
    """Delete a product permanently and drop it from the cart."""
    controller = ProductController(service)
    return controller.delete(product_id)
