"""
==============================================================================
Cart Endpoints
==============================================================================

The order being rung up at the counter.

==============================================================================
"""

from fastapi import APIRouter, Depends

from app.core.dependencies import get_cart_dep, get_product_service
from app.schemas.cart import AddToCartRequest, CartResponse, QuantityUpdate
from app.services.cart_service import CartLine, CartService
from app.services.product_service import ProductService


router = APIRouter(prefix="/cart", tags=["Cart"])


def _line_to_dict(line: CartLine) -> dict:
    return {
        "producto": line.product.to_wire(),
        "cantidad": line.quantity,
        "subtotal": line.subtotal,
    }


class CartController:
    """Controller for cart operations."""

    def __init__(self, cart: CartService):
        self._cart = cart

    def get_cart(self) -> CartResponse:
        """Current cart with totals."""
        return CartResponse(
            items=[_line_to_dict(line) for line in self._cart.lines()],
            item_count=self._cart.item_count(),
            total=self._cart.total(),
        )

    def add(self, products: ProductService, product_id: str) -> CartResponse:
        self._cart.add(products.get(product_id))
        return self.get_cart()

    def update_quantity(self, product_id: str, delta: int) -> CartResponse:
        self._cart.update_quantity(product_id, delta)
        return self.get_cart()

    def remove(self, product_id: str) -> CartResponse:
        self._cart.remove(product_id)
        return self.get_cart()

    def clear(self) -> CartResponse:
        self._cart.clear()
        return self.get_cart()


@router.get("", response_model=CartResponse)
async def get_cart(cart: CartService = Depends(get_cart_dep)):
    """Get cart lines, item count and total."""
    return CartController(cart).get_cart()


@router.post("/items", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    cart: CartService = Depends(get_cart_dep),
    products: ProductService = Depends(get_product_service)
):
    """Add one unit of a catalog product."""
    return CartController(cart).add(products, request.product_id)


@router.patch("/items/{product_id}", response_model=CartResponse)
async def update_quantity(
    product_id: str,
    request: QuantityUpdate,
    cart: CartService = Depends(get_cart_dep)
):
    """Change a line quantity by a delta (never below 1)."""
    return CartController(cart).update_quantity(product_id, request.delta)


@router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_from_cart(product_id: str, cart: CartService = Depends(get_cart_dep)):
    """Remove a line from the cart."""
    return CartController(cart).remove(product_id)


@router.delete("", response_model=CartResponse)
async def clear_cart(cart: CartService = Depends(get_cart_dep)):
    """Empty the cart."""
    return CartController(cart).clear()
