"""Cart API routes"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Depends

from ..core.session import ShopperSession
from ..database.products import ProductCatalog
from ..models.cart import (
    CartLine,
    CartView,
    CartResponse,
    AddToCartRequest,
    SetQuantityRequest,
)
from .deps import get_catalog, get_session, get_idle_session

router = APIRouter(prefix="/api/cart", tags=["Cart"])


def _cart_response(session: ShopperSession, message: Optional[str] = None) -> CartResponse:
    engine = session.engine
    return CartResponse(
        session_id=session.session_id,
        cart=CartView(
            items=engine.items,
            saved_items=engine.saved_items,
            total_items=engine.total_items,
            total_price=engine.total_price,
            summary=engine.summary(),
        ),
        message=message,
    )


@router.get("", response_model=CartResponse)
async def get_cart(session: ShopperSession = Depends(get_session)):
    """Get the session's cart and saved items"""
    return _cart_response(session)


@router.post("/items", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    session: ShopperSession = Depends(get_idle_session),
    catalog: ProductCatalog = Depends(get_catalog),
):
    """Add a catalogue product to the cart"""
    product = catalog.get_product(request.product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    if not product.in_stock:
        raise HTTPException(status_code=400, detail=f"{product.name} is out of stock")

    session.engine.add_item(
        CartLine(
            product_id=product.id,
            name=product.name,
            price=product.price,
            image=product.image,
            quantity=request.quantity,
            unit=product.unit,
        )
    )
    return _cart_response(session, f"Added {request.quantity}x {product.name} to cart")


@router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str,
    request: SetQuantityRequest,
    session: ShopperSession = Depends(get_idle_session),
):
    """Set item quantity; below 1 removes the item"""
    session.engine.set_quantity(product_id, request.quantity)
    return _cart_response(session, "Cart updated")


@router.post("/items/{product_id}/increment", response_model=CartResponse)
async def increment_item(product_id: str, session: ShopperSession = Depends(get_idle_session)):
    session.engine.increment(product_id)
    return _cart_response(session)


@router.post("/items/{product_id}/decrement", response_model=CartResponse)
async def decrement_item(product_id: str, session: ShopperSession = Depends(get_idle_session)):
    session.engine.decrement(product_id)
    return _cart_response(session)


@router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_from_cart(product_id: str, session: ShopperSession = Depends(get_idle_session)):
    """Remove an item from the cart"""
    session.engine.remove_item(product_id)
    return _cart_response(session, "Item removed")


@router.delete("", response_model=CartResponse)
async def clear_cart(session: ShopperSession = Depends(get_idle_session)):
    """Clear the active cart"""
    session.engine.clear_cart()
    return _cart_response(session, "Cart cleared")


@router.post("/items/{product_id}/save-for-later", response_model=CartResponse)
async def save_for_later(product_id: str, session: ShopperSession = Depends(get_idle_session)):
    session.engine.save_for_later(product_id)
    return _cart_response(session, "Saved for later")


@router.post("/saved/{product_id}/move-to-cart", response_model=CartResponse)
async def move_to_cart(product_id: str, session: ShopperSession = Depends(get_idle_session)):
    session.engine.move_to_cart(product_id)
    return _cart_response(session, "Moved to cart")


@router.delete("/saved/{product_id}", response_model=CartResponse)
async def remove_saved_item(product_id: str, session: ShopperSession = Depends(get_idle_session)):
    session.engine.remove_saved_item(product_id)
    return _cart_response(session, "Saved item removed")


@router.delete("/saved", response_model=CartResponse)
async def clear_saved_items(session: ShopperSession = Depends(get_idle_session)):
    session.engine.clear_saved_items()
    return _cart_response(session, "Saved items cleared")
