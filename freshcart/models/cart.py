"""Cart models for FreshCart"""

from pydantic import BaseModel, Field
from typing import Optional

from .checkout import CheckoutSummary


class CartLine(BaseModel):
    """One product in the active cart or the saved-for-later list.

    The price, name, image and unit are a snapshot taken when the product
    was first added; they are never re-fetched.
    """
    product_id: str
    name: str
    price: float = Field(ge=0)
    image: str = ""
    quantity: int = Field(default=1, ge=1)
    unit: str = ""

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class AddToCartRequest(BaseModel):
    """Request to add a catalogue product to the cart"""
    product_id: str
    quantity: int = Field(default=1, gt=0)


class SetQuantityRequest(BaseModel):
    """Request to set item quantity (below 1 removes the item)"""
    quantity: int


class CartView(BaseModel):
    """Snapshot of both cart lists with derived totals"""
    items: list[CartLine] = []
    saved_items: list[CartLine] = []
    total_items: int = 0
    total_price: float = 0.0
    summary: CheckoutSummary


class CartResponse(BaseModel):
    """Cart API response"""
    session_id: str
    cart: CartView
    message: Optional[str] = None
