"""Checkout and order models for FreshCart"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    PACKED = "packed"
    ASSIGNED = "assigned"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class CheckoutSummary(BaseModel):
    """Derived checkout amounts for the active cart"""
    subtotal: float
    delivery_fee: float
    grand_total: float
    amount_to_free_delivery: float = 0.0
    currency: str = "INR"

    @classmethod
    def from_subtotal(
        cls,
        subtotal: float,
        delivery_fee: float = 25.0,
        free_delivery_threshold: float = 200.0,
        currency: str = "INR",
    ) -> "CheckoutSummary":
        """Apply the free-delivery threshold to a subtotal"""
        subtotal = round(subtotal, 2)
        fee = 0.0 if subtotal >= free_delivery_threshold else delivery_fee
        return cls(
            subtotal=subtotal,
            delivery_fee=fee,
            grand_total=round(subtotal + fee, 2),
            amount_to_free_delivery=round(max(free_delivery_threshold - subtotal, 0.0), 2),
            currency=currency,
        )


class OrderHeader(BaseModel):
    """Top-level order record, written before its lines"""
    id: Optional[str] = None
    buyer_id: str
    total_amount: float = Field(ge=0)
    status: OrderStatus = OrderStatus.PENDING
    delivery_address: str = ""
    delivery_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderLine(BaseModel):
    """Item in an order"""
    order_id: str
    product_id: str
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)


class Order(BaseModel):
    """Order header together with its lines"""
    header: OrderHeader
    lines: list[OrderLine] = []


class CheckoutRequest(BaseModel):
    """Request to checkout the session's cart"""
    delivery_address: str = ""


class CheckoutResponse(BaseModel):
    """Response from checkout"""
    success: bool
    order_id: Optional[str] = None
    summary: Optional[CheckoutSummary] = None


class StatusUpdateRequest(BaseModel):
    """Request to move an order to a new status"""
    status: OrderStatus
