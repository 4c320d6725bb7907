"""Seller dashboard models for FreshCart"""

from pydantic import BaseModel

from .checkout import OrderHeader
from .product import Product


class TopProduct(BaseModel):
    product_id: str
    name: str
    quantity_sold: int
    revenue: float


class SellerDashboard(BaseModel):
    """Figures for the seller overview page"""
    total_products: int
    out_of_stock_count: int
    low_stock_products: list[Product]
    total_orders: int
    orders_by_status: dict[str, int]
    revenue: float
    recent_orders: list[OrderHeader]
    top_products: list[TopProduct]
