# FreshCart Models

from .product import (
    Product,
    ProductCategory,
    ProductCreate,
    ProductUpdate,
    InventoryUpdate,
    InventoryUpdateRequest,
    ProductSearchResponse,
    StockLevel,
)
from .cart import CartLine, AddToCartRequest, SetQuantityRequest, CartView, CartResponse
from .checkout import (
    Order,
    OrderHeader,
    OrderLine,
    OrderStatus,
    CheckoutSummary,
    CheckoutRequest,
    CheckoutResponse,
    StatusUpdateRequest,
)
from .notification import Notification, NotificationList
from .seller import SellerDashboard, TopProduct

__all__ = [
    "Product",
    "ProductCategory",
    "ProductCreate",
    "ProductUpdate",
    "InventoryUpdate",
    "InventoryUpdateRequest",
    "ProductSearchResponse",
    "StockLevel",
    "CartLine",
    "AddToCartRequest",
    "SetQuantityRequest",
    "CartView",
    "CartResponse",
    "Order",
    "OrderHeader",
    "OrderLine",
    "OrderStatus",
    "CheckoutSummary",
    "CheckoutRequest",
    "CheckoutResponse",
    "StatusUpdateRequest",
    "Notification",
    "NotificationList",
    "SellerDashboard",
    "TopProduct",
]
