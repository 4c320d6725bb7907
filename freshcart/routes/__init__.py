# API Routes

from .session import router as session_router
from .products import router as products_router
from .cart import router as cart_router
from .checkout import router as checkout_router
from .orders import router as orders_router
from .seller import router as seller_router
from .notifications import router as notifications_router

__all__ = [
    "session_router",
    "products_router",
    "cart_router",
    "checkout_router",
    "orders_router",
    "seller_router",
    "notifications_router",
]
