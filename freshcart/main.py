"""
FreshCart Application

Grocery-delivery marketplace back end: catalogue, session carts with
save-for-later, checkout into orders, seller catalogue management, and
seller/courier order handling with notifications.
"""

import os
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from .core.config import Settings, settings as default_settings
from .core.session import SessionManager
from .database.cart_store import BlobStorage, FileBlobStorage, InMemoryBlobStorage
from .database.notifications import NotificationStore
from .database.orders import OrderBackend, OrderDatabase
from .database.products import ProductCatalog
from .routes import (
    session_router,
    products_router,
    cart_router,
    checkout_router,
    orders_router,
    seller_router,
    notifications_router,
)
from .services.backend_client import BackendClient
from .services.housekeeping import housekeeping_loop

# Load environment variables
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "config", ".env"))

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if default_settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_order_backend(settings: Settings) -> OrderBackend:
    """Hosted backend when configured, otherwise in-memory orders"""
    if settings.backend_configured:
        return BackendClient(
            base_url=settings.backend_url,
            api_key=settings.backend_api_key,
            timeout=settings.backend_timeout,
        )
    return OrderDatabase()


def build_cart_storage(settings: Settings) -> BlobStorage:
    if settings.cart_storage_dir:
        return FileBlobStorage(settings.cart_storage_dir)
    return InMemoryBlobStorage()


def create_app(
    settings: Optional[Settings] = None,
    order_backend: Optional[OrderBackend] = None,
    cart_storage: Optional[BlobStorage] = None,
    catalog: Optional[ProductCatalog] = None,
) -> FastAPI:
    """Build the application with its collaborators"""
    settings = settings or default_settings
    order_backend = order_backend or build_order_backend(settings)
    cart_storage = cart_storage or build_cart_storage(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        logger.info(f"{settings.app_name} starting up...")
        logger.info(f"Order backend: {type(order_backend).__name__}")
        logger.info(f"Cart storage: {type(cart_storage).__name__}")

        housekeeping_task = None
        if settings.housekeeping_interval_seconds > 0:
            housekeeping_task = asyncio.create_task(
                housekeeping_loop(order_backend, app.state.session_manager, settings)
            )

        yield

        logger.info(f"{settings.app_name} shutting down...")
        if housekeeping_task:
            housekeeping_task.cancel()
            try:
                await housekeeping_task
            except asyncio.CancelledError:
                pass
        removed = app.state.session_manager.cleanup_old_sessions()
        if removed:
            logger.info(f"Expired {removed} idle sessions")
        if isinstance(order_backend, BackendClient):
            await order_backend.close()

    app = FastAPI(
        title=settings.app_name,
        description="Grocery delivery marketplace API",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.order_backend = order_backend
    app.state.catalog = catalog or ProductCatalog()
    app.state.notifications = NotificationStore()
    app.state.session_manager = SessionManager(
        storage=cart_storage,
        backend=order_backend,
        settings=settings,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict this
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(session_router)
    app.include_router(products_router)
    app.include_router(cart_router)
    app.include_router(checkout_router)
    app.include_router(orders_router)
    app.include_router(seller_router)
    app.include_router(notifications_router)

    @app.get("/")
    async def home():
        """API index"""
        return {
            "message": f"{settings.app_name} API",
            "docs": "/docs",
            "endpoints": {
                "session": "/api/session",
                "products": "/api/products",
                "cart": "/api/cart",
                "checkout": "/api/checkout",
                "orders": "/api/orders",
                "seller": "/api/seller",
                "notifications": "/api/notifications",
            },
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "freshcart",
            "backend_configured": settings.backend_configured,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "freshcart.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
    )
