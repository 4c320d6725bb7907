# Database modules

from .products import ProductCatalog, CatalogError, ProductNotFound
from .orders import (
    OrderDatabase,
    OrderBackend,
    OrderBackendError,
    OrderNotFound,
    InvalidStatusTransition,
)
from .cart_store import (
    PersistedCartStore,
    InMemoryBlobStorage,
    FileBlobStorage,
    CartStorageError,
)
from .notifications import NotificationStore, NotificationNotFound

__all__ = [
    "ProductCatalog",
    "CatalogError",
    "ProductNotFound",
    "OrderDatabase",
    "OrderBackend",
    "OrderBackendError",
    "OrderNotFound",
    "InvalidStatusTransition",
    "PersistedCartStore",
    "InMemoryBlobStorage",
    "FileBlobStorage",
    "CartStorageError",
    "NotificationStore",
    "NotificationNotFound",
]
