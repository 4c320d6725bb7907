"""
Product Catalogue

In-memory produce catalogue. Shoppers search it; sellers create, edit and
delete their own products and adjust price and stock.
"""

import uuid
import logging
from datetime import datetime
from typing import Iterable, Optional

from ..models.product import (
    InventoryUpdate,
    Product,
    ProductCategory,
    ProductCreate,
    ProductUpdate,
)

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base exception for catalogue changes"""
    pass


class ProductNotFound(CatalogError):
    """No such product, or it belongs to another seller"""
    pass


def _image(photo_id: str) -> str:
    return f"https://images.unsplash.com/photo-{photo_id}?w=400&h=400&fit=crop"


# House produce with no owning seller; sellers cannot edit these
SEED_PRODUCTS: list[Product] = [
    Product(
        id="v1",
        name="Fresh Tomatoes",
        price=40,
        original_price=50,
        unit="500g",
        image=_image("1546470427-227c7369a9b9"),
        category=ProductCategory.VEGETABLES,
        badge="20% OFF",
    ),
    Product(
        id="v2",
        name="Green Capsicum",
        price=35,
        unit="250g",
        image=_image("1563565375-f3fdfdbefa83"),
        category=ProductCategory.VEGETABLES,
    ),
    Product(
        id="v3",
        name="Fresh Spinach",
        price=25,
        unit="250g",
        image=_image("1576045057995-568f588f82fb"),
        category=ProductCategory.VEGETABLES,
        badge="Organic",
    ),
    Product(
        id="v4",
        name="Carrots",
        price=45,
        unit="500g",
        image=_image("1598170845058-32b9d6a5da37"),
        category=ProductCategory.VEGETABLES,
    ),
    Product(
        id="v5",
        name="Onions",
        price=30,
        unit="1kg",
        image=_image("1618512496248-a07fe83aa8cb"),
        category=ProductCategory.VEGETABLES,
    ),
    Product(id="v6", name="Potatoes", price=35, unit="1kg", category=ProductCategory.VEGETABLES),
    Product(
        id="f1",
        name="Red Apples",
        price=120,
        original_price=150,
        unit="1kg",
        category=ProductCategory.FRUITS,
        badge="Best Seller",
    ),
    Product(id="f2", name="Fresh Bananas", price=50, unit="1 dozen", category=ProductCategory.FRUITS),
    Product(id="f3", name="Oranges", price=80, unit="1kg", category=ProductCategory.FRUITS, badge="Fresh"),
    Product(id="f4", name="Grapes", price=90, unit="500g", category=ProductCategory.FRUITS),
    Product(id="f5", name="Pomegranate", price=150, unit="1kg", category=ProductCategory.FRUITS),
    Product(
        id="f6",
        name="Watermelon",
        price=60,
        unit="1 piece",
        category=ProductCategory.FRUITS,
        badge="Seasonal",
    ),
    Product(
        id="s1",
        name="Mangoes (Alphonso)",
        price=350,
        unit="1kg",
        category=ProductCategory.SEASONAL,
        badge="Premium",
    ),
    Product(id="s2", name="Sweet Corn", price=40, unit="2 pieces", category=ProductCategory.SEASONAL),
    Product(
        id="o1",
        name="Mixed Vegetables Pack",
        price=99,
        original_price=150,
        unit="1kg",
        category=ProductCategory.OFFERS,
        badge="34% OFF",
    ),
    Product(
        id="o2",
        name="Fruit Basket",
        price=299,
        original_price=400,
        unit="2kg",
        category=ProductCategory.OFFERS,
        badge="25% OFF",
    ),
]


class ProductCatalog:
    """Products keyed by id, in insertion order"""

    def __init__(self, products: Optional[Iterable[Product]] = None):
        seed = SEED_PRODUCTS if products is None else products
        self.products: dict[str, Product] = {p.id: p.model_copy() for p in seed}

    # ==================== Shopper reads ====================

    def get_product(self, product_id: str) -> Optional[Product]:
        return self.products.get(product_id)

    def search_products(
        self,
        query: Optional[str] = None,
        category: Optional[ProductCategory] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        in_stock_only: bool = True,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Product], int]:
        """
        Filter the catalogue.

        The query matches name or description, case-insensitively.

        Returns:
            Tuple of (page of matching products, total match count)
        """
        needle = query.lower() if query else None

        def matches(p: Product) -> bool:
            if needle and needle not in p.name.lower() and needle not in (p.description or "").lower():
                return False
            if category and p.category != category:
                return False
            if min_price is not None and p.price < min_price:
                return False
            if max_price is not None and p.price > max_price:
                return False
            return p.in_stock or not in_stock_only

        found = [p for p in self.products.values() if matches(p)]
        return found[offset : offset + limit], len(found)

    # ==================== Seller writes ====================

    def list_seller_products(self, seller_id: str, query: Optional[str] = None) -> list[Product]:
        """A seller's products sorted by name"""
        owned = [p for p in self.products.values() if p.seller_id == seller_id]
        if query:
            owned = [p for p in owned if query.lower() in p.name.lower()]
        return sorted(owned, key=lambda p: p.name.lower())

    def get_seller_product(self, seller_id: str, product_id: str) -> Product:
        product = self.products.get(product_id)
        if not product or product.seller_id != seller_id:
            raise ProductNotFound(f"Product {product_id} not found")
        return product

    def create_product(self, seller_id: str, data: ProductCreate) -> Product:
        now = datetime.utcnow()
        product = Product(
            id=str(uuid.uuid4()),
            seller_id=seller_id,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self.products[product.id] = product
        logger.info(f"Seller {seller_id} added product {product.id} ({product.name})")
        return product

    def update_product(self, seller_id: str, product_id: str, data: ProductUpdate) -> Product:
        """Apply the fields given on a partial update"""
        product = self.get_seller_product(seller_id, product_id)
        changes = data.model_dump(exclude_none=True)
        updated = product.model_copy(update={**changes, "updated_at": datetime.utcnow()})
        self.products[product_id] = updated
        return updated

    def delete_product(self, seller_id: str, product_id: str) -> None:
        self.get_seller_product(seller_id, product_id)
        del self.products[product_id]
        logger.info(f"Seller {seller_id} deleted product {product_id}")

    def update_inventory(self, seller_id: str, updates: list[InventoryUpdate]) -> list[Product]:
        """
        Apply several price/stock changes at once.

        Every product must belong to the seller; otherwise nothing changes.
        """
        for update in updates:
            self.get_seller_product(seller_id, update.product_id)

        now = datetime.utcnow()
        changed = []
        for update in updates:
            fields = update.model_dump(exclude={"product_id"}, exclude_none=True)
            product = self.products[update.product_id].model_copy(update={**fields, "updated_at": now})
            self.products[product.id] = product
            changed.append(product)
        return changed
