"""Product models for FreshCart"""

from pydantic import BaseModel, Field, computed_field, field_validator
from typing import Optional
from datetime import datetime
from enum import Enum

# Stock below this shows as "low" on the seller's inventory
LOW_STOCK_THRESHOLD = 20


class ProductCategory(str, Enum):
    VEGETABLES = "vegetables"
    FRUITS = "fruits"
    SEASONAL = "seasonal"
    OFFERS = "offers"


class StockLevel(str, Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class Product(BaseModel):
    """Product in the catalogue"""
    id: str
    name: str
    description: Optional[str] = None
    price: float = Field(gt=0)
    original_price: Optional[float] = None
    unit: str
    image: str = ""
    category: ProductCategory
    badge: Optional[str] = None
    stock: int = Field(default=100, ge=0)
    seller_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    @computed_field
    @property
    def stock_level(self) -> StockLevel:
        if self.stock == 0:
            return StockLevel.OUT_OF_STOCK
        if self.stock < LOW_STOCK_THRESHOLD:
            return StockLevel.LOW_STOCK
        return StockLevel.IN_STOCK


class ProductCreate(BaseModel):
    """A seller's new product"""
    name: str
    description: Optional[str] = None
    price: float = Field(gt=0)
    original_price: Optional[float] = Field(default=None, gt=0)
    unit: str = ""
    image: str
    category: ProductCategory
    badge: Optional[str] = None
    stock: int = Field(ge=0)

    @field_validator("name", "image")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ProductUpdate(BaseModel):
    """Partial product edit; unset fields are left alone"""
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, gt=0)
    original_price: Optional[float] = Field(default=None, gt=0)
    unit: Optional[str] = None
    image: Optional[str] = None
    category: Optional[ProductCategory] = None
    badge: Optional[str] = None
    stock: Optional[int] = Field(default=None, ge=0)

    @field_validator("name", "image")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class InventoryUpdate(BaseModel):
    """Price and/or stock change for one product"""
    product_id: str
    price: Optional[float] = Field(default=None, gt=0)
    stock: Optional[int] = Field(default=None, ge=0)


class InventoryUpdateRequest(BaseModel):
    updates: list[InventoryUpdate] = Field(min_length=1)


class ProductSearchResponse(BaseModel):
    """Response from product search"""
    products: list[Product]
    total: int
    limit: int
    offset: int
