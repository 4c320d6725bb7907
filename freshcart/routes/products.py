"""Product API routes"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query

from ..database.products import ProductCatalog
from ..models.product import Product, ProductCategory, ProductSearchResponse
from .deps import get_catalog

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=ProductSearchResponse)
async def search_products(
    query: Optional[str] = Query(None, description="Matches name or description"),
    category: Optional[ProductCategory] = Query(None, description="Filter by category"),
    min_price: Optional[float] = Query(None, ge=0, description="Minimum price"),
    max_price: Optional[float] = Query(None, ge=0, description="Maximum price"),
    in_stock_only: bool = Query(True, description="Hide sold-out products"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    catalog: ProductCatalog = Depends(get_catalog),
):
    """Browse the catalogue"""
    products, total = catalog.search_products(
        query=query,
        category=category,
        min_price=min_price,
        max_price=max_price,
        in_stock_only=in_stock_only,
        limit=limit,
        offset=offset,
    )
    return ProductSearchResponse(products=products, total=total, limit=limit, offset=offset)


@router.get("/categories", response_model=list[str])
async def list_categories():
    return [c.value for c in ProductCategory]


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, catalog: ProductCatalog = Depends(get_catalog)):
    product = catalog.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
