"""Seller catalogue, inventory and dashboard routes"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query

from ..database.orders import OrderBackend
from ..database.products import ProductCatalog, ProductNotFound
from ..models.product import (
    InventoryUpdateRequest,
    Product,
    ProductCreate,
    ProductUpdate,
)
from ..models.seller import SellerDashboard
from ..security.auth import require_catalog_manager
from ..security.roles import Identity
from ..services.dashboard import build_dashboard
from .deps import get_catalog, get_order_backend

router = APIRouter(prefix="/api/seller", tags=["Seller"])


@router.get("/products", response_model=list[Product])
async def list_my_products(
    query: Optional[str] = Query(None, description="Filter by name"),
    seller: Identity = Depends(require_catalog_manager),
    catalog: ProductCatalog = Depends(get_catalog),
):
    """The caller's products, sorted by name"""
    return catalog.list_seller_products(seller.user_id, query=query)


@router.post("/products", response_model=Product, status_code=201)
async def create_product(
    request: ProductCreate,
    seller: Identity = Depends(require_catalog_manager),
    catalog: ProductCatalog = Depends(get_catalog),
):
    return catalog.create_product(seller.user_id, request)


@router.get("/products/{product_id}", response_model=Product)
async def get_my_product(
    product_id: str,
    seller: Identity = Depends(require_catalog_manager),
    catalog: ProductCatalog = Depends(get_catalog),
):
    try:
        return catalog.get_seller_product(seller.user_id, product_id)
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Product not found")


@router.put("/products/{product_id}", response_model=Product)
async def update_product(
    product_id: str,
    request: ProductUpdate,
    seller: Identity = Depends(require_catalog_manager),
    catalog: ProductCatalog = Depends(get_catalog),
):
    """Edit one of the caller's products"""
    try:
        return catalog.update_product(seller.user_id, product_id, request)
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Product not found")


@router.delete("/products/{product_id}")
async def delete_product(
    product_id: str,
    seller: Identity = Depends(require_catalog_manager),
    catalog: ProductCatalog = Depends(get_catalog),
):
    try:
        catalog.delete_product(seller.user_id, product_id)
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"product_id": product_id, "deleted": True}


@router.put("/inventory", response_model=list[Product])
async def update_inventory(
    request: InventoryUpdateRequest,
    seller: Identity = Depends(require_catalog_manager),
    catalog: ProductCatalog = Depends(get_catalog),
):
    """Save price and stock edits for several products at once"""
    try:
        return catalog.update_inventory(seller.user_id, request.updates)
    except ProductNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/dashboard", response_model=SellerDashboard)
async def dashboard(
    seller: Identity = Depends(require_catalog_manager),
    catalog: ProductCatalog = Depends(get_catalog),
    backend: OrderBackend = Depends(get_order_backend),
):
    return await build_dashboard(catalog, backend, seller.user_id)
