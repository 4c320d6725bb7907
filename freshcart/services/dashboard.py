"""Seller dashboard figures"""

from collections import Counter

from ..database.orders import OrderBackend
from ..database.products import ProductCatalog
from ..models.checkout import OrderStatus
from ..models.product import StockLevel
from ..models.seller import SellerDashboard, TopProduct


async def build_dashboard(
    catalog: ProductCatalog,
    backend: OrderBackend,
    seller_id: str,
    recent: int = 5,
    top: int = 5,
    order_window: int = 500,
) -> SellerDashboard:
    """
    Summarise a seller's catalogue and the store's orders.

    Order counts and revenue cover the latest order_window orders.
    Cancelled orders count towards orders_by_status but not revenue or
    best sellers.
    """
    products = catalog.list_seller_products(seller_id)
    owned = {p.id: p for p in products}

    orders = await backend.list_orders(limit=order_window)
    live = [o for o in orders if o.header.status != OrderStatus.CANCELLED]

    sold: Counter = Counter()
    takings: Counter = Counter()
    for order in live:
        for line in order.lines:
            if line.product_id in owned:
                sold[line.product_id] += line.quantity
                takings[line.product_id] += line.price * line.quantity

    return SellerDashboard(
        total_products=len(products),
        out_of_stock_count=sum(1 for p in products if p.stock_level == StockLevel.OUT_OF_STOCK),
        low_stock_products=[p for p in products if p.stock_level == StockLevel.LOW_STOCK],
        total_orders=len(orders),
        orders_by_status=dict(Counter(o.header.status.value for o in orders)),
        revenue=round(sum(o.header.total_amount for o in live), 2),
        recent_orders=[o.header for o in orders[:recent]],
        top_products=[
            TopProduct(
                product_id=product_id,
                name=owned[product_id].name,
                quantity_sold=quantity,
                revenue=round(takings[product_id], 2),
            )
            for product_id, quantity in sold.most_common(top)
        ],
    )
