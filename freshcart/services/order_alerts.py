"""Notifications sent when orders are placed or move along"""

from ..database.notifications import NotificationStore
from ..database.products import ProductCatalog
from ..models.checkout import Order, OrderLine, OrderStatus


def _short(order_id: str) -> str:
    return order_id[:8]


def _label(status: OrderStatus) -> str:
    return status.value.replace("_", " ")


def notify_order_placed(
    store: NotificationStore,
    catalog: ProductCatalog,
    order_id: str,
    buyer_id: str,
    lines: list[OrderLine],
    total_amount: float,
    currency: str = "INR",
) -> None:
    """Confirm the order to the buyer and alert each seller whose products were ordered"""
    store.notify(
        buyer_id,
        "Order placed",
        f"Your order #{_short(order_id)} for {currency} {total_amount} has been placed.",
    )

    sellers: dict[str, int] = {}
    for line in lines:
        product = catalog.get_product(line.product_id)
        if product and product.seller_id:
            sellers[product.seller_id] = sellers.get(product.seller_id, 0) + line.quantity

    for seller_id, quantity in sellers.items():
        store.notify(
            seller_id,
            "New order received",
            f"Order #{_short(order_id)} includes {quantity} of your items.",
        )


def notify_status_change(store: NotificationStore, order_id: str, order: Order) -> None:
    status = order.header.status
    store.notify(
        order.header.buyer_id,
        f"Order update: {_label(status)}",
        f"Your order #{_short(order_id)} is now {_label(status)}.",
    )
