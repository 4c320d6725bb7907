"""Order storage for FreshCart"""

import uuid
import logging
from datetime import datetime, timedelta
from typing import Optional, Protocol

from ..models.checkout import Order, OrderHeader, OrderLine, OrderStatus

logger = logging.getLogger(__name__)


class OrderBackendError(Exception):
    """A remote order write or read failed"""
    pass


class OrderNotFound(OrderBackendError):
    pass


class InvalidStatusTransition(Exception):
    """Order cannot move from its current status to the requested one"""

    def __init__(self, current: OrderStatus, requested: OrderStatus):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move order from {current.value} to {requested.value}")


# Allowed next statuses; delivered and cancelled are terminal
STATUS_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {
        OrderStatus.ACCEPTED,
        OrderStatus.PACKED,
        OrderStatus.ASSIGNED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.ACCEPTED: {OrderStatus.PACKED, OrderStatus.ASSIGNED, OrderStatus.CANCELLED},
    OrderStatus.PACKED: {OrderStatus.ASSIGNED, OrderStatus.CANCELLED},
    OrderStatus.ASSIGNED: {OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED},
    OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    return requested in STATUS_TRANSITIONS[current]


class OrderBackend(Protocol):
    """Order persistence used by checkout and the order routes"""

    async def create_order(self, header: OrderHeader) -> str:
        ...

    async def create_order_lines(self, lines: list[OrderLine]) -> None:
        ...

    async def delete_order(self, order_id: str) -> None:
        ...

    async def get_order(self, order_id: str) -> Optional[Order]:
        ...

    async def list_orders(
        self,
        buyer_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        limit: int = 50,
    ) -> list[Order]:
        ...

    async def update_status(self, order_id: str, status: OrderStatus) -> Order:
        ...

    async def assign_delivery(self, order_id: str, delivery_id: str) -> Order:
        ...

    async def sweep_orphaned_orders(self, max_age_seconds: int = 300) -> int:
        ...


class OrderDatabase:
    """In-memory order storage"""

    def __init__(self):
        self.headers: dict[str, OrderHeader] = {}
        self.lines: dict[str, list[OrderLine]] = {}

    async def create_order(self, header: OrderHeader) -> str:
        """Store an order header and return its assigned id"""
        now = datetime.utcnow()
        order_id = str(uuid.uuid4())
        self.headers[order_id] = header.model_copy(
            update={"id": order_id, "created_at": now, "updated_at": now}
        )
        return order_id

    async def create_order_lines(self, lines: list[OrderLine]) -> None:
        """Attach lines to their order headers"""
        missing = {line.order_id for line in lines} - set(self.headers)
        if missing:
            raise OrderNotFound(f"Unknown order(s): {', '.join(sorted(missing))}")

        for line in lines:
            self.lines.setdefault(line.order_id, []).append(line)

    async def delete_order(self, order_id: str) -> None:
        """Delete an order header and its lines"""
        self.headers.pop(order_id, None)
        self.lines.pop(order_id, None)

    async def get_order(self, order_id: str) -> Optional[Order]:
        """Get an order by ID"""
        header = self.headers.get(order_id)
        if not header:
            return None
        return Order(header=header, lines=list(self.lines.get(order_id, [])))

    async def list_orders(
        self,
        buyer_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        limit: int = 50,
    ) -> list[Order]:
        """List recent orders, newest first"""
        headers = list(self.headers.values())
        if buyer_id:
            headers = [h for h in headers if h.buyer_id == buyer_id]
        if status:
            headers = [h for h in headers if h.status == status]
        headers.sort(key=lambda h: h.created_at, reverse=True)
        return [
            Order(header=h, lines=list(self.lines.get(h.id, [])))
            for h in headers[:limit]
        ]

    async def update_status(self, order_id: str, status: OrderStatus) -> Order:
        """Move an order to a new status"""
        header = self.headers.get(order_id)
        if not header:
            raise OrderNotFound(f"Order {order_id} not found")

        if not can_transition(header.status, status):
            raise InvalidStatusTransition(header.status, status)

        self.headers[order_id] = header.model_copy(
            update={"status": status, "updated_at": datetime.utcnow()}
        )
        return await self.get_order(order_id)

    async def assign_delivery(self, order_id: str, delivery_id: str) -> Order:
        """Hand an order to a courier"""
        header = self.headers.get(order_id)
        if not header:
            raise OrderNotFound(f"Order {order_id} not found")

        if not can_transition(header.status, OrderStatus.ASSIGNED):
            raise InvalidStatusTransition(header.status, OrderStatus.ASSIGNED)

        self.headers[order_id] = header.model_copy(
            update={
                "status": OrderStatus.ASSIGNED,
                "delivery_id": delivery_id,
                "updated_at": datetime.utcnow(),
            }
        )
        return await self.get_order(order_id)

    async def sweep_orphaned_orders(self, max_age_seconds: int = 300) -> int:
        """
        Delete order headers that never got any lines.

        Covers checkouts whose compensating delete failed. Only headers
        older than max_age_seconds are removed so in-flight checkouts are
        left alone.
        """
        cutoff = datetime.utcnow() - timedelta(seconds=max_age_seconds)
        orphaned = [
            order_id for order_id, header in self.headers.items()
            if not self.lines.get(order_id) and header.created_at < cutoff
        ]
        for order_id in orphaned:
            del self.headers[order_id]
            logger.info(f"Removed orphaned order header {order_id}")
        return len(orphaned)
