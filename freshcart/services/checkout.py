"""
Checkout Orchestrator

Turns the active cart into an order header plus order lines, rolling the
header back if the lines cannot be written.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..database.orders import OrderBackend, OrderBackendError
from ..models.checkout import CheckoutSummary, OrderHeader, OrderLine, OrderStatus
from ..security.roles import Identity
from .cart_engine import CartEngine

logger = logging.getLogger(__name__)

IdentityProvider = Callable[[], Optional[Identity]]


class CheckoutError(Exception):
    """Base exception for checkout failures"""
    pass


class CheckoutValidationError(CheckoutError):
    """Checkout rejected before any remote write"""
    pass


class AuthenticationRequired(CheckoutValidationError):
    def __init__(self):
        super().__init__("authentication required")


class EmptyCart(CheckoutValidationError):
    def __init__(self):
        super().__init__("empty cart")


class CheckoutInProgress(CheckoutError):
    def __init__(self):
        super().__init__("checkout already in progress")


class RemoteWriteError(CheckoutError):
    """An order write failed; the cart is left as it was"""
    pass


class OrderCreationFailed(RemoteWriteError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"order creation failed: {reason}")


class OrderItemsFailed(RemoteWriteError):
    def __init__(self, order_id: str, reason: str, rollback_succeeded: bool):
        self.order_id = order_id
        self.reason = reason
        self.rollback_succeeded = rollback_succeeded
        super().__init__(f"order items failed: {reason}")


@dataclass
class CheckoutResult:
    """Outcome of a successful checkout"""
    order_id: str
    summary: CheckoutSummary
    lines: list[OrderLine]


class CheckoutOrchestrator:
    """
    Places one order from a cart engine's active list.

    At most one checkout runs at a time per orchestrator; a second call
    while one is in flight raises CheckoutInProgress.
    """

    def __init__(
        self,
        engine: CartEngine,
        backend: OrderBackend,
        identity_provider: IdentityProvider,
    ):
        self.engine = engine
        self.backend = backend
        self.identity_provider = identity_provider
        self.is_checking_out = False

    async def checkout(self, delivery_address: str = "") -> CheckoutResult:
        """
        Create an order from the active cart.

        Raises:
            CheckoutInProgress: another checkout has not finished yet
            AuthenticationRequired: no acting identity
            EmptyCart: nothing in the active cart
            OrderCreationFailed: the header write failed
            OrderItemsFailed: the line write failed (header rolled back)
        """
        if self.is_checking_out:
            raise CheckoutInProgress()

        self.is_checking_out = True
        try:
            return await self._place_order(delivery_address)
        finally:
            self.is_checking_out = False

    async def _place_order(self, delivery_address: str) -> CheckoutResult:
        identity = self.identity_provider()
        if identity is None:
            raise AuthenticationRequired()

        items = self.engine.items
        if not items:
            raise EmptyCart()

        summary = self.engine.summary()
        header = OrderHeader(
            buyer_id=identity.user_id,
            total_amount=summary.grand_total,
            status=OrderStatus.PENDING,
            delivery_address=delivery_address,
        )

        try:
            order_id = await self.backend.create_order(header)
        except OrderBackendError as e:
            logger.error(f"Order creation failed for buyer {identity.user_id}: {e}")
            raise OrderCreationFailed(str(e)) from e

        lines = [
            OrderLine(
                order_id=order_id,
                product_id=item.product_id,
                quantity=item.quantity,
                price=item.price,
            )
            for item in items
        ]

        try:
            await self.backend.create_order_lines(lines)
        except OrderBackendError as e:
            logger.error(f"Order items failed for order {order_id}: {e}")
            rollback_succeeded = await self._rollback(order_id)
            raise OrderItemsFailed(order_id, str(e), rollback_succeeded) from e

        self.engine.remove_purchased({line.product_id: line.quantity for line in lines})
        logger.info(
            f"Order {order_id} created: {summary.currency} {summary.grand_total} "
            f"({len(lines)} lines) for buyer {identity.user_id}"
        )
        return CheckoutResult(order_id=order_id, summary=summary, lines=lines)

    async def _rollback(self, order_id: str) -> bool:
        """Delete a header whose lines could not be written"""
        try:
            await self.backend.delete_order(order_id)
        except OrderBackendError as e:
            # Left for the orphaned-order sweep
            logger.error(f"Compensating delete failed, order {order_id} is orphaned: {e}")
            return False

        logger.info(f"Rolled back order {order_id}")
        return True
