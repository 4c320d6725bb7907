"""
Cart Engine

In-memory reducer over the active cart and the saved-for-later list.
Every mutation notifies subscribed listeners once the new state is in place.
"""

import logging
from typing import Callable, Iterable, Optional

from ..models.cart import CartLine
from ..models.checkout import CheckoutSummary

logger = logging.getLogger(__name__)

CartListener = Callable[["CartEngine"], None]


class CartEngine:
    """
    Owns the active and saved cart lists for one shopper session.

    Invariants:
    - at most one line per product_id in each list
    - no product_id in both lists at once
    - every line has quantity >= 1
    """

    def __init__(
        self,
        delivery_fee: float = 25.0,
        free_delivery_threshold: float = 200.0,
        currency: str = "INR",
    ):
        self._items: list[CartLine] = []
        self._saved_items: list[CartLine] = []
        self._listeners: list[CartListener] = []
        self.delivery_fee = delivery_fee
        self.free_delivery_threshold = free_delivery_threshold
        self.currency = currency

    @property
    def items(self) -> list[CartLine]:
        return list(self._items)

    @property
    def saved_items(self) -> list[CartLine]:
        return list(self._saved_items)

    # ==================== Observers ====================

    def subscribe(self, listener: CartListener) -> None:
        """Register a callback invoked after every mutation"""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: CartListener) -> None:
        """Remove a previously registered callback"""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Cart listener failed")

    # ==================== Active cart ====================

    def add_item(self, line: CartLine) -> None:
        """
        Add a line, combining quantities if the product is already in the cart.

        A product sitting in the saved list comes back into the cart first,
        so its saved quantity is kept and the lists stay disjoint.
        """
        saved = self._find(self._saved_items, line.product_id)
        if saved:
            self._saved_items = [i for i in self._saved_items if i.product_id != line.product_id]
            self._items = self._merge(self._items, saved)

        self._items = self._merge(self._items, line)
        self._notify()

    def remove_item(self, product_id: str) -> None:
        """Remove a line from the active cart"""
        self._items = [i for i in self._items if i.product_id != product_id]
        self._notify()

    def set_quantity(self, product_id: str, quantity: int) -> None:
        """Set a line's quantity; anything below 1 removes the line"""
        if quantity < 1:
            self.remove_item(product_id)
            return

        self._items = [
            i.model_copy(update={"quantity": quantity}) if i.product_id == product_id else i
            for i in self._items
        ]
        self._notify()

    def increment(self, product_id: str) -> None:
        """Increase a line's quantity by one"""
        self._items = [
            i.model_copy(update={"quantity": i.quantity + 1}) if i.product_id == product_id else i
            for i in self._items
        ]
        self._notify()

    def decrement(self, product_id: str) -> None:
        """Decrease a line's quantity by one, removing it at 1"""
        target = self._find(self._items, product_id)
        if target and target.quantity <= 1:
            self.remove_item(product_id)
            return

        self._items = [
            i.model_copy(update={"quantity": i.quantity - 1}) if i.product_id == product_id else i
            for i in self._items
        ]
        self._notify()

    def clear_cart(self) -> None:
        """Empty the active cart; saved items are kept"""
        self._items = []
        self._notify()

    def remove_purchased(self, purchased: dict[str, int]) -> None:
        """
        Take ordered quantities out of the active cart.

        Lines whose whole quantity was ordered disappear; anything added
        after the order was snapshotted stays in the cart.
        """
        remaining = []
        for line in self._items:
            left = line.quantity - purchased.get(line.product_id, 0)
            if left >= 1:
                remaining.append(line.model_copy(update={"quantity": left}) if left != line.quantity else line)
        self._items = remaining
        self._notify()

    # ==================== Saved for later ====================

    def save_for_later(self, product_id: str) -> None:
        """Move a line from the active cart to the saved list"""
        item = self._find(self._items, product_id)
        if not item:
            return

        if not self._find(self._saved_items, product_id):
            self._saved_items = self._saved_items + [item]
        self._items = [i for i in self._items if i.product_id != product_id]
        self._notify()

    def move_to_cart(self, product_id: str) -> None:
        """Move a saved line back into the active cart"""
        item = self._find(self._saved_items, product_id)
        if not item:
            return

        self._items = self._merge(self._items, item)
        self._saved_items = [i for i in self._saved_items if i.product_id != product_id]
        self._notify()

    def remove_saved_item(self, product_id: str) -> None:
        """Remove a line from the saved list"""
        self._saved_items = [i for i in self._saved_items if i.product_id != product_id]
        self._notify()

    def clear_saved_items(self) -> None:
        """Empty the saved list"""
        self._saved_items = []
        self._notify()

    # ==================== Rehydration ====================

    def restore(self, items: Iterable[CartLine], saved_items: Iterable[CartLine]) -> None:
        """
        Replace both lists with previously persisted state.

        Duplicate lines are merged and active lines whose product is
        already saved are dropped, so the list invariants hold even for
        hand-edited storage.
        """
        saved: list[CartLine] = []
        for line in saved_items:
            if not self._find(saved, line.product_id):
                saved.append(line)

        active: list[CartLine] = []
        for line in items:
            if not self._find(saved, line.product_id):
                active = self._merge(active, line)

        self._items = active
        self._saved_items = saved
        self._notify()

    # ==================== Derived ====================

    @property
    def total_items(self) -> int:
        return sum(i.quantity for i in self._items)

    @property
    def total_price(self) -> float:
        return sum(i.line_total for i in self._items)

    def summary(self) -> CheckoutSummary:
        """Subtotal, delivery fee and grand total for the active cart"""
        return CheckoutSummary.from_subtotal(
            self.total_price,
            delivery_fee=self.delivery_fee,
            free_delivery_threshold=self.free_delivery_threshold,
            currency=self.currency,
        )

    # ==================== Helpers ====================

    @staticmethod
    def _find(lines: list[CartLine], product_id: str) -> Optional[CartLine]:
        return next((i for i in lines if i.product_id == product_id), None)

    @classmethod
    def _merge(cls, lines: list[CartLine], line: CartLine) -> list[CartLine]:
        existing = cls._find(lines, line.product_id)
        if not existing:
            return lines + [line]
        return [
            i.model_copy(update={"quantity": i.quantity + line.quantity})
            if i.product_id == line.product_id else i
            for i in lines
        ]
