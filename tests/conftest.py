import pytest

from freshcart.database.orders import OrderBackendError, OrderDatabase
from freshcart.models.cart import CartLine
from freshcart.services.cart_engine import CartEngine


def make_line(product_id="v1", name="Tomatoes", price=40, quantity=1, unit="500g", image=""):
    return CartLine(
        product_id=product_id,
        name=name,
        price=price,
        quantity=quantity,
        unit=unit,
        image=image,
    )


class FlakyOrderDatabase(OrderDatabase):
    """In-memory orders whose checkout writes can be told to fail"""

    def __init__(self, fail_create=False, fail_lines=False, fail_delete=False):
        super().__init__()
        self.fail_create = fail_create
        self.fail_lines = fail_lines
        self.fail_delete = fail_delete
        self.calls = []

    async def create_order(self, header):
        self.calls.append("create_order")
        if self.fail_create:
            raise OrderBackendError("insert into orders rejected")
        return await super().create_order(header)

    async def create_order_lines(self, lines):
        self.calls.append("create_order_lines")
        if self.fail_lines:
            raise OrderBackendError("insert into order_items rejected")
        await super().create_order_lines(lines)

    async def delete_order(self, order_id):
        self.calls.append(("delete_order", order_id))
        if self.fail_delete:
            raise OrderBackendError("network unreachable")
        await super().delete_order(order_id)


@pytest.fixture
def engine():
    return CartEngine()


@pytest.fixture
def backend():
    return FlakyOrderDatabase()
