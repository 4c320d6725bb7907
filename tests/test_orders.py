"""Tests for in-memory order storage and status transitions."""

import asyncio
from datetime import datetime, timedelta

import pytest

from freshcart.database.orders import (
    InvalidStatusTransition,
    OrderDatabase,
    OrderNotFound,
    can_transition,
)
from freshcart.models.checkout import OrderHeader, OrderLine, OrderStatus


def _place(db, buyer_id="buyer-1", lines=(("v1", 2, 40),)):
    async def place():
        order_id = await db.create_order(OrderHeader(buyer_id=buyer_id, total_amount=105))
        await db.create_order_lines(
            [OrderLine(order_id=order_id, product_id=p, quantity=q, price=price) for p, q, price in lines]
        )
        return order_id

    return asyncio.run(place())


@pytest.fixture
def db():
    return OrderDatabase()


class TestOrderWrites:
    def test_create_assigns_id_and_timestamps(self, db):
        order_id = _place(db)

        order = asyncio.run(db.get_order(order_id))
        assert order.header.id == order_id
        assert order.header.created_at is not None
        assert order.header.status == OrderStatus.PENDING
        assert len(order.lines) == 1

    def test_lines_for_unknown_order_rejected(self, db):
        with pytest.raises(OrderNotFound):
            asyncio.run(
                db.create_order_lines([OrderLine(order_id="missing", product_id="v1", quantity=1, price=40)])
            )

    def test_delete_removes_header_and_lines(self, db):
        order_id = _place(db)
        asyncio.run(db.delete_order(order_id))

        assert asyncio.run(db.get_order(order_id)) is None
        assert order_id not in db.lines

    def test_list_filters_by_buyer_and_status(self, db):
        mine = _place(db, buyer_id="buyer-1")
        _place(db, buyer_id="buyer-2")
        asyncio.run(db.update_status(mine, OrderStatus.ACCEPTED))

        assert [o.header.id for o in asyncio.run(db.list_orders(buyer_id="buyer-1"))] == [mine]
        assert [o.header.id for o in asyncio.run(db.list_orders(status=OrderStatus.ACCEPTED))] == [mine]
        assert len(asyncio.run(db.list_orders())) == 2


class TestStatusTransitions:
    def test_happy_path_to_delivered(self, db):
        order_id = _place(db)

        asyncio.run(db.update_status(order_id, OrderStatus.PACKED))
        asyncio.run(db.assign_delivery(order_id, "courier-1"))
        asyncio.run(db.update_status(order_id, OrderStatus.OUT_FOR_DELIVERY))
        order = asyncio.run(db.update_status(order_id, OrderStatus.DELIVERED))

        assert order.header.status == OrderStatus.DELIVERED
        assert order.header.delivery_id == "courier-1"

    def test_cancelled_is_terminal(self, db):
        order_id = _place(db)
        asyncio.run(db.update_status(order_id, OrderStatus.CANCELLED))

        with pytest.raises(InvalidStatusTransition):
            asyncio.run(db.update_status(order_id, OrderStatus.PACKED))

    def test_cannot_skip_to_delivered(self, db):
        order_id = _place(db)

        with pytest.raises(InvalidStatusTransition) as exc:
            asyncio.run(db.update_status(order_id, OrderStatus.DELIVERED))

        assert exc.value.current == OrderStatus.PENDING

    def test_cannot_assign_twice(self, db):
        order_id = _place(db)
        asyncio.run(db.assign_delivery(order_id, "courier-1"))

        with pytest.raises(InvalidStatusTransition):
            asyncio.run(db.assign_delivery(order_id, "courier-2"))

    def test_unknown_order(self, db):
        with pytest.raises(OrderNotFound):
            asyncio.run(db.update_status("missing", OrderStatus.PACKED))

    @pytest.mark.parametrize(
        "current, requested, allowed",
        [
            (OrderStatus.PENDING, OrderStatus.ACCEPTED, True),
            (OrderStatus.ACCEPTED, OrderStatus.PACKED, True),
            (OrderStatus.ASSIGNED, OrderStatus.OUT_FOR_DELIVERY, True),
            (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED, False),
            (OrderStatus.DELIVERED, OrderStatus.PENDING, False),
            (OrderStatus.PACKED, OrderStatus.ACCEPTED, False),
        ],
    )
    def test_transition_table(self, current, requested, allowed):
        assert can_transition(current, requested) is allowed


class TestOrphanSweep:
    def test_removes_only_old_header_only_orders(self, db):
        complete = _place(db)
        orphan = asyncio.run(db.create_order(OrderHeader(buyer_id="buyer-1", total_amount=65)))
        fresh_orphan = asyncio.run(db.create_order(OrderHeader(buyer_id="buyer-1", total_amount=65)))

        old = datetime.utcnow() - timedelta(minutes=10)
        for order_id in (complete, orphan):
            db.headers[order_id] = db.headers[order_id].model_copy(update={"created_at": old})

        assert asyncio.run(db.sweep_orphaned_orders(max_age_seconds=300)) == 1
        assert set(db.headers) == {complete, fresh_orphan}

    def test_sweep_is_idempotent(self, db):
        _place(db)
        assert asyncio.run(db.sweep_orphaned_orders(max_age_seconds=300)) == 0
        assert asyncio.run(db.sweep_orphaned_orders(max_age_seconds=300)) == 0
