"""Tests for the checkout orchestrator's writes, rollback and guards."""

import asyncio
from datetime import datetime, timedelta

import pytest
from conftest import FlakyOrderDatabase, make_line

from freshcart.models.checkout import OrderStatus
from freshcart.security.roles import Identity
from freshcart.services.checkout import (
    AuthenticationRequired,
    CheckoutInProgress,
    CheckoutOrchestrator,
    EmptyCart,
    OrderCreationFailed,
    OrderItemsFailed,
)

BUYER = Identity(user_id="buyer-1")


def _orchestrator(engine, backend, identity=BUYER):
    return CheckoutOrchestrator(engine, backend, identity_provider=lambda: identity)


def _fill(engine):
    engine.add_item(make_line("v1", price=40, quantity=2))
    engine.add_item(make_line("f5", "Pomegranate", price=150, quantity=1))


class TestCheckoutSuccess:
    def test_creates_header_and_lines_then_clears_cart(self, engine, backend):
        _fill(engine)
        engine.add_item(make_line("f2", "Bananas", price=50))
        engine.save_for_later("f2")

        result = asyncio.run(_orchestrator(engine, backend).checkout("12 Market Road"))
        assert [(l.product_id, l.quantity) for l in result.lines] == [("v1", 2), ("f5", 1)]

        order = asyncio.run(backend.get_order(result.order_id))
        assert order.header.buyer_id == "buyer-1"
        assert order.header.status == OrderStatus.PENDING
        assert order.header.delivery_address == "12 Market Road"
        assert order.header.total_amount == 230
        assert {(l.product_id, l.quantity, l.price) for l in order.lines} == {
            ("v1", 2, 40),
            ("f5", 1, 150),
        }
        assert engine.items == []
        assert [i.product_id for i in engine.saved_items] == ["f2"]

    def test_delivery_fee_added_below_threshold(self, engine, backend):
        engine.add_item(make_line("f5", price=150))

        result = asyncio.run(_orchestrator(engine, backend).checkout())

        assert result.summary.delivery_fee == 25
        assert backend.headers[result.order_id].total_amount == 175

    def test_items_added_during_checkout_stay_in_cart(self, engine):
        class BusyShopperBackend(FlakyOrderDatabase):
            async def create_order_lines(self, lines):
                engine.add_item(make_line("f5", "Pomegranate", price=150))
                engine.increment("v1")
                await super().create_order_lines(lines)

        backend = BusyShopperBackend()
        engine.add_item(make_line("v1", price=40, quantity=2))

        result = asyncio.run(_orchestrator(engine, backend).checkout())

        ordered = asyncio.run(backend.get_order(result.order_id)).lines
        assert [(l.product_id, l.quantity) for l in ordered] == [("v1", 2)]
        assert {i.product_id: i.quantity for i in engine.items} == {"v1": 1, "f5": 1}

    def test_header_written_before_lines(self, engine, backend):
        _fill(engine)
        asyncio.run(_orchestrator(engine, backend).checkout())

        assert backend.calls == ["create_order", "create_order_lines"]


class TestCheckoutValidation:
    def test_requires_identity(self, engine, backend):
        _fill(engine)
        before = engine.items

        with pytest.raises(AuthenticationRequired) as exc:
            asyncio.run(_orchestrator(engine, backend, identity=None).checkout())

        assert str(exc.value) == "authentication required"
        assert backend.calls == []
        assert engine.items == before

    def test_identity_checked_before_empty_cart(self, engine, backend):
        with pytest.raises(AuthenticationRequired):
            asyncio.run(_orchestrator(engine, backend, identity=None).checkout())

    def test_rejects_empty_cart(self, engine, backend):
        with pytest.raises(EmptyCart) as exc:
            asyncio.run(_orchestrator(engine, backend).checkout())

        assert str(exc.value) == "empty cart"
        assert backend.calls == []


class TestCheckoutFailures:
    def test_header_failure_leaves_cart(self, engine):
        backend = FlakyOrderDatabase(fail_create=True)
        _fill(engine)
        before = engine.items

        with pytest.raises(OrderCreationFailed):
            asyncio.run(_orchestrator(engine, backend).checkout())

        assert backend.calls == ["create_order"]
        assert engine.items == before

    def test_line_failure_rolls_back_header(self, engine):
        backend = FlakyOrderDatabase(fail_lines=True)
        _fill(engine)
        before = engine.items

        with pytest.raises(OrderItemsFailed) as exc:
            asyncio.run(_orchestrator(engine, backend).checkout())

        order_id = exc.value.order_id
        assert backend.calls == ["create_order", "create_order_lines", ("delete_order", order_id)]
        assert exc.value.rollback_succeeded is True
        assert backend.headers == {}
        assert asyncio.run(backend.get_order(order_id)) is None
        assert engine.items == before

    def test_failed_rollback_leaves_orphan_for_sweep(self, engine):
        backend = FlakyOrderDatabase(fail_lines=True, fail_delete=True)
        _fill(engine)
        before = engine.items

        with pytest.raises(OrderItemsFailed) as exc:
            asyncio.run(_orchestrator(engine, backend).checkout())

        assert exc.value.rollback_succeeded is False
        assert exc.value.order_id in backend.headers
        assert engine.items == before
        orphan_id = exc.value.order_id
        backend.headers[orphan_id] = backend.headers[orphan_id].model_copy(
            update={"created_at": datetime.utcnow() - timedelta(minutes=10)}
        )
        assert asyncio.run(backend.sweep_orphaned_orders(max_age_seconds=300)) == 1
        assert backend.headers == {}

    def test_retry_after_failure_succeeds(self, engine):
        backend = FlakyOrderDatabase(fail_lines=True)
        _fill(engine)
        orchestrator = _orchestrator(engine, backend)

        with pytest.raises(OrderItemsFailed):
            asyncio.run(orchestrator.checkout())

        backend.fail_lines = False
        result = asyncio.run(orchestrator.checkout())

        assert result.order_id in backend.headers
        assert engine.items == []


class TestCheckoutGuard:
    def test_second_checkout_while_in_flight_is_rejected(self, engine):
        release = None

        class SlowBackend(FlakyOrderDatabase):
            async def create_order(self, header):
                await release.wait()
                return await super().create_order(header)

        backend = SlowBackend()
        _fill(engine)
        orchestrator = _orchestrator(engine, backend)

        async def scenario():
            nonlocal release
            release = asyncio.Event()
            first = asyncio.create_task(orchestrator.checkout())
            await asyncio.sleep(0)
            assert orchestrator.is_checking_out

            with pytest.raises(CheckoutInProgress):
                await orchestrator.checkout()

            release.set()
            return await first

        result = asyncio.run(scenario())

        assert result.order_id in backend.headers
        assert orchestrator.is_checking_out is False

    def test_guard_released_after_failure(self, engine, backend):
        orchestrator = _orchestrator(engine, backend)

        with pytest.raises(EmptyCart):
            asyncio.run(orchestrator.checkout())

        assert orchestrator.is_checking_out is False
