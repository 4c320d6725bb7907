"""Tests for the periodic orphan sweep and session expiry."""

import asyncio
from datetime import datetime, timedelta

from conftest import FlakyOrderDatabase

from freshcart.core.config import Settings
from freshcart.core.session import SessionManager
from freshcart.database.cart_store import InMemoryBlobStorage
from freshcart.database.orders import OrderBackendError
from freshcart.models.checkout import OrderHeader
from freshcart.services.housekeeping import housekeeping_loop, run_housekeeping


def _settings(**overrides):
    return Settings(_env_file=None, **overrides)


def _orphan(backend, minutes_old):
    order_id = asyncio.run(backend.create_order(OrderHeader(buyer_id="buyer-1", total_amount=40)))
    backend.headers[order_id] = backend.headers[order_id].model_copy(
        update={"created_at": datetime.utcnow() - timedelta(minutes=minutes_old)}
    )
    return order_id


class UnreachableBackend(FlakyOrderDatabase):
    async def sweep_orphaned_orders(self, max_age_seconds=300):
        raise OrderBackendError("network unreachable")


class TestRunHousekeeping:
    def test_removes_old_orphans_and_idle_sessions(self):
        settings = _settings(orphan_order_ttl_seconds=300, session_max_age_hours=1)
        backend = FlakyOrderDatabase()
        sessions = SessionManager(InMemoryBlobStorage(), backend, settings)
        stale = _orphan(backend, minutes_old=10)
        fresh = _orphan(backend, minutes_old=1)
        idle = sessions.create_session("idle")
        idle.updated_at = datetime.utcnow() - timedelta(hours=2)
        sessions.create_session("active")

        removed = asyncio.run(run_housekeeping(backend, sessions, settings))

        assert removed == (1, 1)
        assert stale not in backend.headers
        assert fresh in backend.headers
        assert list(sessions.sessions) == ["active"]

    def test_backend_failure_still_expires_sessions(self):
        settings = _settings(session_max_age_hours=1)
        backend = UnreachableBackend()
        sessions = SessionManager(InMemoryBlobStorage(), backend, settings)
        sessions.create_session("idle").updated_at = datetime.utcnow() - timedelta(hours=2)

        removed = asyncio.run(run_housekeeping(backend, sessions, settings))

        assert removed == (0, 1)
        assert sessions.sessions == {}


class TestHousekeepingLoop:
    def test_runs_repeatedly_until_cancelled(self):
        settings = _settings(housekeeping_interval_seconds=0.01)
        passes = []

        class CountingBackend(FlakyOrderDatabase):
            async def sweep_orphaned_orders(self, max_age_seconds=300):
                passes.append(max_age_seconds)
                return 0

        backend = CountingBackend()
        sessions = SessionManager(InMemoryBlobStorage(), backend, settings)

        async def scenario():
            task = asyncio.create_task(housekeeping_loop(backend, sessions, settings))
            await asyncio.sleep(0.1)
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            return task

        task = asyncio.run(scenario())

        assert task.cancelled()
        assert len(passes) >= 2
        assert set(passes) == {settings.orphan_order_ttl_seconds}
