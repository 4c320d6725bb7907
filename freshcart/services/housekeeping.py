"""
Periodic maintenance

Removes order headers left behind by failed rollbacks and expires idle
shopper sessions.
"""

import asyncio
import logging

from ..core.config import Settings
from ..core.session import SessionManager
from ..database.orders import OrderBackend, OrderBackendError

logger = logging.getLogger(__name__)


async def run_housekeeping(
    backend: OrderBackend,
    sessions: SessionManager,
    settings: Settings,
) -> tuple[int, int]:
    """
    One maintenance pass.

    Returns:
        Tuple of (orphaned orders removed, sessions expired)
    """
    try:
        orders_removed = await backend.sweep_orphaned_orders(settings.orphan_order_ttl_seconds)
    except OrderBackendError as e:
        logger.warning(f"Orphaned order sweep failed: {e}")
        orders_removed = 0

    sessions_expired = sessions.cleanup_old_sessions(settings.session_max_age_hours)

    if orders_removed or sessions_expired:
        logger.info(
            f"Housekeeping removed {orders_removed} orphaned orders "
            f"and {sessions_expired} idle sessions"
        )
    return orders_removed, sessions_expired


async def housekeeping_loop(
    backend: OrderBackend,
    sessions: SessionManager,
    settings: Settings,
) -> None:
    """Run maintenance every housekeeping_interval_seconds until cancelled"""
    while True:
        await run_housekeeping(backend, sessions, settings)
        await asyncio.sleep(settings.housekeeping_interval_seconds)
