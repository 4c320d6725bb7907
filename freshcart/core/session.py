"""Shopper session management"""

import uuid
import logging
from datetime import datetime
from typing import Optional

from ..database.cart_store import BlobStorage, PersistedCartStore
from ..database.orders import OrderBackend
from ..security.roles import Identity
from ..services.cart_engine import CartEngine
from ..services.checkout import CheckoutOrchestrator
from .config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class ShopperSession:
    """
    Everything one shopper's session owns: the cart engine, the store
    mirroring it and the checkout orchestrator reading it.
    """

    def __init__(
        self,
        session_id: str,
        engine: CartEngine,
        store: PersistedCartStore,
        backend: OrderBackend,
    ):
        now = datetime.utcnow()
        self.session_id = session_id
        self.created_at = now
        self.updated_at = now
        self.identity: Optional[Identity] = None
        self.engine = engine
        self.store = store
        self.checkout = CheckoutOrchestrator(
            engine=engine,
            backend=backend,
            identity_provider=lambda: self.identity,
        )

    def bind_identity(self, identity: Optional[Identity]) -> None:
        """Record who is acting in this session"""
        self.identity = identity
        self.touch()

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()

    def close(self) -> None:
        """Stop mirroring the cart to storage"""
        self.store.detach(self.engine)


class SessionManager:
    """Creates and tracks shopper sessions"""

    def __init__(
        self,
        storage: BlobStorage,
        backend: OrderBackend,
        settings: Optional[Settings] = None,
    ):
        self.storage = storage
        self.backend = backend
        self.settings = settings or default_settings
        self.sessions: dict[str, ShopperSession] = {}

    def create_session(self, session_id: Optional[str] = None) -> ShopperSession:
        """Create a session, rehydrating any cart stored under its id"""
        session_id = session_id or str(uuid.uuid4())
        engine = CartEngine(
            delivery_fee=self.settings.delivery_fee,
            free_delivery_threshold=self.settings.free_delivery_threshold,
            currency=self.settings.currency,
        )
        store = PersistedCartStore(self.storage, namespace=f"session-{session_id}")

        items, saved_items = store.load()
        engine.restore(items, saved_items)
        store.attach(engine)

        session = ShopperSession(session_id, engine, store, self.backend)
        self.sessions[session_id] = session
        logger.debug(f"Session {session_id} created with {len(items)} cart lines")
        return session

    def get_session(self, session_id: str) -> Optional[ShopperSession]:
        """Get session by ID"""
        return self.sessions.get(session_id)

    def get_or_create_session(self, session_id: Optional[str] = None) -> ShopperSession:
        """Get existing session or create new one"""
        if session_id and session_id in self.sessions:
            session = self.sessions[session_id]
            session.touch()
            return session
        return self.create_session(session_id)

    def delete_session(self, session_id: str) -> bool:
        """Delete a session"""
        session = self.sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        return True

    def cleanup_old_sessions(self, max_age_hours: Optional[int] = None) -> int:
        """Remove sessions idle for longer than max_age_hours"""
        if max_age_hours is None:
            max_age_hours = self.settings.session_max_age_hours

        now = datetime.utcnow()
        old_sessions = [
            sid for sid, session in self.sessions.items()
            if (now - session.updated_at).total_seconds() > max_age_hours * 3600
        ]
        for sid in old_sessions:
            self.delete_session(sid)
        return len(old_sessions)
