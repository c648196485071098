"""Cart session management"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..database.carts import CartStore
from ..database.persistence import KeyValueStore, InMemoryKeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class CartSession:
    """One shopper's cart and its lifetime"""
    session_id: str
    cart: CartStore
    created_at: datetime
    updated_at: datetime

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()


class SessionManager:
    """Creates, looks up and tears down cart sessions"""

    def __init__(self, storage: Optional[KeyValueStore] = None):
        self.storage = storage if storage is not None else InMemoryKeyValueStore()
        self.sessions: dict[str, CartSession] = {}

    @staticmethod
    def storage_key(session_id: str) -> str:
        return f"cart:{session_id}"

    def create_session(self, session_id: Optional[str] = None) -> CartSession:
        """
        Start a session.

        Passing the id of an earlier session restores its persisted cart.
        """
        session_id = session_id or str(uuid.uuid4())
        now = datetime.utcnow()
        key = self.storage_key(session_id)
        restored = self.storage.get(key) is not None
        cart = CartStore(storage=self.storage, storage_key=key)
        if not restored:
            cart.save()
        session = CartSession(
            session_id=session_id,
            cart=cart,
            created_at=now,
            updated_at=now,
        )
        cart.subscribe(lambda _: session.touch())
        self.sessions[session_id] = session
        logger.info(f"Cart session {session_id} started")
        return session

    def get_session(self, session_id: str) -> Optional[CartSession]:
        """Get session by ID"""
        return self.sessions.get(session_id)

    def restore_session(self, session_id: str) -> Optional[CartSession]:
        """Reopen a session whose cart was persisted earlier, if any"""
        if session_id in self.sessions:
            return self.sessions[session_id]
        if self.storage.get(self.storage_key(session_id)) is None:
            return None
        return self.create_session(session_id)

    def delete_session(self, session_id: str, forget: bool = False) -> bool:
        """
        End a session.

        The persisted cart survives unless forget is set.
        """
        session = self.sessions.pop(session_id, None)
        if not session:
            return False

        session.cart.close()
        if forget:
            self.storage.delete(self.storage_key(session_id))
        logger.info(f"Cart session {session_id} ended")
        return True

    def cleanup_old_sessions(self, max_age_hours: int = 24) -> int:
        """Remove sessions idle for longer than max_age_hours"""
        now = datetime.utcnow()
        old_sessions = [
            sid for sid, session in self.sessions.items()
            if (now - session.updated_at).total_seconds() > max_age_hours * 3600
        ]
        for sid in old_sessions:
            self.delete_session(sid)
        return len(old_sessions)

    def close_all(self) -> None:
        for sid in list(self.sessions):
            self.delete_session(sid)
