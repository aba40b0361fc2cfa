# tripilot/api/actions/session_manager.py
"""Per-browser session lifecycle: one store, gateway and checkout each."""

import time
import threading
import logging
from typing import Dict, Optional, Any
from datetime import datetime, timedelta
import secrets

from tripilot.api.config import get_session_config, get_store_config
from tripilot.api.actions.function_handler import FunctionHandler
from tripilot.api.services.store import TripStore

logger = logging.getLogger(__name__)


class PlannerSession:
    """Everything one browser session works against."""

    def __init__(self, session_id: str, flask_session_id: str, store: TripStore,
                 offline_search: Optional[bool] = None):
        self.session_id = session_id
        self.flask_session_id = flask_session_id

        # Timestamps
        self.created_at = datetime.now()
        self.last_activity = datetime.now()

        # Components
        self.store = store
        self.function_handler = FunctionHandler(store, offline_search=offline_search)
        self.checkout: Optional[Any] = None  # CheckoutFlow while checkout is open

        # Socket.IO rooms subscribed to this session's state pushes
        self.socket_ids = set()

    def touch(self):
        self.last_activity = datetime.now()

    def stats(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "created_at": self.created_at.isoformat(),
            "last_activity": self.last_activity.isoformat(),
            "function_calls": self.function_handler.call_count,
            "store_version": self.store.version,
            "checkout_open": bool(self.checkout and self.checkout.is_open),
        }


class SessionManager:
    """Maps Flask session ids to planner sessions."""

    def __init__(self, seed_sample_data: Optional[bool] = None,
                 offline_search: Optional[bool] = None,
                 start_cleanup: bool = True):
        self.config = get_session_config()
        store_config = get_store_config()
        self.seed_sample_data = (
            store_config["seed_sample_data"] if seed_sample_data is None else seed_sample_data
        )
        self.offline_search = offline_search
        self.sessions: Dict[str, PlannerSession] = {}
        self._by_flask_id: Dict[str, str] = {}

        # Thread safety
        self.lock = threading.RLock()

        self.cleanup_thread = None
        if start_cleanup:
            self.cleanup_thread = threading.Thread(
                target=self._cleanup_loop,
                daemon=True
            )
            self.cleanup_thread.start()

        logger.info("SessionManager initialized")

    def _new_store(self) -> TripStore:
        return TripStore.with_sample_data() if self.seed_sample_data else TripStore()

    def get_or_create(self, flask_session_id: str) -> Optional[PlannerSession]:
        """Return the session for a browser, creating it on first use.

        Args:
            flask_session_id: Flask session ID

        Returns:
            PlannerSession, or None when the server is at capacity
        """
        with self.lock:
            existing = self.get_session_by_flask_id(flask_session_id)
            if existing:
                existing.touch()
                return existing

            if len(self.sessions) >= self.config["max_sessions"]:
                logger.warning("Maximum planner sessions reached")
                return None

            session_id = f"tps_{secrets.token_urlsafe(16)}"
            session = PlannerSession(
                session_id, flask_session_id, self._new_store(), offline_search=self.offline_search
            )
            self.sessions[session_id] = session
            self._by_flask_id[flask_session_id] = session_id

            logger.info(f"Created session {session_id} for Flask session {flask_session_id}")
            return session

    def get_session(self, session_id: str) -> Optional[PlannerSession]:
        """Get an existing session by ID.

        Args:
            session_id: Session ID to retrieve

        Returns:
            PlannerSession object or None if not found
        """
        with self.lock:
            session = self.sessions.get(session_id)
            if session:
                session.touch()
            return session

    def get_session_by_flask_id(self, flask_session_id: str) -> Optional[PlannerSession]:
        with self.lock:
            session_id = self._by_flask_id.get(flask_session_id)
            return self.sessions.get(session_id) if session_id else None

    def remove_session(self, session_id: str, reason: str = "manual"):
        """Completely remove a session.

        Args:
            session_id: Session ID to remove
            reason: Reason for removal
        """
        with self.lock:
            session = self.sessions.pop(session_id, None)
            if not session:
                return
            self._by_flask_id.pop(session.flask_session_id, None)

            duration = (datetime.now() - session.created_at).total_seconds()
            logger.info(
                f"Removed session {session_id} - "
                f"Reason: {reason}, Duration: {duration:.1f}s, "
                f"Function calls: {session.function_handler.call_count}"
            )

    def get_stats(self) -> Dict[str, Any]:
        """Get overall session manager statistics."""
        with self.lock:
            return {
                "total_sessions": len(self.sessions),
                "total_function_calls": sum(
                    s.function_handler.call_count for s in self.sessions.values()
                ),
                "config": {
                    "max_sessions": self.config["max_sessions"],
                    "timeout_seconds": self.config["session_timeout_seconds"],
                },
            }

    def _cleanup_loop(self):
        """Background thread to clean up expired sessions."""
        while True:
            try:
                time.sleep(self.config["cleanup_interval_seconds"])
                self.cleanup_expired_sessions()
            except Exception as e:
                logger.error(f"Error in cleanup loop: {e}")

    def cleanup_expired_sessions(self, now: Optional[datetime] = None) -> int:
        """Remove sessions idle for longer than the configured timeout.

        Returns:
            Number of sessions removed
        """
        cutoff_time = (now or datetime.now()) - timedelta(
            seconds=self.config["session_timeout_seconds"]
        )

        with self.lock:
            expired_sessions = [
                sid for sid, session in self.sessions.items()
                if session.last_activity < cutoff_time
            ]

        for sid in expired_sessions:
            self.remove_session(sid, "timeout")

        if expired_sessions:
            logger.info(f"Cleaned up {len(expired_sessions)} expired sessions")
        return len(expired_sessions)
