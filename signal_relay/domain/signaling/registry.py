"""In-memory registry of live signaling sessions."""

import threading
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from loguru import logger

from signal_relay.domain.utils.idgen import new_session_id

from .connection_state_machine import ConnectionState, ConnectionStateMachine
from .session_models import (
    DEFAULT_DISPLAY_NAME,
    BroadcastClaim,
    ConnectionChannel,
    Departure,
    Session,
)


class SessionRegistry:
    """Owns every live ``Session``, keyed by session id.

    One coarse lock guards the map and every session field. No method awaits
    while holding it, so it is safe from both the event loop and worker threads.
    Lookups of unknown ids return ``None``; they are never errors.
    """

    def __init__(
        self,
        *,
        default_name: str = DEFAULT_DISPLAY_NAME,
        id_factory: Callable[[], str] = new_session_id,
    ):
        self._sessions: dict[str, Session] = {}
        self._lock = threading.RLock()
        self._default_name = default_name
        self._id_factory = id_factory

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def create(self, channel: ConnectionChannel) -> Session:
        """Register a new session for ``channel`` under a fresh id."""
        with self._lock:
            session_id = self._id_factory()
            while session_id in self._sessions:
                logger.warning("Session id collision on {}, regenerating", session_id)
                session_id = self._id_factory()

            session = Session(id=session_id, channel=channel, default_name=self._default_name)
            self._sessions[session_id] = session
            return session

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            return self._sessions.get(session_id)

    def activate(self, session_id: str) -> bool:
        """Move a session from CONNECTING to ACTIVE. False if it is gone."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            if not ConnectionStateMachine.can_transition(session.state, ConnectionState.ACTIVE):
                return session.state == ConnectionState.ACTIVE
            session.state = ConnectionState.ACTIVE
            return True

    def remove(self, session_id: str) -> Departure | None:
        """Drop a session. Removing an unknown id is a no-op returning ``None``."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
            if session is None:
                return None
            was_broadcasting = session.is_broadcasting
            session.is_broadcasting = False
            session.state = ConnectionState.TERMINATED
            return Departure(session=session, was_broadcasting=was_broadcasting)

    def sessions(self) -> list[Session]:
        """Snapshot of current sessions in registration order."""
        with self._lock:
            return list(self._sessions.values())

    def for_each(self, visitor: Callable[[Session], Any]) -> None:
        # Iterates a copy so the visitor may create or remove sessions.
        for session in self.sessions():
            visitor(session)

    def broadcasters(self) -> list[Session]:
        """Point-in-time copies of the sessions currently broadcasting."""
        with self._lock:
            return [replace(s) for s in self._sessions.values() if s.is_broadcasting]

    def update_profile(
        self,
        session_id: str,
        *,
        name: str | None = None,
        avatar: Any = None,
    ) -> Session | None:
        """Set display name and/or avatar. ``None`` keeps the current value."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if name is not None:
                session.display_name = name
            if avatar is not None:
                session.avatar = avatar
            return session

    def start_broadcast(self, session_id: str, *, exclusive: bool = False) -> BroadcastClaim:
        """Mark a session as broadcasting.

        With ``exclusive`` the check for another live broadcaster and the flag
        update happen under the same lock, so of two racing claims on an empty
        directory exactly the first one wins.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return BroadcastClaim.MISSING
            if exclusive and any(
                s.is_broadcasting for s in self._sessions.values() if s.id != session_id
            ):
                return BroadcastClaim.REJECTED
            session.is_broadcasting = True
            return BroadcastClaim.GRANTED

    def stop_broadcast(self, session_id: str) -> bool:
        """Clear the broadcasting flag. True only if it was set."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or not session.is_broadcasting:
                return False
            session.is_broadcasting = False
            return True

    def logout(self, session_id: str) -> Session | None:
        """Reset a session to an anonymous viewer without closing it."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            session.is_broadcasting = False
            session.display_name = None
            session.avatar = None
            return session
