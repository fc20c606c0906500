"""Broadcaster directory: the live view of sessions that are broadcasting."""

from signal_relay.schemas.messages import BroadcasterEntry

from .registry import SessionRegistry
from .session_models import Session


def to_entry(session: Session) -> BroadcasterEntry:
    return BroadcasterEntry(id=session.id, name=session.name, avatar=session.avatar)


class BroadcasterDirectory:
    """Computed fresh from the registry on every call; nothing is cached.

    Entries follow registry order (connection order), so two snapshots of the
    same state are identical.
    """

    def __init__(self, registry: SessionRegistry):
        self._registry = registry

    def snapshot(self) -> list[BroadcasterEntry]:
        return [to_entry(session) for session in self._registry.broadcasters()]

    def ids(self) -> list[str]:
        return [session.id for session in self._registry.broadcasters()]

    def __len__(self) -> int:
        return len(self._registry.broadcasters())
