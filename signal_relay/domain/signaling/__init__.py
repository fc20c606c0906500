"""Session registry, broadcaster directory, fan-out and protocol router."""

from .directory import BroadcasterDirectory
from .fanout import Fanout, SendOutcome
from .registry import SessionRegistry
from .router import SignalingRouter
from .session_models import BroadcastClaim, BroadcastMode, Departure, Session

__all__ = [
    "BroadcastClaim",
    "BroadcastMode",
    "BroadcasterDirectory",
    "Departure",
    "Fanout",
    "SendOutcome",
    "Session",
    "SessionRegistry",
    "SignalingRouter",
]
