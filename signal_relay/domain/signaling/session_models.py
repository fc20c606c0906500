"""Signaling session models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from loguru import logger

from .connection_state_machine import ConnectionState

DEFAULT_DISPLAY_NAME = "Anonymous"


class ConnectionChannel(Protocol):
    """Ordered, message-oriented duplex transport owned by exactly one session.

    ``send`` raises when the frame cannot be written.
    """

    async def send(self, payload: str) -> None: ...


@dataclass(eq=False)
class Session:
    """Per-connection signaling state.

    Fields are only mutated through ``SessionRegistry`` so every change happens
    under the registry lock.
    """

    id: str
    channel: ConnectionChannel
    display_name: str | None = None
    avatar: Any = None
    is_broadcasting: bool = False
    state: ConnectionState = ConnectionState.CONNECTING
    default_name: str = field(default=DEFAULT_DISPLAY_NAME, repr=False)

    @property
    def name(self) -> str:
        return self.display_name or self.default_name


class BroadcastClaim(str, Enum):
    """Result of asking the registry to mark a session as broadcasting."""

    GRANTED = "granted"
    # Single-broadcaster policy: someone else holds the slot
    REJECTED = "rejected"
    MISSING = "missing"


@dataclass(frozen=True)
class Departure:
    """A session removed from the registry and whether it was live at the time."""

    session: Session
    was_broadcasting: bool


class BroadcastMode(str, Enum):
    """How many sessions may broadcast at the same time."""

    MULTI = "multi"
    SINGLE = "single"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str | None) -> "BroadcastMode":
        raw = (value or "").strip().lower()
        if not raw:
            return cls.MULTI
        try:
            return cls(raw)
        except ValueError:
            logger.warning("Unknown BROADCAST_MODE '{}', defaulting to {}", value, cls.MULTI)
            return cls.MULTI
