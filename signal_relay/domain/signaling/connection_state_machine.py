"""Connection lifecycle states and their allowed transitions."""

from enum import Enum


class ConnectionState(str, Enum):
    """Per-session connection lifecycle.

    CONNECTING -> ACTIVE -> TERMINATED

    - CONNECTING: Session created and registered, greeting not yet delivered.
    - ACTIVE: Greeting (id + directory) sent; inbound messages are processed.
    - TERMINATED: Channel closed. Absorbing; the session is out of the registry.
    """

    CONNECTING = "connecting"
    ACTIVE = "active"
    TERMINATED = "terminated"

    def __str__(self) -> str:
        return self.value


class ConnectionStateMachine:
    TRANSITIONS: dict[ConnectionState, set[ConnectionState]] = {
        ConnectionState.CONNECTING: {ConnectionState.ACTIVE, ConnectionState.TERMINATED},
        ConnectionState.ACTIVE: {ConnectionState.TERMINATED},
        ConnectionState.TERMINATED: set(),
    }

    TERMINAL_STATES: set[ConnectionState] = {ConnectionState.TERMINATED}

    @classmethod
    def can_transition(cls, current: ConnectionState, new: ConnectionState) -> bool:
        return new in cls.TRANSITIONS.get(current, set())

    @classmethod
    def is_terminal(cls, state: ConnectionState) -> bool:
        return state in cls.TERMINAL_STATES

    @classmethod
    def accepts_messages(cls, state: ConnectionState) -> bool:
        """Only ACTIVE sessions have their inbound messages dispatched."""
        return state == ConnectionState.ACTIVE
