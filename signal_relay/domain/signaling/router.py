"""Signaling protocol: connection lifecycle and per-message dispatch.

Message handling by type:
- set_name / set_profile: update name/avatar, directory to everyone
- start_broadcast: mark broadcasting, broadcaster_started + directory to everyone
  (single mode: rejected with an error reply while someone else is live)
- stop_broadcast: if live, broadcaster_ended + directory to everyone
- request_offer: forwarded to the target broadcaster as viewerId/viewerName
- offer / answer / candidate: forwarded verbatim to the target with senderId/senderName
- logout: reset to an anonymous viewer, directory to everyone
- anything else: ignored

Targets are resolved against the registry at delivery time; unknown targets
are dropped without telling the sender.
"""

from collections.abc import Awaitable, Callable

from loguru import logger

from signal_relay.schemas.codec import DecodeFailure, UnknownMessage, decode_message
from signal_relay.schemas.messages import (
    BroadcasterEndedMessage,
    BroadcasterListMessage,
    BroadcasterStartedMessage,
    CandidateMessage,
    CandidateRelay,
    ErrorMessage,
    IdMessage,
    InboundMessage,
    LogoutMessage,
    OutboundMessage,
    RequestOfferMessage,
    RequestOfferRelay,
    SessionDescriptionMessage,
    SessionDescriptionRelay,
    SetProfileMessage,
    StartBroadcastMessage,
    StopBroadcastMessage,
)

from .connection_state_machine import ConnectionStateMachine
from .directory import BroadcasterDirectory
from .fanout import Fanout
from .registry import SessionRegistry
from .session_models import BroadcastClaim, BroadcastMode, ConnectionChannel, Session

Handler = Callable[[Session, InboundMessage], Awaitable[None]]

DEFAULT_SINGLE_BROADCASTER_ERROR = "A broadcaster already exists."


class SignalingRouter:
    """Stateless protocol handler; all state lives in the ``SessionRegistry``.

    Registry mutations happen synchronously before any send is awaited, so a
    handler's state change is complete even if its notifications interleave
    with another handler's.
    """

    def __init__(
        self,
        registry: SessionRegistry | None = None,
        *,
        mode: BroadcastMode = BroadcastMode.MULTI,
        single_broadcaster_error: str = DEFAULT_SINGLE_BROADCASTER_ERROR,
    ):
        self.registry = registry if registry is not None else SessionRegistry()
        self.directory = BroadcasterDirectory(self.registry)
        self.fanout = Fanout(self.registry)
        self.mode = mode
        self.single_broadcaster_error = single_broadcaster_error

        self._handlers: dict[str, Handler] = {
            "set_name": self._handle_set_profile,
            "set_profile": self._handle_set_profile,
            "start_broadcast": self._handle_start_broadcast,
            "stop_broadcast": self._handle_stop_broadcast,
            "request_offer": self._handle_request_offer,
            "offer": self._handle_session_description,
            "answer": self._handle_session_description,
            "candidate": self._handle_candidate,
            "logout": self._handle_logout,
        }

    async def connect(self, channel: ConnectionChannel) -> Session:
        """Register a new connection and greet it with its id and the directory."""
        session = self.registry.create(channel)
        logger.info("Session connected: {} ({} online)", session.id, len(self.registry))

        await self.fanout.send(session, IdMessage(id=session.id))
        await self.fanout.send(session, self._directory_message())

        if not self.registry.activate(session.id):
            logger.debug("Session {} closed before activation", session.id)
        return session

    async def handle(self, session_id: str, raw: str | bytes) -> None:
        """Decode and dispatch one inbound frame from ``session_id``."""
        session = self.registry.get(session_id)
        if session is None or not ConnectionStateMachine.accepts_messages(session.state):
            logger.debug("Dropping frame from inactive session {}", session_id)
            return

        outcome = decode_message(raw)
        if isinstance(outcome, DecodeFailure):
            logger.warning(
                "Dropping undecodable frame from {}: {} {}",
                session_id, outcome.errcode, outcome.reason,
            )
            return
        if isinstance(outcome, UnknownMessage):
            logger.debug("Ignoring unhandled message type '{}' from {}", outcome.type, session_id)
            return

        await self.dispatch(session, outcome)

    async def dispatch(self, session: Session, message: InboundMessage) -> None:
        handler = self._handlers.get(message.type)
        if handler is None:
            logger.debug("No handler for message type '{}'", message.type)
            return
        await handler(session, message)

    async def disconnect(self, session_id: str) -> None:
        """Tear down a session. Safe to call any number of times."""
        departure = self.registry.remove(session_id)
        if departure is None:
            return

        logger.info("Session disconnected: {} ({} online)", session_id, len(self.registry))

        if departure.was_broadcasting:
            logger.info("Broadcaster {} left while live", session_id)
            await self._announce_ended(session_id)

    def _directory_message(self) -> BroadcasterListMessage:
        return BroadcasterListMessage(broadcasters=self.directory.snapshot())

    async def _broadcast_directory(self) -> None:
        await self.fanout.send_all(self._directory_message())

    async def _announce_ended(self, broadcaster_id: str) -> None:
        await self.fanout.send_all(
            BroadcasterEndedMessage(
                broadcaster_id=broadcaster_id,
                broadcasters=self.directory.snapshot(),
            )
        )
        await self._broadcast_directory()

    async def _handle_set_profile(self, session: Session, message: SetProfileMessage) -> None:
        if self.registry.update_profile(session.id, name=message.name, avatar=message.avatar) is None:
            return
        await self._broadcast_directory()

    async def _handle_start_broadcast(
        self, session: Session, message: StartBroadcastMessage
    ) -> None:
        claim = self.registry.start_broadcast(
            session.id, exclusive=self.mode == BroadcastMode.SINGLE
        )
        if claim == BroadcastClaim.MISSING:
            return
        if claim == BroadcastClaim.REJECTED:
            logger.warning("Rejected start_broadcast from {}: slot taken", session.id)
            await self.fanout.send(session, ErrorMessage(message=self.single_broadcaster_error))
            return

        self.registry.update_profile(session.id, name=message.name, avatar=message.avatar)

        logger.info("Broadcast started: {} as '{}'", session.id, session.name)
        await self.fanout.send_all(
            BroadcasterStartedMessage(
                broadcaster_id=session.id,
                broadcaster_name=session.name,
                avatar=session.avatar,
                broadcasters=self.directory.snapshot(),
            )
        )
        await self._broadcast_directory()

    async def _handle_stop_broadcast(self, session: Session, message: StopBroadcastMessage) -> None:
        if not self.registry.stop_broadcast(session.id):
            return
        logger.info("Broadcast stopped: {}", session.id)
        await self._announce_ended(session.id)

    async def _handle_logout(self, session: Session, message: LogoutMessage) -> None:
        if self.registry.logout(session.id) is None:
            return
        logger.info("Session logged out: {}", session.id)
        await self._broadcast_directory()

    async def _handle_request_offer(self, session: Session, message: RequestOfferMessage) -> None:
        await self._relay(
            message.target_id,
            RequestOfferRelay(viewer_id=session.id, viewer_name=session.name),
        )

    async def _handle_session_description(
        self, session: Session, message: SessionDescriptionMessage
    ) -> None:
        await self._relay(
            message.target_id,
            SessionDescriptionRelay(
                type=message.type,
                sdp=message.sdp,
                sender_id=session.id,
                sender_name=session.name,
            ),
        )

    async def _handle_candidate(self, session: Session, message: CandidateMessage) -> None:
        await self._relay(
            message.target_id,
            CandidateRelay(
                candidate=message.candidate,
                sender_id=session.id,
                sender_name=session.name,
            ),
        )

    async def _relay(self, target_id: str, message: OutboundMessage) -> None:
        target = self.registry.get(target_id)
        if target is None:
            logger.debug("Dropping {} for unknown target {}", message.type, target_id)
            return
        await self.fanout.send(target, message)
