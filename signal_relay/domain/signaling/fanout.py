"""Best-effort delivery of outbound messages to one or all sessions."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from signal_relay.schemas.codec import encode_message
from signal_relay.schemas.messages import OutboundMessage
from signal_relay.utils.relay_errors import RelayError, RelayErrorCode

from .registry import SessionRegistry
from .session_models import Session

MessageFactory = Callable[[Session], OutboundMessage | None]


@dataclass(frozen=True)
class SendOutcome:
    session_id: str
    ok: bool
    errcode: str | None = None
    error: str | None = None


class Fanout:
    """Writes messages to session channels.

    A failed write is logged and reported as a ``SendOutcome``; it never
    raises and never stops delivery to the remaining recipients. Nothing is
    retried: the channel's close notification cleans the session up.
    """

    def __init__(self, registry: SessionRegistry):
        self._registry = registry

    async def send(self, session: Session, message: OutboundMessage) -> SendOutcome:
        return await self._send_payload(session, message.type, encode_message(message))

    async def send_all(self, message: OutboundMessage | MessageFactory) -> list[SendOutcome]:
        """Send to every registered session.

        ``message`` is either one message for everybody (encoded once) or a
        factory called per recipient; a factory returning ``None`` skips that
        recipient.
        """
        recipients = self._registry.sessions()
        outcomes: list[SendOutcome] = []

        if isinstance(message, OutboundMessage):
            payload = encode_message(message)
            for session in recipients:
                outcomes.append(await self._send_payload(session, message.type, payload))
            return outcomes

        for session in recipients:
            personal = message(session)
            if personal is None:
                continue
            outcomes.append(await self.send(session, personal))
        return outcomes

    async def _send_payload(self, session: Session, msg_type: str, payload: str) -> SendOutcome:
        try:
            await session.channel.send(payload)
        except RelayError as exc:
            logger.warning(
                "Send {} to {} failed: {} {}", msg_type, session.id, exc.errcode, exc.errmesg
            )
            return SendOutcome(session.id, ok=False, errcode=exc.errcode, error=exc.errmesg)
        except Exception as exc:
            logger.warning(
                "Send {} to {} failed: {}: {}", msg_type, session.id, type(exc).__name__, exc
            )
            return SendOutcome(
                session.id,
                ok=False,
                errcode=RelayErrorCode.E_SEND_FAILED.value,
                error=f"{type(exc).__name__}: {exc}",
            )
        return SendOutcome(session.id, ok=True)
