"""Decode inbound websocket frames and encode outbound messages.

``decode_message`` never raises: a frame becomes a typed message, an
``UnknownMessage`` (well formed, but a type this relay does not handle), or a
``DecodeFailure``. Callers branch on the outcome explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import orjson
from pydantic import TypeAdapter, ValidationError

from signal_relay.utils.relay_errors import RelayErrorCode

from .messages import INBOUND_TYPES, ClientMessage, OutboundMessage

_client_message_adapter: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)


@dataclass(frozen=True)
class UnknownMessage:
    type: str


@dataclass(frozen=True)
class DecodeFailure:
    errcode: RelayErrorCode
    reason: str


DecodeOutcome = Union[ClientMessage, UnknownMessage, DecodeFailure]


def decode_message(raw: str | bytes) -> DecodeOutcome:
    """Decode one frame. Binary frames must hold UTF-8 JSON text."""
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        return DecodeFailure(RelayErrorCode.E_MESSAGE_INVALID_JSON, str(exc))

    if not isinstance(data, dict):
        return DecodeFailure(
            RelayErrorCode.E_MESSAGE_NOT_OBJECT,
            f"expected a JSON object, got {type(data).__name__}",
        )

    msg_type = data.get("type")
    if not isinstance(msg_type, str) or not msg_type:
        return DecodeFailure(RelayErrorCode.E_MESSAGE_MISSING_TYPE, "missing 'type' field")

    if msg_type not in INBOUND_TYPES:
        return UnknownMessage(type=msg_type)

    try:
        return _client_message_adapter.validate_python(data)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return DecodeFailure(RelayErrorCode.E_MESSAGE_VALIDATION_ERROR, f"{msg_type}: {errors}")


def encode_message(message: OutboundMessage) -> str:
    return orjson.dumps(message.model_dump(by_alias=True)).decode("utf-8")
