"""Websocket message schemas.

Inbound messages form a discriminated union keyed by ``type``. Clients in the
wild send a few spellings for the same field, so aliases are normalized here
once and handlers only ever see the canonical attribute names. The first
spelling that carries a non-empty value wins, so ``{"targetId": null, "to": "x"}``
targets ``x``:

- ``targetId`` | ``to`` | ``target`` | ``target_id`` -> ``target_id``
- ``username`` | ``name`` -> ``name``
- ``profilePic`` | ``picture`` | ``avatar`` -> ``avatar``

Outbound messages serialize by alias to the camelCase wire names.
Session descriptions and network candidates are typed ``Any`` and are never
inspected.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

# canonical field -> accepted spellings, in precedence order
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("username", "name"),
    "avatar": ("profilePic", "picture", "avatar"),
    "target_id": ("targetId", "to", "target", "target_id"),
}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


class InboundMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def collapse_aliases(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        data = dict(data)
        for field_name, aliases in FIELD_ALIASES.items():
            if field_name not in cls.model_fields:
                continue
            candidates = [data.pop(alias) for alias in aliases if alias in data]
            chosen = next((v for v in candidates if not _is_blank(v)), None)
            if chosen is not None:
                data[field_name] = chosen
        return data


class _ProfileFields(InboundMessage):
    # absent or empty keeps whatever the session already had
    name: str | None = None
    avatar: Any = None


class SetProfileMessage(_ProfileFields):
    """Rename and/or change avatar. ``set_name`` is the older spelling."""

    type: Literal["set_name", "set_profile"]


class StartBroadcastMessage(_ProfileFields):
    type: Literal["start_broadcast"]


class StopBroadcastMessage(InboundMessage):
    type: Literal["stop_broadcast"]


class LogoutMessage(InboundMessage):
    type: Literal["logout"]


class RequestOfferMessage(InboundMessage):
    """A viewer asking a broadcaster to start a peer connection."""

    type: Literal["request_offer"]
    target_id: str


class SessionDescriptionMessage(InboundMessage):
    type: Literal["offer", "answer"]
    target_id: str
    sdp: Any


class CandidateMessage(InboundMessage):
    type: Literal["candidate"]
    target_id: str
    # null is legal: it marks the end of candidate gathering
    candidate: Any


ClientMessage = Annotated[
    Union[
        SetProfileMessage,
        StartBroadcastMessage,
        StopBroadcastMessage,
        LogoutMessage,
        RequestOfferMessage,
        SessionDescriptionMessage,
        CandidateMessage,
    ],
    Field(discriminator="type"),
]

INBOUND_TYPES: frozenset[str] = frozenset(
    {
        "set_name",
        "set_profile",
        "start_broadcast",
        "stop_broadcast",
        "logout",
        "request_offer",
        "offer",
        "answer",
        "candidate",
    }
)


class OutboundMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class BroadcasterEntry(OutboundMessage):
    """One row of the broadcaster directory."""

    id: str
    name: str
    avatar: Any = Field(default=None, alias="profilePic")


class IdMessage(OutboundMessage):
    type: Literal["id"] = "id"
    id: str


class BroadcasterListMessage(OutboundMessage):
    type: Literal["broadcaster_list"] = "broadcaster_list"
    broadcasters: list[BroadcasterEntry] = Field(alias="list")


class BroadcasterStartedMessage(OutboundMessage):
    type: Literal["broadcaster_started"] = "broadcaster_started"
    broadcaster_id: str = Field(alias="broadcasterId")
    broadcaster_name: str = Field(alias="broadcasterName")
    avatar: Any = Field(default=None, alias="profilePic")
    broadcasters: list[BroadcasterEntry] = Field(alias="list")


class BroadcasterEndedMessage(OutboundMessage):
    type: Literal["broadcaster_ended"] = "broadcaster_ended"
    broadcaster_id: str = Field(alias="broadcasterId")
    broadcasters: list[BroadcasterEntry] = Field(alias="list")


class RequestOfferRelay(OutboundMessage):
    type: Literal["request_offer"] = "request_offer"
    viewer_id: str = Field(alias="viewerId")
    viewer_name: str = Field(alias="viewerName")


class SessionDescriptionRelay(OutboundMessage):
    type: Literal["offer", "answer"]
    sdp: Any
    sender_id: str = Field(alias="senderId")
    sender_name: str = Field(alias="senderName")


class CandidateRelay(OutboundMessage):
    type: Literal["candidate"] = "candidate"
    candidate: Any
    sender_id: str = Field(alias="senderId")
    sender_name: str = Field(alias="senderName")


class ErrorMessage(OutboundMessage):
    type: Literal["error"] = "error"
    message: str


__all__ = [
    "INBOUND_TYPES",
    "BroadcasterEndedMessage",
    "BroadcasterEntry",
    "BroadcasterListMessage",
    "BroadcasterStartedMessage",
    "CandidateMessage",
    "CandidateRelay",
    "ClientMessage",
    "ErrorMessage",
    "IdMessage",
    "InboundMessage",
    "LogoutMessage",
    "OutboundMessage",
    "RequestOfferMessage",
    "RequestOfferRelay",
    "SessionDescriptionMessage",
    "SessionDescriptionRelay",
    "SetProfileMessage",
    "StartBroadcastMessage",
    "StopBroadcastMessage",
]
