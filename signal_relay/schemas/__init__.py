"""Wire schemas for the signaling websocket."""

from .codec import DecodeFailure, UnknownMessage, decode_message, encode_message
from .messages import BroadcasterEntry, ClientMessage, OutboundMessage

__all__ = [
    "BroadcasterEntry",
    "ClientMessage",
    "DecodeFailure",
    "OutboundMessage",
    "UnknownMessage",
    "decode_message",
    "encode_message",
]
