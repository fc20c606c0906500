"""Tests for inbound frame decoding and outbound encoding."""

import orjson

from signal_relay.schemas.codec import DecodeFailure, UnknownMessage, decode_message, encode_message
from signal_relay.schemas.messages import (
    BroadcasterEndedMessage,
    BroadcasterEntry,
    BroadcasterStartedMessage,
    CandidateMessage,
    LogoutMessage,
    RequestOfferMessage,
    SessionDescriptionMessage,
    SessionDescriptionRelay,
    SetProfileMessage,
    StartBroadcastMessage,
    StopBroadcastMessage,
)
from signal_relay.utils.relay_errors import RelayErrorCode


class TestDecodeValid:
    def test_set_name(self):
        message = decode_message('{"type": "set_name", "name": "Alice"}')

        assert isinstance(message, SetProfileMessage)
        assert message.type == "set_name"
        assert message.name == "Alice"
        assert message.avatar is None

    def test_set_profile_username_wins_over_name(self):
        message = decode_message(
            '{"type": "set_profile", "username": "neo", "name": "thomas", "profilePic": "p.png"}'
        )

        assert isinstance(message, SetProfileMessage)
        assert message.name == "neo"
        assert message.avatar == "p.png"

    def test_set_profile_picture_alias(self):
        message = decode_message('{"type": "set_profile", "picture": {"url": "x"}}')

        assert message.avatar == {"url": "x"}

    def test_start_and_stop_and_logout(self):
        assert isinstance(decode_message('{"type": "start_broadcast"}'), StartBroadcastMessage)
        assert isinstance(decode_message('{"type": "stop_broadcast"}'), StopBroadcastMessage)
        assert isinstance(decode_message('{"type": "logout"}'), LogoutMessage)

    def test_target_aliases_normalize(self):
        for key in ("targetId", "to", "target"):
            message = decode_message(orjson.dumps({"type": "request_offer", key: "us_1"}))
            assert isinstance(message, RequestOfferMessage)
            assert message.target_id == "us_1"

    def test_target_id_takes_precedence(self):
        message = decode_message('{"type": "request_offer", "targetId": "a", "to": "b"}')

        assert message.target_id == "a"

    def test_null_target_id_falls_through_to_next_alias(self):
        message = decode_message('{"type": "offer", "targetId": null, "to": "us_2", "sdp": "X"}')

        assert isinstance(message, SessionDescriptionMessage)
        assert message.target_id == "us_2"

    def test_empty_username_falls_through_to_name(self):
        message = decode_message('{"type": "set_profile", "username": "", "name": "Bob"}')

        assert message.name == "Bob"

    def test_empty_avatar_spellings_mean_absent(self):
        message = decode_message('{"type": "set_profile", "profilePic": "", "picture": null}')

        assert message.name is None
        assert message.avatar is None

    def test_all_target_spellings_blank_is_rejected(self):
        outcome = decode_message('{"type": "request_offer", "targetId": "", "to": null}')

        assert isinstance(outcome, DecodeFailure)
        assert outcome.errcode == RelayErrorCode.E_MESSAGE_VALIDATION_ERROR

    def test_offer_keeps_sdp_object_as_is(self):
        sdp = {"type": "offer", "sdp": "v=0\r\n"}
        message = decode_message(orjson.dumps({"type": "offer", "targetId": "u", "sdp": sdp}))

        assert isinstance(message, SessionDescriptionMessage)
        assert message.sdp == sdp

    def test_candidate_null(self):
        message = decode_message('{"type": "candidate", "targetId": "u", "candidate": null}')

        assert isinstance(message, CandidateMessage)
        assert message.candidate is None

    def test_extra_fields_ignored(self):
        message = decode_message('{"type": "logout", "reason": "bye", "n": 1}')

        assert isinstance(message, LogoutMessage)

    def test_bytes_input(self):
        message = decode_message(b'{"type": "set_name", "name": "\xc3\xa9"}')

        assert message.name == "é"


class TestDecodeOutcomes:
    def test_unknown_type(self):
        assert decode_message('{"type": "dance"}') == UnknownMessage(type="dance")

    def test_invalid_json(self):
        outcome = decode_message("{oops")

        assert isinstance(outcome, DecodeFailure)
        assert outcome.errcode == RelayErrorCode.E_MESSAGE_INVALID_JSON

    def test_invalid_utf8(self):
        outcome = decode_message(b'{"type": "\xff"}')

        assert isinstance(outcome, DecodeFailure)
        assert outcome.errcode == RelayErrorCode.E_MESSAGE_INVALID_JSON

    def test_not_an_object(self):
        outcome = decode_message('"start_broadcast"')

        assert isinstance(outcome, DecodeFailure)
        assert outcome.errcode == RelayErrorCode.E_MESSAGE_NOT_OBJECT

    def test_missing_or_non_string_type(self):
        for raw in ('{"name": "x"}', '{"type": 3}', '{"type": ""}'):
            outcome = decode_message(raw)
            assert isinstance(outcome, DecodeFailure)
            assert outcome.errcode == RelayErrorCode.E_MESSAGE_MISSING_TYPE

    def test_missing_required_fields(self):
        for raw in (
            '{"type": "offer", "sdp": "x"}',
            '{"type": "answer", "targetId": "u"}',
            '{"type": "candidate", "targetId": "u"}',
            '{"type": "request_offer"}',
        ):
            outcome = decode_message(raw)
            assert isinstance(outcome, DecodeFailure), raw
            assert outcome.errcode == RelayErrorCode.E_MESSAGE_VALIDATION_ERROR

    def test_non_string_target_is_rejected(self):
        outcome = decode_message('{"type": "request_offer", "targetId": 42}')

        assert isinstance(outcome, DecodeFailure)


class TestEncode:
    def test_encode_uses_wire_names(self):
        entry = BroadcasterEntry(id="us_1", name="Alice", avatar="a.png")
        frame = encode_message(
            BroadcasterStartedMessage(
                broadcaster_id="us_1",
                broadcaster_name="Alice",
                avatar="a.png",
                broadcasters=[entry],
            )
        )

        assert orjson.loads(frame) == {
            "type": "broadcaster_started",
            "broadcasterId": "us_1",
            "broadcasterName": "Alice",
            "profilePic": "a.png",
            "list": [{"id": "us_1", "name": "Alice", "profilePic": "a.png"}],
        }

    def test_encode_ended(self):
        frame = encode_message(BroadcasterEndedMessage(broadcaster_id="us_1", broadcasters=[]))

        assert orjson.loads(frame) == {"type": "broadcaster_ended", "broadcasterId": "us_1", "list": []}

    def test_encode_returns_text(self):
        frame = encode_message(
            SessionDescriptionRelay(type="answer", sdp="☃", sender_id="a", sender_name="b")
        )

        assert isinstance(frame, str)
        assert orjson.loads(frame)["sdp"] == "☃"
