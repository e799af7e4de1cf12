"""
Tests for the MessagePack wire codec.
"""

import msgpack
import pytest

from kargo.logic.enums import ErrorCode
from kargo.messaging.encoder import MAX_BUFFER_LEN, MAX_MAP_LEN, DecodeError, decode, encode
from kargo.messaging.types import ErrorMessage


class TestEncode:
    def test_pydantic_dump_round_trips(self):
        data = ErrorMessage(code=ErrorCode.ROOM_FULL, message="Room is full").model_dump(mode="json")
        assert decode(encode(data)) == {"type": "session_error", "code": "room_full", "message": "Room is full"}

    def test_tuples_become_lists(self):
        assert decode(encode({"hand": ("c_1", "c_2")})) == {"hand": ["c_1", "c_2"]}

    def test_none_and_booleans_survive(self):
        data = {"drawn_card": None, "ready": True}
        assert decode(encode(data)) == data


class TestDecode:
    def test_rejects_garbage(self):
        with pytest.raises(DecodeError, match="failed to decode"):
            decode(b"\xc1\xc1\xc1")

    def test_rejects_non_dict(self):
        with pytest.raises(DecodeError, match="expected dict, got list"):
            decode(msgpack.packb([1, 2, 3]))

    def test_rejects_oversized_payload(self):
        with pytest.raises(DecodeError, match="payload too large"):
            decode(b"\x00" * (MAX_BUFFER_LEN + 1))

    def test_rejects_too_many_keys(self):
        with pytest.raises(DecodeError):
            decode(msgpack.packb({f"k{n}": n for n in range(MAX_MAP_LEN + 1)}))

    def test_rejects_non_string_keys(self):
        with pytest.raises(DecodeError):
            decode(msgpack.packb({1: "a"}))
