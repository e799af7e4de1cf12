"""
MessagePack encoder/decoder for the KARGO wire format.

Outgoing messages are plain dicts (pydantic `model_dump(mode="json")`
output); incoming frames must decode to a dict or they are rejected.
"""

from typing import Any

import msgpack


class DecodeError(Exception):
    """Error raised when an incoming frame is not a valid message."""


# Size limits against resource exhaustion from malicious payloads.
MAX_BUFFER_LEN = 64 * 1024
MAX_STR_LEN = 4 * 1024
MAX_BIN_LEN = 4 * 1024
MAX_ARRAY_LEN = 256
MAX_MAP_LEN = 64
MAX_EXT_LEN = 256


def encode(data: dict[str, Any]) -> bytes:
    return msgpack.packb(data, use_bin_type=True)


def decode(data: bytes) -> dict[str, Any]:
    """
    Decode MessagePack bytes to a dict.

    Raises DecodeError if data is invalid, not a dict, or exceeds size limits.
    """
    if len(data) > MAX_BUFFER_LEN:
        raise DecodeError(f"payload too large: {len(data)} bytes (max {MAX_BUFFER_LEN})")
    try:
        result = msgpack.unpackb(
            data,
            raw=False,
            strict_map_key=True,
            max_str_len=MAX_STR_LEN,
            max_bin_len=MAX_BIN_LEN,
            max_array_len=MAX_ARRAY_LEN,
            max_map_len=MAX_MAP_LEN,
            max_ext_len=MAX_EXT_LEN,
        )
    except (msgpack.UnpackException, ValueError) as e:
        raise DecodeError(f"failed to decode MessagePack data: {e}") from e

    if not isinstance(result, dict):
        raise DecodeError(f"expected dict, got {type(result).__name__}")

    return result
