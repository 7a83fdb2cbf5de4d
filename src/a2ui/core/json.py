"""Fast, strict JSON codecs for the NDJSON wire format."""

from typing import Any
import json

import msgspec
import orjson

_decoder = msgspec.json.Decoder()
_encoder = msgspec.json.Encoder()


class JSONParseError(Exception):
    """JSON parsing failed."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


def decode_line(line: str | bytes) -> Any:
    """
    Decode exactly one JSON value from a single NDJSON record.

    Unlike a lenient extractor, nothing is repaired or stripped: a record that
    is not a complete JSON value is rejected so the caller can drop it.

    Args:
        line: One record, without its terminating newline

    Returns:
        Decoded JSON value

    Raises:
        JSONParseError: If the record is not well-formed JSON
    """
    try:
        return _decoder.decode(line)
    except msgspec.DecodeError as e:
        raise JSONParseError(f"Invalid JSON: {e}", e) from e


def encode_bytes(obj: Any) -> bytes:
    """
    Encode object to compact JSON bytes using the fastest available library.

    Args:
        obj: Object to encode

    Returns:
        Compact UTF-8 JSON
    """
    try:
        return orjson.dumps(obj)
    except (TypeError, orjson.JSONEncodeError):
        # Fallback for edge cases (e.g., integers outside 64-bit range)
        pass

    try:
        return _encoder.encode(obj)
    except (TypeError, ValueError, OverflowError):
        pass

    return json.dumps(obj, separators=(",", ":")).encode("utf-8")


def serialized_size(obj: Any) -> int:
    """Size in bytes of the compact JSON encoding of ``obj``."""
    return len(encode_bytes(obj))
