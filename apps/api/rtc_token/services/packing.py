"""Little-endian binary packing helpers for the token wire format.

Everything produced here feeds an HMAC, so each helper must be byte-for-byte
deterministic and refuse values it cannot represent instead of wrapping them.
"""
from __future__ import annotations

import struct

from ..core.errors import EncodingError, RangeError

UINT16_MAX = 0xFFFF
UINT32_MAX = 0xFFFFFFFF

_UINT16 = struct.Struct("<H")
_UINT32 = struct.Struct("<I")


def _check_range(value: int, upper: int, width: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise RangeError(f"{width} value must be an integer, got {type(value).__name__}")
    if value < 0 or value > upper:
        raise RangeError(f"{value} does not fit in {width}")
    return value


def pack_uint16(value: int) -> bytes:
    return _UINT16.pack(_check_range(value, UINT16_MAX, "uint16"))


def pack_uint32(value: int) -> bytes:
    return _UINT32.pack(_check_range(value, UINT32_MAX, "uint32"))


def pack_bytes(data: bytes) -> bytes:
    """Prefix raw bytes with their length as uint16."""

    if len(data) > UINT16_MAX:
        raise EncodingError(f"{len(data)} bytes exceeds the uint16 length prefix")
    return _UINT16.pack(len(data)) + data


def pack_string(value: str) -> bytes:
    return pack_bytes(value.encode("utf-8"))


def concat(*chunks: bytes) -> bytes:
    return b"".join(chunks)


class TruncatedError(EncodingError):
    """Raised when a read runs past the end of the buffer."""


class ByteReader:
    """Sequential reader mirroring the pack_* helpers."""

    def __init__(self, buffer: bytes) -> None:
        self._buffer = buffer
        self._position = 0

    @property
    def remaining(self) -> int:
        return len(self._buffer) - self._position

    def _take(self, size: int) -> bytes:
        if size > self.remaining:
            raise TruncatedError(
                f"needed {size} bytes at offset {self._position}, only {self.remaining} left"
            )
        chunk = self._buffer[self._position : self._position + size]
        self._position += size
        return chunk

    def read_uint16(self) -> int:
        return _UINT16.unpack(self._take(_UINT16.size))[0]

    def read_uint32(self) -> int:
        return _UINT32.unpack(self._take(_UINT32.size))[0]

    def read_bytes(self) -> bytes:
        return self._take(self.read_uint16())

    def read_string(self) -> str:
        raw = self.read_bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EncodingError("string field is not valid UTF-8") from exc
