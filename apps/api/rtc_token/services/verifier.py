"""Decode and verify version "007" tokens.

Rejecting untrusted input is the common case here, so ``verify_token`` reports
problems through ``VerificationResult`` rather than raising.
"""
from __future__ import annotations

import base64
import binascii
import enum
import hmac
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..core.errors import EncodingError
from .access_token import (
    VERSION,
    Clock,
    pack_envelope,
    pack_message,
    pack_services,
    sign,
    system_clock,
)
from .packing import ByteReader, TruncatedError

logger = logging.getLogger(__name__)


class VerifyFailure(str, enum.Enum):
    VERSION_MISMATCH = "version_mismatch"
    MALFORMED_BASE64 = "malformed_base64"
    TRUNCATED = "truncated"
    MALFORMED_FIELD = "malformed_field"
    TRAILING_DATA = "trailing_data"
    SIGNATURE_MISMATCH = "signature_mismatch"
    EXPIRED = "expired"


class TokenDecodeError(Exception):
    def __init__(self, reason: VerifyFailure, message: str) -> None:
        super().__init__(message)
        self.reason = reason


@dataclass(frozen=True, slots=True)
class DecodedToken:
    app_id: str
    issued_at: int
    ttl_offset: int
    salt: int
    service_count: int
    service_type: int
    channel_name: str
    uid: int
    privileges: Tuple[Tuple[int, int], ...]
    signature: bytes

    @property
    def expires_at(self) -> int:
        return self.issued_at + self.ttl_offset

    def services(self) -> bytes:
        return pack_services(
            self.privileges,
            service_type=self.service_type,
            service_count=self.service_count,
        )

    def message(self) -> bytes:
        return pack_message(self.salt, self.issued_at, self.ttl_offset, self.services())


@dataclass(frozen=True, slots=True)
class VerificationResult:
    reason: Optional[VerifyFailure] = None
    token: Optional[DecodedToken] = None

    @property
    def ok(self) -> bool:
        return self.reason is None


def _parse_envelope(envelope: bytes) -> DecodedToken:
    reader = ByteReader(envelope)
    app_id = reader.read_string()
    issued_at = reader.read_uint32()
    ttl_offset = reader.read_uint32()
    salt = reader.read_uint32()
    service_count = reader.read_uint16()
    service_type = reader.read_uint16()
    channel_name = reader.read_string()
    uid = reader.read_uint32()
    privilege_count = reader.read_uint16()
    privileges = tuple(
        (reader.read_uint16(), reader.read_uint32()) for _ in range(privilege_count)
    )
    signature = reader.read_bytes()
    if reader.remaining:
        raise TokenDecodeError(
            VerifyFailure.TRAILING_DATA, f"{reader.remaining} unexpected bytes after signature"
        )
    return DecodedToken(
        app_id=app_id,
        issued_at=issued_at,
        ttl_offset=ttl_offset,
        salt=salt,
        service_count=service_count,
        service_type=service_type,
        channel_name=channel_name,
        uid=uid,
        privileges=privileges,
        signature=signature,
    )


def decode_envelope(envelope: bytes) -> DecodedToken:
    try:
        return _parse_envelope(envelope)
    except TruncatedError as exc:
        raise TokenDecodeError(VerifyFailure.TRUNCATED, str(exc)) from exc
    except EncodingError as exc:
        raise TokenDecodeError(VerifyFailure.MALFORMED_FIELD, str(exc)) from exc


def decode_token(token: str) -> DecodedToken:
    """Parse a token string. Raises ``TokenDecodeError`` carrying the failure reason."""

    if not isinstance(token, str) or not token.startswith(VERSION):
        raise TokenDecodeError(VerifyFailure.VERSION_MISMATCH, "Token does not carry version 007")
    try:
        envelope = base64.b64decode(token[len(VERSION):], validate=True)
    except (binascii.Error, ValueError) as exc:
        raise TokenDecodeError(VerifyFailure.MALFORMED_BASE64, "Token payload is not valid base64") from exc
    return decode_envelope(envelope)


def reencode(decoded: DecodedToken) -> bytes:
    """Rebuild the envelope bytes for a decoded token."""

    return pack_envelope(
        app_id=decoded.app_id,
        issued_at=decoded.issued_at,
        ttl_offset=decoded.ttl_offset,
        salt=decoded.salt,
        channel_name=decoded.channel_name,
        uid=decoded.uid,
        services=decoded.services(),
        signature=decoded.signature,
    )


def verify_token(token: str, app_certificate: str, *, clock: Clock = system_clock) -> VerificationResult:
    try:
        decoded = decode_token(token)
    except TokenDecodeError as exc:
        logger.debug("Rejected token: %s (%s)", exc.reason.value, exc)
        return VerificationResult(reason=exc.reason)

    expected = sign(app_certificate, decoded.app_id, decoded.channel_name, decoded.uid, decoded.message())
    if not hmac.compare_digest(expected, decoded.signature):
        return VerificationResult(reason=VerifyFailure.SIGNATURE_MISMATCH, token=decoded)
    if decoded.expires_at < clock():
        return VerificationResult(reason=VerifyFailure.EXPIRED, token=decoded)
    return VerificationResult(token=decoded)
