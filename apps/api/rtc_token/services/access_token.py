"""Version "007" RTC access token builder.

A token is ``"007" + base64(envelope)``. The envelope carries the app id,
timestamps, salt, channel, uid, the privilege table and an HMAC-SHA256
signature. The signature covers the raw (unprefixed) app id and channel name,
the uid and the packed message::

    message  = salt | issued_at | ttl_offset | services
    services = count(1) | service_type(1) | n | (privilege_id | expires_at) * n

Both the signed message and the envelope take their service block from
``pack_services`` so the two layouts stay identical.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Tuple

from ..core.errors import ConfigurationError, CryptoError, ValidationError
from .packing import UINT32_MAX, concat, pack_bytes, pack_string, pack_uint16, pack_uint32
from .privileges import RTC_SERVICE_TYPE, Role, build_privileges

logger = logging.getLogger(__name__)

VERSION = "007"
DEFAULT_TTL_SECONDS = 3600
MAX_CHANNEL_NAME_BYTES = 64
SERVICE_COUNT = 1

# service count + service type, both uint16
_SERVICE_HEADER_SIZE = 4

Clock = Callable[[], int]
RandomSource = Callable[[], int]
PrivilegeEntries = Iterable[Tuple[int, int]]


def system_clock() -> int:
    return int(time.time())


def secure_salt() -> int:
    return secrets.randbits(32)


@dataclass(frozen=True, slots=True)
class Credential:
    app_id: str
    app_certificate: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class IssueRequest:
    channel_name: str
    uid: int
    role: Role = Role.PUBLISHER
    ttl_seconds: int = DEFAULT_TTL_SECONDS


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    issued_at: int
    expires_at: int
    salt: int
    role: Role


def pack_services(
    privileges: PrivilegeEntries,
    *,
    service_type: int = RTC_SERVICE_TYPE,
    service_count: int = SERVICE_COUNT,
) -> bytes:
    """Pack the service block shared by the signed message and the envelope."""

    entries = list(privileges)
    chunks = [pack_uint16(service_count), pack_uint16(service_type), pack_uint16(len(entries))]
    for privilege_id, expires_at in entries:
        chunks.append(pack_uint16(privilege_id))
        chunks.append(pack_uint32(expires_at))
    return concat(*chunks)


def pack_message(salt: int, issued_at: int, ttl_offset: int, services: bytes) -> bytes:
    return concat(pack_uint32(salt), pack_uint32(issued_at), pack_uint32(ttl_offset), services)


def sign(app_certificate: str, app_id: str, channel_name: str, uid: int, message: bytes) -> bytes:
    """HMAC-SHA256 over app id, channel, uid and message, keyed by the certificate."""

    if not app_certificate:
        raise ConfigurationError("App certificate is empty")

    payload = concat(app_id.encode("utf-8"), channel_name.encode("utf-8"), pack_uint32(uid), message)
    try:
        return hmac.new(app_certificate.encode("utf-8"), payload, hashlib.sha256).digest()
    except (TypeError, ValueError) as exc:
        raise CryptoError(f"HMAC signing failed: {exc}") from exc


def pack_envelope(
    *,
    app_id: str,
    issued_at: int,
    ttl_offset: int,
    salt: int,
    channel_name: str,
    uid: int,
    services: bytes,
    signature: bytes,
) -> bytes:
    header = services[:_SERVICE_HEADER_SIZE]
    table = services[_SERVICE_HEADER_SIZE:]
    return concat(
        pack_string(app_id),
        pack_uint32(issued_at),
        pack_uint32(ttl_offset),
        pack_uint32(salt),
        header,
        pack_string(channel_name),
        pack_uint32(uid),
        table,
        pack_bytes(signature),
    )


def encode_token(envelope: bytes) -> str:
    return VERSION + base64.b64encode(envelope).decode("ascii")


def validate_request(request: IssueRequest) -> None:
    try:
        channel_bytes = request.channel_name.encode("utf-8") if isinstance(request.channel_name, str) else b""
    except UnicodeEncodeError as exc:
        raise ValidationError("Missing or invalid channel name") from exc
    if not channel_bytes:
        raise ValidationError("Missing or invalid channel name")
    if len(channel_bytes) > MAX_CHANNEL_NAME_BYTES:
        raise ValidationError(f"Channel name exceeds {MAX_CHANNEL_NAME_BYTES} bytes")
    uid = request.uid
    if isinstance(uid, bool) or not isinstance(uid, int) or not 0 <= uid <= UINT32_MAX:
        raise ValidationError("Missing or invalid uid")
    if not isinstance(request.role, Role):
        raise ValidationError(f"Invalid role: {request.role!r}")


class AccessTokenBuilder:
    """Mint tokens for one credential. Stateless between calls."""

    def __init__(
        self,
        credential: Credential,
        *,
        clock: Clock = system_clock,
        random_source: RandomSource = secure_salt,
    ) -> None:
        if not credential.app_id:
            raise ConfigurationError("App id is empty")
        if not credential.app_certificate:
            raise ConfigurationError("App certificate is empty")
        self._credential = credential
        self._clock = clock
        self._random_source = random_source

    def build(self, request: IssueRequest) -> IssuedToken:
        validate_request(request)

        issued_at = int(self._clock())
        # Non-positive lifetimes yield a token that expires at issue time.
        ttl_offset = max(0, int(request.ttl_seconds))
        # A clock past the uint32 range is a server fault and fails in packing instead.
        if issued_at <= UINT32_MAX < issued_at + ttl_offset:
            raise ValidationError("Invalid expireTime")
        expires_at = issued_at + ttl_offset
        salt = self._random_source()

        services = pack_services(build_privileges(request.role, expires_at))
        message = pack_message(salt, issued_at, ttl_offset, services)
        signature = sign(
            self._credential.app_certificate,
            self._credential.app_id,
            request.channel_name,
            request.uid,
            message,
        )
        envelope = pack_envelope(
            app_id=self._credential.app_id,
            issued_at=issued_at,
            ttl_offset=ttl_offset,
            salt=salt,
            channel_name=request.channel_name,
            uid=request.uid,
            services=services,
            signature=signature,
        )
        logger.debug("Packed %d-byte token envelope", len(envelope))
        return IssuedToken(
            token=encode_token(envelope),
            issued_at=issued_at,
            expires_at=expires_at,
            salt=salt,
            role=request.role,
        )
