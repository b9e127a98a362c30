"""Roles and the privilege table embedded in each token."""
from __future__ import annotations

import enum
from typing import List, Tuple

from ..core.errors import ValidationError

RTC_SERVICE_TYPE = 1


class Privilege(enum.IntEnum):
    JOIN_CHANNEL = 1
    PUBLISH_AUDIO_STREAM = 2
    PUBLISH_VIDEO_STREAM = 3
    PUBLISH_DATA_STREAM = 4


class Role(enum.IntEnum):
    PUBLISHER = 1
    SUBSCRIBER = 2

    @classmethod
    def parse(cls, value: object) -> "Role":
        """Accept the role names and numeric codes clients send; None means publisher."""

        if value is None:
            return cls.PUBLISHER
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        elif isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        raise ValidationError(f"Invalid role: {value!r}")


PrivilegeTable = List[Tuple[Privilege, int]]

_PUBLISH_PRIVILEGES = (
    Privilege.PUBLISH_AUDIO_STREAM,
    Privilege.PUBLISH_VIDEO_STREAM,
    Privilege.PUBLISH_DATA_STREAM,
)


def build_privileges(role: Role, expires_at: int) -> PrivilegeTable:
    """Return the ordered privilege list for ``role``.

    The order is part of the signed bytes: join first, then audio, video and
    data for publishers.
    """

    table: PrivilegeTable = [(Privilege.JOIN_CHANNEL, expires_at)]
    if role is Role.PUBLISHER:
        table.extend((privilege, expires_at) for privilege in _PUBLISH_PRIVILEGES)
    return table
