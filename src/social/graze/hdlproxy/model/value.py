"""Handle value records returned for resolved handles.

A resolved handle is always answered with exactly one value of type `URL`. Everything except the
location itself is fixed: the values are never stored, so index, TTL and timestamp are constants
and the permissions describe a public, read-only record.
"""

import struct
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict

URL_VALUE_INDEX = 100
URL_VALUE_TYPE = "URL"

TTL_TYPE_RELATIVE = 0
DEFAULT_TTL = 100
DEFAULT_TIMESTAMP = 100

PERM_ADMIN_READ = 0x08
PERM_ADMIN_WRITE = 0x04
PERM_PUBLIC_READ = 0x02
PERM_PUBLIC_WRITE = 0x01


def _encode_string(value: str) -> bytes:
    data = value.encode("utf-8")
    return struct.pack(">I", len(data)) + data


class HandleValue(BaseModel):
    """A single handle value as exchanged with a handle server host."""

    model_config = ConfigDict(frozen=True)

    index: int = URL_VALUE_INDEX
    type: str = URL_VALUE_TYPE
    data: str
    ttl_type: int = TTL_TYPE_RELATIVE
    ttl: int = DEFAULT_TTL
    timestamp: int = DEFAULT_TIMESTAMP
    references: Tuple[Tuple[str, int], ...] = ()
    admin_can_read: bool = True
    admin_can_write: bool = False
    anyone_can_read: bool = True
    anyone_can_write: bool = False

    @classmethod
    def for_location(cls, location: str) -> "HandleValue":
        """Build the URL value for a resolved location."""
        return cls(data=location)

    @property
    def permissions(self) -> int:
        permissions = 0
        if self.admin_can_read:
            permissions |= PERM_ADMIN_READ
        if self.admin_can_write:
            permissions |= PERM_ADMIN_WRITE
        if self.anyone_can_read:
            permissions |= PERM_PUBLIC_READ
        if self.anyone_can_write:
            permissions |= PERM_PUBLIC_WRITE
        return permissions

    def encode(self) -> bytes:
        """Encode the value in the handle protocol storage layout.

        Layout (big-endian): index, timestamp, TTL type, TTL, permissions, type, data and the
        reference list. Strings and data are length-prefixed with a 32-bit count.
        """
        parts: List[bytes] = [
            struct.pack(
                ">IIBiB",
                self.index,
                self.timestamp,
                self.ttl_type,
                self.ttl,
                self.permissions,
            ),
            _encode_string(self.type),
            _encode_string(self.data),
            struct.pack(">I", len(self.references)),
        ]
        for handle, index in self.references:
            parts.append(_encode_string(handle))
            parts.append(struct.pack(">I", index))
        return b"".join(parts)
