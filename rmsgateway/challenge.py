"""Secure gateway login challenge/response computation."""

from __future__ import annotations

import hashlib
import logging
from typing import Union

log = logging.getLogger(__name__)

Text = Union[str, bytes]

# Fixed 64-byte salt shared with the CMS.
SALT = bytes.fromhex(
    "4dc565cebef95dc8"
    "33f35ded475eef8a"
    "446c46b9e189d910"
    "337ac130c2c3c6af"
    "aca946543d3e68ba"
    "72343da84281c0d0"
    "bbf9e8c129712 92d".replace(" ", "")
    + "f0101de4d0e43d14"
)

_SALT_LIMIT = 64
_RESPONSE_DIGITS = 10
_RESPONSE_LENGTH = 8


def _as_bytes(value: Text) -> bytes:
    """Return value as bytes, ending at the first NUL."""
    data = value.encode("latin-1") if isinstance(value, str) else bytes(value)
    return data.split(b"\x00", 1)[0]


def challenged_password(challenge: Text, password: Text, salt: bytes = SALT) -> int:
    """Compute the numeric answer to a login challenge.

    The challenge, password and (at most 64 bytes of) salt are joined and
    hashed with MD5; the first four digest bytes, read little-endian with
    the top two bits cleared, form the result.
    """
    message = _as_bytes(challenge) + _as_bytes(password) + _as_bytes(salt[:_SALT_LIMIT])
    digest = hashlib.md5(message).digest()
    high = digest[3] & 0x3F
    return int.from_bytes(digest[:3] + bytes([high]), "little")


def sgl_challenge_response(challenge: Text, password: Text) -> str:
    """Return the eight-digit response code for a login challenge."""
    log.debug("sgl_challenge_response(challenge = %s)", challenge)
    value = challenged_password(challenge, password, SALT)
    log.debug("challenged_password() returned: %u", value)
    response = f"{value:0{_RESPONSE_DIGITS}d}"[-_RESPONSE_LENGTH:]
    log.debug("sgl_challenge_response() returning with: %s", response)
    return response