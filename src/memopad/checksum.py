"""32-bit rolling checksum used to lock memo bodies.

This is a privacy nudge, not access control: a 4-digit code has only
10,000 possible values and the checksum is trivially brute-forced.
"""
from __future__ import annotations

import re

_CODE_RE = re.compile(r"[0-9]{4}")


def _utf16_units(text: str):
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def checksum(text: str) -> str:
    """Return the signed 32-bit ``h = h * 31 + unit`` hash of ``text`` as a string.

    Matches the browser ``((h << 5) - h) + charCodeAt(i)`` loop (and Java's
    ``String.hashCode``), so stored values stay compatible.
    """
    h = 0
    for unit in _utf16_units(text):
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return str(h)


def verify(stored: str | None, candidate: str) -> bool:
    if stored is None:
        return False
    return checksum(candidate) == stored


def is_valid_code(code: str) -> bool:
    """A lock code is exactly four ASCII digits."""
    return bool(_CODE_RE.fullmatch(code or ""))
