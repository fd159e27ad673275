"""Byte and C-string helpers used by the kernel and user programs.

Strings may be ``str`` or bytes-like; a NUL character ends a C string.
Buffers that are written to are ``bytearray`` objects.
"""

from __future__ import annotations

from itertools import islice, takewhile, zip_longest
from typing import Union

Text = Union[str, bytes, bytearray]


def _cstr(s: Text) -> Text:
    """Return the part of ``s`` before its first NUL."""
    end = s.find("\0" if isinstance(s, str) else b"\0")
    return s if end < 0 else s[:end]


def _pad(text: Text, n: int) -> Text:
    """Extend ``text`` with NULs to exactly ``n`` characters."""
    fill = "\0" if isinstance(text, str) else b"\0"
    return text + fill * (n - len(text))


def _codes(s: Text) -> list[int]:
    text = _cstr(s)
    if isinstance(text, str):
        return [ord(ch) for ch in text]
    return list(text)


def _compare(a: list[int], b: list[int], limit: int | None) -> int:
    pairs = zip_longest(a, b, fillvalue=0)
    if limit is not None:
        pairs = islice(pairs, max(limit, 0))
    for x, y in pairs:
        if x != y or x == 0:
            return x - y
    return 0


def _check_range(buf, start: int, n: int) -> None:
    if n < 0 or start < 0 or start + n > len(buf):
        raise IndexError(f"range {start}..{start + n} outside buffer of {len(buf)} bytes")


def memset(buf: bytearray, c: int, n: int) -> bytearray:
    """Fill the first ``n`` bytes of ``buf`` with the low byte of ``c``."""
    _check_range(buf, 0, n)
    buf[:n] = bytes([c & 0xFF]) * n
    return buf


def memcmp(a, b, n: int) -> int:
    """Compare the first ``n`` bytes of two buffers."""
    _check_range(a, 0, n)
    _check_range(b, 0, n)
    for x, y in zip(a[:n], b[:n]):
        if x != y:
            return x - y
    return 0


def memmove(buf: bytearray, dst: int, src: int, n: int) -> bytearray:
    """Copy ``n`` bytes inside ``buf`` from offset ``src`` to ``dst``; overlap is safe."""
    _check_range(buf, src, n)
    _check_range(buf, dst, n)
    buf[dst:dst + n] = bytes(buf[src:src + n])
    return buf


def strncmp(p: Text, q: Text, n: int) -> int:
    """Compare at most ``n`` characters of two C strings."""
    return _compare(_codes(p), _codes(q), n)


def strcmp(p: Text, q: Text) -> int:
    """Compare two C strings."""
    return _compare(_codes(p), _codes(q), None)


def strncpy(src: Text, n: int) -> Text:
    """Return exactly ``n`` characters: ``src`` cut to ``n`` and padded with NULs."""
    if n <= 0:
        return src[:0]
    return _pad(_cstr(src)[:n], n)


def safestrcpy(src: Text, n: int) -> Text:
    """Return what fits in a buffer of ``n`` bytes, leaving room for the NUL."""
    if n <= 0:
        return src[:0]
    return _cstr(src)[:n - 1]


def strlen(s: Text) -> int:
    """Length of a C string, not counting the NUL."""
    return len(_cstr(s))


def strchr(s: Text, c) -> int | None:
    """Index of the first ``c`` in the C string ``s``, or None."""
    target = ord(c) if isinstance(c, str) else int(c)
    if target == 0:
        return None
    try:
        return _codes(s).index(target)
    except ValueError:
        return None


def atoi(s: Text) -> int:
    """Value of the leading decimal digits of ``s``; no sign, no spaces."""
    text = s if isinstance(s, str) else bytes(s).decode("latin-1")
    digits = "".join(takewhile(lambda ch: "0" <= ch <= "9", text))
    return int(digits) if digits else 0