import pytest

from xv6sim.strings import (
    atoi,
    memcmp,
    memmove,
    memset,
    safestrcpy,
    strchr,
    strcmp,
    strlen,
    strncmp,
    strncpy,
)


def test_memset_fills_low_byte():
    buf = bytearray(b"xxxxxx")
    result = memset(buf, 0x141, 4)
    assert result is buf
    assert buf == bytearray([0x41] * 4) + b"xx"


def test_memset_out_of_range():
    with pytest.raises(IndexError):
        memset(bytearray(3), 0, 4)


def test_memcmp():
    assert memcmp(b"abc", b"abd", 3) < 0
    assert memcmp(b"abd", b"abc", 3) > 0
    assert memcmp(b"abc", b"abd", 2) == 0
    assert memcmp(b"\x00", b"\xff", 1) < 0


def test_memmove_overlap_forward():
    buf = bytearray(b"abcdef")
    memmove(buf, 2, 0, 4)
    assert buf == bytearray(b"ababcd")


def test_memmove_overlap_backward():
    buf = bytearray(b"abcdef")
    memmove(buf, 0, 2, 4)
    assert buf[:4] == bytearray(b"cdef")
    assert buf[4:] == bytearray(b"ef")


def test_memmove_bounds():
    with pytest.raises(IndexError):
        memmove(bytearray(4), 2, 0, 3)


def test_strncmp():
    assert strncmp("abc", "abd", 2) == 0
    assert strncmp("abc", "abd", 3) < 0
    assert strncmp("ab", "ab", 10) == 0
    assert strncmp("ab", "abc", 10) < 0
    assert strncmp("anything", "else", 0) == 0


def test_strcmp():
    assert strcmp("a", "b") < 0
    assert strcmp("same", "same") == 0
    assert strcmp("abc\0x", "abc\0y") == 0
    assert strcmp(b"b", b"a") > 0


def test_strncpy_pads_with_nul():
    assert strncpy("ab", 4) == "ab\0\0"
    assert strncpy("abcdef", 3) == "abc"
    assert strncpy(b"ab", 3) == b"ab\0"


def test_safestrcpy_leaves_room_for_nul():
    assert safestrcpy("hello", 3) == "he"
    assert safestrcpy("hi", 16) == "hi"
    assert safestrcpy("hello", 0) == ""


def test_strlen_stops_at_nul():
    assert strlen("ab\0cd") == 2
    assert strlen(b"") == 0


def test_strchr():
    symbols = "<|>&;()"
    idx = strchr(symbols, "|")
    assert symbols[idx] == "|"
    assert strchr(symbols, "a") is None
    assert strchr(symbols, "\0") is None
    assert strchr(b" \t", ord("\t")) == 1


def test_atoi():
    assert atoi("123abc") == 123
    assert atoi("-5") == 0
    assert atoi("") == 0
    assert atoi(b"42") == 42
    assert atoi(" 7") == 0