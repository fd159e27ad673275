"""Count lines, words and bytes."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from functools import partial
from typing import BinaryIO, Iterable

BUF_SIZE = 512
WHITESPACE = frozenset(b" \r\t\n\v")


@dataclass(frozen=True)
class Counts:
    lines: int
    words: int
    chars: int


def _scan(chunks: Iterable[bytes]) -> Counts:
    lines = words = chars = 0
    inword = False
    for chunk in chunks:
        chars += len(chunk)
        lines += chunk.count(b"\n")
        for byte in chunk:
            if byte in WHITESPACE:
                inword = False
            elif not inword:
                words += 1
                inword = True
    return Counts(lines, words, chars)


def count(data: bytes) -> Counts:
    """Count the lines, words and bytes of ``data``."""
    return _scan([bytes(data)])


def count_stream(stream: BinaryIO) -> Counts:
    """Count a binary stream, reading it in fixed-size chunks."""
    return _scan(iter(partial(stream.read, BUF_SIZE), b""))


def _report(counts: Counts, name: str) -> None:
    print(f"{counts.lines} {counts.words} {counts.chars} {name}")


def main(argv: list[str] | None = None) -> int:
    """Count each named file, or standard input when none is named."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        try:
            counts = count_stream(sys.stdin.buffer)
        except OSError:
            print("wc: read error")
            return 1
        _report(counts, "")
        return 0
    for name in args:
        try:
            stream = open(name, "rb")
        except OSError:
            print(f"wc: cannot open {name}")
            return 1
        with stream:
            try:
                counts = count_stream(stream)
            except OSError:
                print("wc: read error")
                return 1
        _report(counts, name)
    return 0