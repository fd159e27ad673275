"""Tokenizer and parser for the shell's command language.

The grammar::

    line  := pipe ('&')* (';' line)?
    pipe  := exec ('|' pipe)?
    exec  := block | redirs (word redirs)*
    block := '(' line ')' redirs
    redirs := (('<' | '>' | '>>') word)*
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, Union

MAXARGS = 10
WHITESPACE = frozenset(" \t\r\n\v")
SYMBOLS = frozenset("<|>&;()")
WORD = "word"


class OpenMode(enum.IntFlag):
    """Flags passed to ``open`` for a redirection."""

    RDONLY = 0x000
    WRONLY = 0x001
    RDWR = 0x002
    CREATE = 0x200


class ShellSyntaxError(ValueError):
    """A command line that the shell cannot parse."""

    def __init__(self, message: str, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


@dataclass
class ExecCmd:
    """Run a program with arguments; ``argv[0]`` names the program."""

    argv: list[str] = field(default_factory=list)


@dataclass
class RedirCmd:
    """Run ``cmd`` with file descriptor ``fd`` opened on ``file``."""

    cmd: "Command"
    file: str
    mode: OpenMode
    fd: int


@dataclass
class PipeCmd:
    """Connect the output of ``left`` to the input of ``right``."""

    left: "Command"
    right: "Command"


@dataclass
class ListCmd:
    """Run ``left``, wait for it, then run ``right``."""

    left: "Command"
    right: "Command"


@dataclass
class BackCmd:
    """Run ``cmd`` in the background."""

    cmd: "Command"


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


@dataclass(frozen=True)
class Token:
    """A lexical token: its kind, its text and where it starts in the line."""

    kind: str
    text: str
    start: int


def _cut(line: str) -> str:
    end = line.find("\0")
    return line if end < 0 else line[:end]


def tokenize(line: str) -> Iterator[Token]:
    """Yield the tokens of ``line``; a NUL ends the line."""
    line = _cut(line)
    end = len(line)
    pos = 0
    while True:
        while pos < end and line[pos] in WHITESPACE:
            pos += 1
        if pos >= end:
            return
        start = pos
        ch = line[pos]
        if ch == ">":
            pos += 1
            if pos < end and line[pos] == ">":
                pos += 1
                yield Token(">>", ">>", start)
            else:
                yield Token(">", ">", start)
        elif ch in SYMBOLS:
            pos += 1
            yield Token(ch, ch, start)
        else:
            while pos < end and line[pos] not in WHITESPACE and line[pos] not in SYMBOLS:
                pos += 1
            yield Token(WORD, line[start:pos], start)


class _Parser:
    def __init__(self, line: str) -> None:
        self.line = _cut(line)
        self.tokens = list(tokenize(self.line))
        self.pos = 0

    def peek(self, *kinds: str) -> bool:
        return self.pos < len(self.tokens) and self.tokens[self.pos].kind in kinds

    def take(self) -> Token | None:
        if self.pos >= len(self.tokens):
            return None
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def where(self) -> int:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos].start
        return len(self.line)

    def parse(self) -> Command:
        cmd = self.parse_line()
        if self.pos < len(self.tokens):
            rest = self.line[self.where():]
            raise ShellSyntaxError(f"syntax: leftovers: {rest}", self.where())
        return cmd

    def parse_line(self) -> Command:
        cmd = self.parse_pipe()
        while self.peek("&"):
            self.take()
            cmd = BackCmd(cmd)
        if self.peek(";"):
            self.take()
            cmd = ListCmd(cmd, self.parse_line())
        return cmd

    def parse_pipe(self) -> Command:
        cmd = self.parse_exec()
        if self.peek("|"):
            self.take()
            cmd = PipeCmd(cmd, self.parse_pipe())
        return cmd

    def parse_redirs(self, cmd: Command) -> Command:
        while self.peek("<", ">", ">>"):
            op = self.take()
            where = self.where()
            target = self.take()
            if target is None or target.kind != WORD:
                raise ShellSyntaxError("missing file for redirection", where)
            if op.kind == "<":
                cmd = RedirCmd(cmd, target.text, OpenMode.RDONLY, 0)
            else:
                cmd = RedirCmd(cmd, target.text, OpenMode.WRONLY | OpenMode.CREATE, 1)
        return cmd

    def parse_block(self) -> Command:
        if not self.peek("("):
            raise ShellSyntaxError("parseblock", self.where())
        self.take()
        cmd = self.parse_line()
        if not self.peek(")"):
            raise ShellSyntaxError("syntax - missing )", self.where())
        self.take()
        return self.parse_redirs(cmd)

    def parse_exec(self) -> Command:
        if self.peek("("):
            return self.parse_block()
        exec_cmd = ExecCmd()
        ret: Command = self.parse_redirs(exec_cmd)
        while not self.peek("|", ")", "&", ";"):
            where = self.where()
            token = self.take()
            if token is None:
                break
            if token.kind != WORD:
                raise ShellSyntaxError("syntax", where)
            exec_cmd.argv.append(token.text)
            if len(exec_cmd.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args", where)
            ret = self.parse_redirs(ret)
        return ret


def parse_command(line: str) -> Command:
    """Parse one command line into a command tree."""
    return _Parser(line).parse()