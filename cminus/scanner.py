"""Hand-written DFA scanner for C-Minus source text."""

from __future__ import annotations

import io
import sys
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum, auto
from typing import TextIO

from .syntax import TokenType, token_text

MAXTOKENLEN = 40
_BUFLEN = 256

_DIGITS = frozenset("0123456789")
_LETTERS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")

_RESERVED = {
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "return": TokenType.RETURN,
    "int": TokenType.INT,
    "void": TokenType.VOID,
}

_SINGLE = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.TIMES,
    ";": TokenType.SEMI,
    ",": TokenType.COMMA,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACE,
    "]": TokenType.RBRACE,
    "{": TokenType.LCURLY,
    "}": TokenType.RCURLY,
}


class _State(Enum):
    START = auto()
    DONE = auto()
    IN_NUM = auto()
    IN_ID = auto()
    IN_NE = auto()
    IN_OVER = auto()
    IN_ASSIGN = auto()
    IN_LT = auto()
    IN_GT = auto()
    IN_COMMENT = auto()
    IN_COMMENT_END = auto()


def _is_digit(c: str | None) -> bool:
    return c is not None and c in _DIGITS


def _is_alpha(c: str | None) -> bool:
    return c is not None and c in _LETTERS


@dataclass(frozen=True)
class Token:
    """A scanned token with its lexeme and the line it ended on."""

    type: TokenType
    lexeme: str
    lineno: int


class Scanner:
    """Reads source text line by line and produces tokens on demand."""

    def __init__(
        self,
        source: TextIO,
        listing: TextIO | None = None,
        echo_source: bool = False,
        trace_scan: bool = False,
    ) -> None:
        self._source = source
        self.listing = listing if listing is not None else sys.stdout
        self.echo_source = echo_source
        self.trace_scan = trace_scan
        self.lineno = 0
        self._line = ""
        self._size = 0
        self._pos = 0
        self._eof = False

    def _next_char(self) -> str | None:
        if self._pos >= self._size:
            self.lineno += 1
            line = self._source.readline(_BUFLEN - 2)
            if not line:
                self._eof = True
                return None
            nul = line.find("\0")
            self._size = len(line) if nul < 0 else nul
            self._line = line
            if self.echo_source:
                self.listing.write(f"{self.lineno:4d}: {line[:self._size]}")
            self._pos = 1
            return line[0]
        c = self._line[self._pos]
        self._pos += 1
        return c

    def _unget_char(self) -> None:
        if not self._eof:
            self._pos -= 1

    def get_token(self) -> Token:
        """Scan and return the next token."""
        lexeme: list[str] = []
        state = _State.START
        current = TokenType.ERROR
        while state is not _State.DONE:
            c = self._next_char()
            save = True
            if state is _State.START:
                if _is_digit(c):
                    state = _State.IN_NUM
                elif _is_alpha(c):
                    state = _State.IN_ID
                elif c == "!":
                    state = _State.IN_NE
                elif c == "/":
                    state = _State.IN_OVER
                elif c == "=":
                    state = _State.IN_ASSIGN
                elif c == "<":
                    state = _State.IN_LT
                elif c == ">":
                    state = _State.IN_GT
                elif c in (" ", "\t", "\n"):
                    save = False
                else:
                    state = _State.DONE
                    if c is None or c == "\0":
                        save = False
                        current = TokenType.ENDFILE
                    else:
                        current = _SINGLE.get(c, TokenType.ERROR)
            elif state is _State.IN_NUM:
                if not _is_digit(c):
                    self._unget_char()
                    save = False
                    state = _State.DONE
                    current = TokenType.NUM
            elif state is _State.IN_ID:
                if not _is_alpha(c) and not _is_digit(c):
                    self._unget_char()
                    save = False
                    state = _State.DONE
                    current = TokenType.ID
            elif state is _State.IN_NE:
                state = _State.DONE
                if c == "=":
                    current = TokenType.NE
                else:
                    self._unget_char()
                    save = False
                    current = TokenType.ERROR
            elif state is _State.IN_OVER:
                if c == "*":
                    lexeme.clear()
                    save = False
                    state = _State.IN_COMMENT
                else:
                    self._unget_char()
                    state = _State.DONE
                    current = TokenType.OVER
            elif state in (_State.IN_ASSIGN, _State.IN_LT, _State.IN_GT):
                pair = {
                    _State.IN_ASSIGN: (TokenType.EQ, TokenType.ASSIGN),
                    _State.IN_LT: (TokenType.LE, TokenType.LT),
                    _State.IN_GT: (TokenType.GE, TokenType.GT),
                }[state]
                state = _State.DONE
                if c == "=":
                    current = pair[0]
                else:
                    self._unget_char()
                    current = pair[1]
            elif state is _State.IN_COMMENT:
                save = False
                if c is None:
                    state = _State.DONE
                    current = TokenType.ENDFILE
                elif c == "*":
                    state = _State.IN_COMMENT_END
            elif state is _State.IN_COMMENT_END:
                save = False
                if c is None:
                    state = _State.DONE
                    current = TokenType.ENDFILE
                elif c == "/":
                    state = _State.START
                elif c != "*":
                    state = _State.IN_COMMENT
            if save and c is not None and len(lexeme) <= MAXTOKENLEN:
                lexeme.append(c)
        text = "".join(lexeme)
        if current is TokenType.ID:
            current = _RESERVED.get(text, TokenType.ID)
        if self.trace_scan:
            self.listing.write(f"\t{self.lineno}: {token_text(current, text)}\n")
        return Token(current, text, self.lineno)

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to and including the end-of-file token."""
        while True:
            token = self.get_token()
            yield token
            if token.type is TokenType.ENDFILE:
                return


def tokenize(text: str) -> list[Token]:
    """Scan a whole source string into a list of tokens ending with ENDFILE."""
    return list(Scanner(io.StringIO(text)))