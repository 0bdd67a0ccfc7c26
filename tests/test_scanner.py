import io

import pytest

from cminus.scanner import MAXTOKENLEN, Scanner, Token, tokenize
from cminus.syntax import TokenType


def types(text):
    return [t.type for t in tokenize(text)]


def test_declaration_tokens():
    tokens = tokenize("int x;")
    assert [t.type for t in tokens] == [
        TokenType.INT,
        TokenType.ID,
        TokenType.SEMI,
        TokenType.ENDFILE,
    ]
    assert [t.lexeme for t in tokens[:3]] == ["int", "x", ";"]


@pytest.mark.parametrize(
    "text, token",
    [
        ("<=", TokenType.LE),
        ("<", TokenType.LT),
        (">=", TokenType.GE),
        (">", TokenType.GT),
        ("==", TokenType.EQ),
        ("=", TokenType.ASSIGN),
        ("!=", TokenType.NE),
        ("!", TokenType.ERROR),
        ("/", TokenType.OVER),
        ("@", TokenType.ERROR),
        ("[", TokenType.LBRACE),
        ("}", TokenType.RCURLY),
    ],
)
def test_operators(text, token):
    assert types(text)[0] is token


def test_number_then_identifier():
    tokens = tokenize("12ab")
    assert [(t.type, t.lexeme) for t in tokens[:2]] == [
        (TokenType.NUM, "12"),
        (TokenType.ID, "ab"),
    ]


def test_comment_is_skipped():
    assert types("a /* skip ** this */ b") == [
        TokenType.ID,
        TokenType.ID,
        TokenType.ENDFILE,
    ]
    assert tokenize("/* c */ b")[0].lexeme == "b"


def test_unterminated_comment_ends_file():
    assert types("x /* never closed") == [TokenType.ID, TokenType.ENDFILE]


def test_line_numbers():
    tokens = tokenize("a\n\nb\n")
    assert tokens[0].lineno == 1
    assert tokens[1].lineno == 3


def test_nul_character_ends_input():
    assert types("a \0 b")[:2] == [TokenType.ID, TokenType.ENDFILE]


def test_long_identifier_is_truncated():
    name = "a" * (MAXTOKENLEN * 2)
    token = tokenize(name)[0]
    assert token.type is TokenType.ID
    assert len(token.lexeme) <= MAXTOKENLEN + 1
    assert name.startswith(token.lexeme)


def test_iteration_stops_after_endfile():
    tokens = tokenize("x y")
    assert tokens[-1].type is TokenType.ENDFILE
    assert sum(t.type is TokenType.ENDFILE for t in tokens) == 1


def test_empty_source():
    assert types("") == [TokenType.ENDFILE]


def test_echo_source():
    out = io.StringIO()
    scanner = Scanner(io.StringIO("int x;\n"), listing=out, echo_source=True)
    list(scanner)
    assert out.getvalue().startswith("   1: int x;\n")


def test_trace_scan():
    out = io.StringIO()
    scanner = Scanner(io.StringIO("int x"), listing=out, trace_scan=True)
    list(scanner)
    text = out.getvalue()
    assert "\t1: reserved word: int\n" in text
    assert "ID, name= x\n" in text
    assert text.endswith("EOF\n")


def test_get_token_sequence_matches_tokenize():
    scanner = Scanner(io.StringIO("f(a, b[2]);"))
    collected = [scanner.get_token() for _ in range(len(tokenize("f(a, b[2]);")))]
    assert collected == tokenize("f(a, b[2]);")