"""Tests for the scanner."""

from scanner import Scanner
from tokens import TokenType


def types(source: str) -> list[TokenType]:
    return [token.type for token in Scanner(source).tokenize()]


def test_empty_source_yields_only_eof():
    tokens = Scanner("").tokenize()
    assert len(tokens) == 1
    assert tokens[0].type == TokenType.EOF
    assert tokens[0].lexeme == ""
    assert tokens[0].line == 1


def test_single_and_double_character_operators():
    assert types("( ) { } , . - + ; * / ! != = == < <= > >=") == [
        TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN,
        TokenType.LEFT_BRACE, TokenType.RIGHT_BRACE,
        TokenType.COMMA, TokenType.DOT, TokenType.MINUS, TokenType.PLUS,
        TokenType.SEMICOLON, TokenType.STAR, TokenType.SLASH,
        TokenType.BANG, TokenType.BANG_EQUAL,
        TokenType.EQUAL, TokenType.EQUAL_EQUAL,
        TokenType.LESS, TokenType.LESS_EQUAL,
        TokenType.GREATER, TokenType.GREATER_EQUAL,
        TokenType.EOF,
    ]


def test_longest_match_without_spaces():
    assert types("!==") == [TokenType.BANG_EQUAL, TokenType.EQUAL, TokenType.EOF]


def test_keywords_and_identifiers():
    tokens = Scanner("var orchid = nil; fun and_then").tokenize()
    assert [t.type for t in tokens] == [
        TokenType.VAR, TokenType.IDENTIFIER, TokenType.EQUAL, TokenType.NIL,
        TokenType.SEMICOLON, TokenType.FUN, TokenType.IDENTIFIER, TokenType.EOF,
    ]
    assert tokens[1].lexeme == "orchid"
    assert tokens[6].lexeme == "and_then"
    assert tokens[0].kind == "keyword"
    assert tokens[1].kind == "identifier"


def test_numbers_are_floats():
    tokens = Scanner("12 3.5 7.").tokenize()
    assert tokens[0].literal == 12.0
    assert isinstance(tokens[0].literal, float)
    assert tokens[1].literal == 3.5
    # A trailing dot is not part of the number
    assert tokens[2].literal == 7.0
    assert tokens[3].type == TokenType.DOT


def test_string_literal_has_no_quotes_or_escapes():
    tokens = Scanner('"a\\nb"').tokenize()
    assert tokens[0].type == TokenType.STRING
    assert tokens[0].literal == "a\\nb"
    assert tokens[0].lexeme == '"a\\nb"'


def test_multiline_string_keeps_start_line_and_counts_lines():
    tokens = Scanner('"one\ntwo"\nx').tokenize()
    assert tokens[0].literal == "one\ntwo"
    assert tokens[0].line == 1
    assert tokens[1].lexeme == "x"
    assert tokens[1].line == 3


def test_comments_are_skipped():
    tokens = Scanner("// nothing here\nprint 1; // trailing").tokenize()
    assert [t.type for t in tokens] == [
        TokenType.PRINT, TokenType.NUMBER, TokenType.SEMICOLON, TokenType.EOF,
    ]
    assert tokens[0].line == 2


def test_columns():
    tokens = Scanner("var x;\n  y").tokenize()
    assert (tokens[1].line, tokens[1].column) == (1, 5)
    assert (tokens[3].line, tokens[3].column) == (2, 3)


def test_unexpected_character_is_reported_and_scanning_continues():
    scanner = Scanner("1 @ 2 #")
    tokens = scanner.tokenize()
    assert [t.type for t in tokens] == [TokenType.NUMBER, TokenType.NUMBER, TokenType.EOF]
    assert len(scanner.errors) == 2
    assert scanner.errors[0].diagnostic.message == "Unexpected character '@'."
    assert scanner.errors[0].diagnostic.code == "LAK1001"


def test_unterminated_string():
    scanner = Scanner('print "oops')
    tokens = scanner.tokenize()
    assert [t.type for t in tokens] == [TokenType.PRINT, TokenType.EOF]
    assert [e.diagnostic.message for e in scanner.errors] == ["Unterminated string."]


def test_scan_tokens_is_lazy():
    stream = Scanner("a b c").scan_tokens()
    assert next(stream).lexeme == "a"
    assert next(stream).lexeme == "b"


def test_rescanning_clears_previous_errors():
    scanner = Scanner("@")
    scanner.tokenize()
    scanner.tokenize()
    assert len(scanner.errors) == 1
