"""
Token definitions for the Lako Programming Language
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional
from source_map import Span

class TokenType(Enum):
    # Single-character tokens
    LEFT_PAREN = auto()     # (
    RIGHT_PAREN = auto()    # )
    LEFT_BRACE = auto()     # {
    RIGHT_BRACE = auto()    # }
    COMMA = auto()          # ,
    DOT = auto()            # .
    MINUS = auto()          # -
    PLUS = auto()           # +
    SEMICOLON = auto()      # ;
    SLASH = auto()          # /
    STAR = auto()           # *

    # One or two character tokens
    BANG = auto()           # !
    BANG_EQUAL = auto()     # !=
    EQUAL = auto()          # =
    EQUAL_EQUAL = auto()    # ==
    GREATER = auto()        # >
    GREATER_EQUAL = auto()  # >=
    LESS = auto()           # <
    LESS_EQUAL = auto()     # <=

    # Literals
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    # Keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FUN = auto()
    FOR = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    EOF = auto()

# Keywords mapping
KEYWORDS = {
    'and': TokenType.AND,
    'class': TokenType.CLASS,
    'else': TokenType.ELSE,
    'false': TokenType.FALSE,
    'fun': TokenType.FUN,
    'for': TokenType.FOR,
    'if': TokenType.IF,
    'nil': TokenType.NIL,
    'or': TokenType.OR,
    'print': TokenType.PRINT,
    'return': TokenType.RETURN,
    'super': TokenType.SUPER,
    'this': TokenType.THIS,
    'true': TokenType.TRUE,
    'var': TokenType.VAR,
    'while': TokenType.WHILE,
}

_PUNCTUATION = {
    TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN,
    TokenType.LEFT_BRACE, TokenType.RIGHT_BRACE,
    TokenType.COMMA, TokenType.DOT, TokenType.SEMICOLON,
}

@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str
    literal: Any = None
    line: int = 1
    column: int = 1
    span: Optional[Span] = None  # Source span for this token

    @property
    def kind(self) -> str:
        """Coarse token category: literal, identifier, keyword, operator, punctuation or eof"""
        if self.type == TokenType.EOF:
            return "eof"
        if self.type in (TokenType.NUMBER, TokenType.STRING):
            return "literal"
        if self.type == TokenType.IDENTIFIER:
            return "identifier"
        if self.lexeme in KEYWORDS:
            return "keyword"
        if self.type in _PUNCTUATION:
            return "punctuation"
        return "operator"

    def __repr__(self):
        if self.literal is not None:
            return f"Token({self.type.name}, '{self.lexeme}', {self.literal!r}, line={self.line})"
        return f"Token({self.type.name}, '{self.lexeme}', line={self.line})"
