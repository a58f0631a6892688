"""
Scanner for the Lako Programming Language
Converts source code into a lazy stream of tokens
"""

import logging
from typing import Iterator, List, Optional
from tokens import Token, TokenType, KEYWORDS
from errors import LexError
from source_map import SourceMap, Span, get_source_map

logger = logging.getLogger("lako.scanner")
logger.addHandler(logging.NullHandler())

class Scanner:
    def __init__(self, source: str, file_path: str = "<string>",
                 source_map: Optional[SourceMap] = None):
        self.source = source
        self.file_path = file_path
        self.errors: List[LexError] = []

        # Register file with source map
        if source_map is None:
            source_map = get_source_map()
        self.file_id = source_map.add_file(file_path, source)
        self._reset()

    def _reset(self):
        self.current = 0
        self.start = 0  # Start of current token
        self.line = 1
        self.line_start = 0  # Offset of the first character of the current line
        self._pending: List[Token] = []

    def scan_tokens(self) -> Iterator[Token]:
        """Lazily yield tokens, ending with EOF.

        Every call starts again from the beginning of the source and clears
        the errors of the previous pass.
        """
        self._reset()
        self.errors = []
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()
            while self._pending:
                yield self._pending.pop(0)

        logger.debug("scanned %s with %d lexical error(s)", self.file_path, len(self.errors))
        yield Token(TokenType.EOF, "", None, self.line, self.current - self.line_start + 1,
                    Span(self.file_id, self.current, self.current))

    def tokenize(self) -> List[Token]:
        """Scan the whole source and return the tokens as a list"""
        return list(self.scan_tokens())

    def is_at_end(self) -> bool:
        """Check if we've reached the end of the source"""
        return self.current >= len(self.source)

    def scan_token(self):
        """Scan and create a token from current position"""
        c = self.advance()

        # Single-character tokens
        if c == '(':
            self.add_token(TokenType.LEFT_PAREN)
        elif c == ')':
            self.add_token(TokenType.RIGHT_PAREN)
        elif c == '{':
            self.add_token(TokenType.LEFT_BRACE)
        elif c == '}':
            self.add_token(TokenType.RIGHT_BRACE)
        elif c == ',':
            self.add_token(TokenType.COMMA)
        elif c == '.':
            self.add_token(TokenType.DOT)
        elif c == '-':
            self.add_token(TokenType.MINUS)
        elif c == '+':
            self.add_token(TokenType.PLUS)
        elif c == ';':
            self.add_token(TokenType.SEMICOLON)
        elif c == '*':
            self.add_token(TokenType.STAR)

        # One or two character operators, longest match first
        elif c == '!':
            self.add_token(TokenType.BANG_EQUAL if self.match('=') else TokenType.BANG)
        elif c == '=':
            self.add_token(TokenType.EQUAL_EQUAL if self.match('=') else TokenType.EQUAL)
        elif c == '<':
            self.add_token(TokenType.LESS_EQUAL if self.match('=') else TokenType.LESS)
        elif c == '>':
            self.add_token(TokenType.GREATER_EQUAL if self.match('=') else TokenType.GREATER)
        elif c == '/':
            if self.match('/'):
                # Comment goes until the end of the line
                while self.peek() != '\n' and not self.is_at_end():
                    self.advance()
            else:
                self.add_token(TokenType.SLASH)

        # Whitespace
        elif c in (' ', '\r', '\t'):
            pass
        elif c == '\n':
            self.newline()

        # String literals
        elif c == '"':
            self.string()

        # Numeric literals
        elif self.is_digit(c):
            self.number()

        # Identifiers and keywords
        elif self.is_alpha(c):
            self.identifier()

        else:
            self.errors.append(LexError.unexpected_character(self.line, self.create_span(), c))

    def advance(self) -> str:
        """Consume and return the current character"""
        char = self.source[self.current]
        self.current += 1
        return char

    def match(self, expected: str) -> bool:
        """Check if current character matches expected, consume if so"""
        if self.is_at_end():
            return False
        if self.source[self.current] != expected:
            return False

        self.current += 1
        return True

    def peek(self) -> str:
        """Look at current character without consuming"""
        if self.is_at_end():
            return '\0'
        return self.source[self.current]

    def peek_next(self) -> str:
        """Look at next character without consuming"""
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def newline(self):
        self.line += 1
        self.line_start = self.current

    def string(self):
        """Handle string literals; no escape processing"""
        start_line = self.line
        start_column = self.start - self.line_start + 1

        while self.peek() != '"' and not self.is_at_end():
            if self.advance() == '\n':
                self.newline()

        if self.is_at_end():
            self.errors.append(LexError.unterminated_string(self.line, self.create_span()))
            return

        # Consume closing quote
        self.advance()

        value = self.source[self.start + 1:self.current - 1]
        self.add_token(TokenType.STRING, value, line=start_line, column=start_column)

    def number(self):
        """Handle numeric literals"""
        while self.is_digit(self.peek()):
            self.advance()

        # Look for a fractional part
        if self.peek() == '.' and self.is_digit(self.peek_next()):
            # Consume the '.'
            self.advance()

            while self.is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        """Handle identifiers and keywords"""
        while self.is_alpha(self.peek()) or self.is_digit(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    @staticmethod
    def is_digit(c: str) -> bool:
        return '0' <= c <= '9'

    @staticmethod
    def is_alpha(c: str) -> bool:
        return ('a' <= c <= 'z') or ('A' <= c <= 'Z') or c == '_'

    def add_token(self, token_type: TokenType, literal=None, line: Optional[int] = None,
                  column: Optional[int] = None):
        """Queue a token for the current lexeme"""
        text = self.source[self.start:self.current]
        if line is None:
            line = self.line
        if column is None:
            column = self.start - self.line_start + 1
        self._pending.append(Token(token_type, text, literal, line, column, self.create_span()))

    def create_span(self) -> Span:
        """Create a span for the current token"""
        return Span(self.file_id, self.start, self.current)
