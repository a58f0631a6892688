"""
Recursive descent parser for the Lako Programming Language
"""

import logging
from enum import Enum
from typing import Iterable, List, Optional
from tokens import Token, TokenType
from ast_nodes import *
from errors import ParseError

logger = logging.getLogger("lako.parser")
logger.addHandler(logging.NullHandler())

MAX_ARGUMENTS = 255

class FunctionKind(Enum):
    NONE = "none"
    FUNCTION = "function"
    METHOD = "method"
    INITIALIZER = "initializer"

class ClassKind(Enum):
    NONE = "none"
    CLASS = "class"
    SUBCLASS = "subclass"

class Parser:
    def __init__(self, tokens: Iterable[Token]):
        self.tokens = iter(tokens)
        self.errors: List[ParseError] = []
        self._current = next(self.tokens)
        self._previous = self._current
        self.function_kind = FunctionKind.NONE
        self.class_kind = ClassKind.NONE

    def parse(self) -> Program:
        """Parse tokens into an AST; syntax errors end up in self.errors"""
        statements = []
        while not self.is_at_end():
            stmt = self.declaration()
            if stmt:
                statements.append(stmt)

        logger.debug("parsed %d statement(s) with %d syntax error(s)", len(statements), len(self.errors))
        return Program(statements)

    def declaration(self) -> Optional[Statement]:
        """Parse declarations (class, fun, var) or fall back to a statement"""
        try:
            if self.match(TokenType.CLASS):
                return self.class_declaration()
            if self.match(TokenType.FUN):
                return self.function(FunctionKind.FUNCTION)
            if self.match(TokenType.VAR):
                return self.var_declaration()

            return self.statement()
        except ParseError as e:
            self.errors.append(e)
            self.synchronize()
            return None

    def class_declaration(self) -> ClassStatement:
        """Parse class declaration"""
        name = self.consume(TokenType.IDENTIFIER, "Expect class name")

        superclass = None
        if self.match(TokenType.LESS):
            parent = self.consume(TokenType.IDENTIFIER, "Expect superclass name")
            superclass = VariableExpression(parent.lexeme, parent)
            if parent.lexeme == name.lexeme:
                self.report(ParseError.misplaced_keyword(parent, "A class can't inherit from itself."))

        self.consume(TokenType.LEFT_BRACE, "Expect '{' before class body")

        enclosing_class = self.class_kind
        self.class_kind = ClassKind.SUBCLASS if superclass is not None else ClassKind.CLASS
        try:
            methods = []
            while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
                methods.append(self.function(FunctionKind.METHOD))
        finally:
            self.class_kind = enclosing_class

        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after class body")
        return ClassStatement(name.lexeme, superclass, methods, name)

    def function(self, kind: FunctionKind) -> FunctionStatement:
        """Parse a function or method: name, parameter list and body"""
        noun = kind.value
        name = self.consume(TokenType.IDENTIFIER, f"Expect {noun} name")
        if kind == FunctionKind.METHOD and name.lexeme == "init":
            kind = FunctionKind.INITIALIZER

        self.consume(TokenType.LEFT_PAREN, f"Expect '(' after {noun} name")
        params = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self.report(ParseError.too_many_parameters(self.peek()))
                params.append(self.consume(TokenType.IDENTIFIER, "Expect parameter name").lexeme)
                if not self.match(TokenType.COMMA):
                    break
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters")

        self.consume(TokenType.LEFT_BRACE, f"Expect '{{' before {noun} body")
        enclosing_function = self.function_kind
        self.function_kind = kind
        try:
            body = self.block()
        finally:
            self.function_kind = enclosing_function

        return FunctionStatement(name.lexeme, params, body, name)

    def var_declaration(self) -> VarStatement:
        """Parse variable declaration"""
        name = self.consume(TokenType.IDENTIFIER, "Expect variable name")

        initializer = None
        if self.match(TokenType.EQUAL):
            initializer = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after variable declaration")
        return VarStatement(name.lexeme, initializer, name)

    def statement(self) -> Statement:
        """Parse statements"""
        if self.match(TokenType.FOR):
            return self.for_statement()
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.PRINT):
            return self.print_statement()
        if self.match(TokenType.RETURN):
            return self.return_statement()
        if self.match(TokenType.WHILE):
            return self.while_statement()
        if self.match(TokenType.LEFT_BRACE):
            brace = self.previous()
            return BlockStatement(self.block(), brace)

        return self.expression_statement()

    def for_statement(self) -> Statement:
        """Parse a C-style for loop and desugar it into a while loop"""
        keyword = self.previous()
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'")

        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TokenType.SEMICOLON):
            condition = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after loop condition")

        increment = None
        if not self.check(TokenType.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses")

        body = self.statement()

        if increment is not None:
            body = BlockStatement([body, ExpressionStatement(increment, increment.token)], keyword)
        if condition is None:
            condition = LiteralExpression(True, keyword)
        body = WhileStatement(condition, body, keyword)
        if initializer is not None:
            body = BlockStatement([initializer, body], keyword)

        return body

    def if_statement(self) -> IfStatement:
        """Parse if statement"""
        keyword = self.previous()
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition")

        then_branch = self.statement()
        else_branch = None
        if self.match(TokenType.ELSE):
            else_branch = self.statement()

        return IfStatement(condition, then_branch, else_branch, keyword)

    def print_statement(self) -> PrintStatement:
        keyword = self.previous()
        value = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after value")
        return PrintStatement(value, keyword)

    def return_statement(self) -> ReturnStatement:
        """Parse return statement"""
        keyword = self.previous()
        if self.function_kind == FunctionKind.NONE:
            self.report(ParseError.misplaced_keyword(keyword, "Can't return from top-level code."))

        value = None
        if not self.check(TokenType.SEMICOLON):
            if self.function_kind == FunctionKind.INITIALIZER:
                self.report(ParseError.misplaced_keyword(keyword, "Can't return a value from an initializer."))
            value = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after return value")
        return ReturnStatement(value, keyword)

    def while_statement(self) -> WhileStatement:
        """Parse while loop"""
        keyword = self.previous()
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after condition")
        body = self.statement()

        return WhileStatement(condition, body, keyword)

    def block(self) -> List[Statement]:
        """Parse the statements of a block; the '{' is already consumed"""
        statements = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            stmt = self.declaration()
            if stmt:
                statements.append(stmt)

        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after block")
        return statements

    def expression_statement(self) -> ExpressionStatement:
        """Parse expression statement"""
        expr = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after expression")
        return ExpressionStatement(expr, expr.token)

    def expression(self) -> Expression:
        """Parse expression"""
        return self.assignment()

    def assignment(self) -> Expression:
        """Parse assignment expression (right-associative)"""
        expr = self.logical_or()

        if self.match(TokenType.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, VariableExpression):
                return AssignmentExpression(expr.name, value, expr.token)
            elif isinstance(expr, GetExpression):
                return SetExpression(expr.object, expr.name, value, expr.token)

            # Report without unwinding; the parser is not confused
            self.report(ParseError.invalid_assignment_target(equals))

        return expr

    def logical_or(self) -> Expression:
        """Parse logical OR expression"""
        expr = self.logical_and()

        while self.match(TokenType.OR):
            operator = self.previous()
            right = self.logical_and()
            expr = LogicalExpression(expr, operator.lexeme, right, operator)

        return expr

    def logical_and(self) -> Expression:
        """Parse logical AND expression"""
        expr = self.equality()

        while self.match(TokenType.AND):
            operator = self.previous()
            right = self.equality()
            expr = LogicalExpression(expr, operator.lexeme, right, operator)

        return expr

    def equality(self) -> Expression:
        """Parse equality expression"""
        expr = self.comparison()

        while self.match(TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL):
            operator = self.previous()
            right = self.comparison()
            expr = BinaryExpression(expr, operator.lexeme, right, operator)

        return expr

    def comparison(self) -> Expression:
        """Parse comparison expression"""
        expr = self.term()

        while self.match(TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL):
            operator = self.previous()
            right = self.term()
            expr = BinaryExpression(expr, operator.lexeme, right, operator)

        return expr

    def term(self) -> Expression:
        """Parse addition and subtraction"""
        expr = self.factor()

        while self.match(TokenType.MINUS, TokenType.PLUS):
            operator = self.previous()
            right = self.factor()
            expr = BinaryExpression(expr, operator.lexeme, right, operator)

        return expr

    def factor(self) -> Expression:
        """Parse multiplication and division"""
        expr = self.unary()

        while self.match(TokenType.SLASH, TokenType.STAR):
            operator = self.previous()
            right = self.unary()
            expr = BinaryExpression(expr, operator.lexeme, right, operator)

        return expr

    def unary(self) -> Expression:
        """Parse unary expressions"""
        if self.match(TokenType.BANG, TokenType.MINUS):
            operator = self.previous()
            right = self.unary()
            return UnaryExpression(operator.lexeme, right, operator)

        return self.call()

    def call(self) -> Expression:
        """Parse function calls and property access"""
        expr = self.primary()

        while True:
            if self.match(TokenType.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(TokenType.DOT):
                name = self.consume(TokenType.IDENTIFIER, "Expect property name after '.'")
                expr = GetExpression(expr, name.lexeme, name)
            else:
                break

        return expr

    def finish_call(self, callee: Expression) -> CallExpression:
        """Parse function call arguments"""
        arguments = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self.report(ParseError.too_many_arguments(self.peek()))
                arguments.append(self.expression())
                if not self.match(TokenType.COMMA):
                    break

        paren = self.consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments")
        return CallExpression(callee, arguments, paren)

    def primary(self) -> Expression:
        """Parse primary expressions"""
        if self.match(TokenType.FALSE):
            return LiteralExpression(False, self.previous())
        if self.match(TokenType.TRUE):
            return LiteralExpression(True, self.previous())
        if self.match(TokenType.NIL):
            return LiteralExpression(None, self.previous())
        if self.match(TokenType.NUMBER, TokenType.STRING):
            token = self.previous()
            return LiteralExpression(token.literal, token)

        if self.match(TokenType.SUPER):
            keyword = self.previous()
            if self.class_kind == ClassKind.NONE:
                self.report(ParseError.misplaced_keyword(keyword, "Can't use 'super' outside of a class."))
            elif self.class_kind != ClassKind.SUBCLASS:
                self.report(ParseError.misplaced_keyword(keyword, "Can't use 'super' in a class with no superclass."))
            self.consume(TokenType.DOT, "Expect '.' after 'super'")
            method = self.consume(TokenType.IDENTIFIER, "Expect superclass method name")
            return SuperExpression(method.lexeme, keyword)

        if self.match(TokenType.THIS):
            keyword = self.previous()
            if self.class_kind == ClassKind.NONE:
                self.report(ParseError.misplaced_keyword(keyword, "Can't use 'this' outside of a class."))
            return ThisExpression(keyword)

        if self.match(TokenType.IDENTIFIER):
            token = self.previous()
            return VariableExpression(token.lexeme, token)

        if self.match(TokenType.LEFT_PAREN):
            paren = self.previous()
            expr = self.expression()
            self.consume(TokenType.RIGHT_PAREN, "Expect ')' after expression")
            return GroupingExpression(expr, paren)

        raise ParseError.expected_expression(self.peek())

    # Utility methods
    def report(self, error: ParseError):
        """Record an error that does not need synchronization"""
        self.errors.append(error)

    def match(self, *types: TokenType) -> bool:
        """Check if current token matches any of the given types"""
        for token_type in types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def check(self, token_type: TokenType) -> bool:
        """Check if current token is of given type"""
        if self.is_at_end():
            return False
        return self.peek().type == token_type

    def advance(self) -> Token:
        """Consume current token and return it"""
        if not self.is_at_end():
            self._previous = self._current
            self._current = next(self.tokens)
        return self.previous()

    def is_at_end(self) -> bool:
        """Check if we've reached the end of tokens"""
        return self.peek().type == TokenType.EOF

    def peek(self) -> Token:
        """Return current token without advancing"""
        return self._current

    def previous(self) -> Token:
        """Return previous token"""
        return self._previous

    def consume(self, token_type: TokenType, message: str) -> Token:
        """Consume token of expected type or raise error"""
        if self.check(token_type):
            return self.advance()

        raise ParseError.expected_token(self.peek(), message)

    def synchronize(self):
        """Recover from parse error by skipping to the next statement boundary"""
        self.advance()

        while not self.is_at_end():
            if self.previous().type == TokenType.SEMICOLON:
                return

            if self.peek().type in (TokenType.CLASS, TokenType.FUN, TokenType.VAR,
                                    TokenType.FOR, TokenType.IF, TokenType.WHILE,
                                    TokenType.PRINT, TokenType.RETURN):
                return

            self.advance()
