"""
Static name resolution for the Lako Programming Language

Runs between parsing and execution and records, for every local variable,
'this' and 'super' reference, how many scopes out its binding lives. Names
not found in any enclosing local scope are globals and stay late-bound.
"""

import logging
from typing import Dict, List
from ast_nodes import *

logger = logging.getLogger("lako.resolver")
logger.addHandler(logging.NullHandler())

class Resolver:
    """Mirrors the interpreter's scope layout without evaluating anything.

    Every scope the interpreter creates (block, call, bound method, the
    'super' scope of a subclass) is pushed here in the same order, so a
    distance computed now names the same environment at run time.
    """

    def __init__(self, interpreter):
        self.interpreter = interpreter
        self.scopes: List[Dict[str, bool]] = []
        self.resolved = 0

    def resolve(self, statements: List[Statement]):
        for statement in statements:
            self.resolve_statement(statement)
        logger.debug("resolved %d local reference(s)", self.resolved)

    def resolve_statement(self, stmt: Statement):
        if isinstance(stmt, (ExpressionStatement, PrintStatement)):
            self.resolve_expression(stmt.expression)
        elif isinstance(stmt, VarStatement):
            # The initializer is resolved before the name exists, so
            # 'var a = a;' in a block reads the enclosing 'a'
            if stmt.initializer is not None:
                self.resolve_expression(stmt.initializer)
            self.declare(stmt.name)
        elif isinstance(stmt, BlockStatement):
            self.begin_scope()
            self.resolve(stmt.statements)
            self.end_scope()
        elif isinstance(stmt, IfStatement):
            self.resolve_expression(stmt.condition)
            self.resolve_statement(stmt.then_branch)
            if stmt.else_branch is not None:
                self.resolve_statement(stmt.else_branch)
        elif isinstance(stmt, WhileStatement):
            self.resolve_expression(stmt.condition)
            self.resolve_statement(stmt.body)
        elif isinstance(stmt, FunctionStatement):
            self.declare(stmt.name)
            self.resolve_function(stmt)
        elif isinstance(stmt, ReturnStatement):
            if stmt.value is not None:
                self.resolve_expression(stmt.value)
        elif isinstance(stmt, ClassStatement):
            self.resolve_class(stmt)
        else:
            raise ValueError(f"Unknown statement type: {type(stmt).__name__}")

    def resolve_class(self, stmt: ClassStatement):
        self.declare(stmt.name)

        if stmt.superclass is not None:
            self.resolve_expression(stmt.superclass)
            self.begin_scope()
            self.declare("super")

        # Scope created by LakoFunction.bind
        self.begin_scope()
        self.declare("this")
        for method in stmt.methods:
            self.resolve_function(method)
        self.end_scope()

        if stmt.superclass is not None:
            self.end_scope()

    def resolve_function(self, function: FunctionStatement):
        """Parameters and body share the one scope a call creates"""
        self.begin_scope()
        for param in function.params:
            self.declare(param)
        self.resolve(function.body)
        self.end_scope()

    def resolve_expression(self, expr: Expression):
        if isinstance(expr, LiteralExpression):
            return
        elif isinstance(expr, VariableExpression):
            self.resolve_local(expr, expr.name)
        elif isinstance(expr, AssignmentExpression):
            self.resolve_expression(expr.value)
            self.resolve_local(expr, expr.name)
        elif isinstance(expr, UnaryExpression):
            self.resolve_expression(expr.operand)
        elif isinstance(expr, (BinaryExpression, LogicalExpression)):
            self.resolve_expression(expr.left)
            self.resolve_expression(expr.right)
        elif isinstance(expr, GroupingExpression):
            self.resolve_expression(expr.expression)
        elif isinstance(expr, CallExpression):
            self.resolve_expression(expr.callee)
            for argument in expr.arguments:
                self.resolve_expression(argument)
        elif isinstance(expr, GetExpression):
            self.resolve_expression(expr.object)
        elif isinstance(expr, SetExpression):
            self.resolve_expression(expr.object)
            self.resolve_expression(expr.value)
        elif isinstance(expr, ThisExpression):
            self.resolve_local(expr, "this")
        elif isinstance(expr, SuperExpression):
            self.resolve_local(expr, "super")
        else:
            raise ValueError(f"Unknown expression type: {type(expr).__name__}")

    def resolve_local(self, expr: Expression, name: str):
        for distance, scope in enumerate(reversed(self.scopes)):
            if name in scope:
                self.interpreter.resolve(expr, distance)
                self.resolved += 1
                return
        # Not found locally: global

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name: str):
        # Global declarations are looked up dynamically
        if self.scopes:
            self.scopes[-1][name] = True
