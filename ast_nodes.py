"""
Abstract Syntax Tree node definitions for the Lako Programming Language
"""

from abc import ABC
from typing import Any, List, Optional
from source_map import Span
from tokens import Token

# Base classes
class ASTNode(ABC):
    """Base class for all AST nodes.

    ``token`` is the anchor used for diagnostics: the operator of a binary
    expression, the name of a variable, the closing paren of a call, ...
    """
    def __init__(self, token: Optional[Token] = None):
        self.token = token

    @property
    def line(self) -> int:
        return self.token.line if self.token is not None else 0

    @property
    def span(self) -> Optional[Span]:
        return self.token.span if self.token is not None else None

class Expression(ASTNode):
    """Base class for all expressions"""

class Statement(ASTNode):
    """Base class for all statements"""

# Expressions
class LiteralExpression(Expression):
    def __init__(self, value: Any, token: Optional[Token] = None):
        super().__init__(token)
        self.value = value

class VariableExpression(Expression):
    def __init__(self, name: str, token: Optional[Token] = None):
        super().__init__(token)
        self.name = name

class AssignmentExpression(Expression):
    def __init__(self, name: str, value: Expression, token: Optional[Token] = None):
        super().__init__(token)
        self.name = name
        self.value = value

class UnaryExpression(Expression):
    def __init__(self, operator: str, operand: Expression, token: Optional[Token] = None):
        super().__init__(token)
        self.operator = operator
        self.operand = operand

class BinaryExpression(Expression):
    def __init__(self, left: Expression, operator: str, right: Expression, token: Optional[Token] = None):
        super().__init__(token)
        self.left = left
        self.operator = operator
        self.right = right

class LogicalExpression(Expression):
    """'and' / 'or', evaluated with short-circuiting"""
    def __init__(self, left: Expression, operator: str, right: Expression, token: Optional[Token] = None):
        super().__init__(token)
        self.left = left
        self.operator = operator
        self.right = right

class GroupingExpression(Expression):
    def __init__(self, expression: Expression, token: Optional[Token] = None):
        super().__init__(token)
        self.expression = expression

class CallExpression(Expression):
    def __init__(self, callee: Expression, arguments: List[Expression], token: Optional[Token] = None):
        super().__init__(token)
        self.callee = callee
        self.arguments = arguments

class GetExpression(Expression):
    """For accessing object properties (obj.prop)"""
    def __init__(self, object: Expression, name: str, token: Optional[Token] = None):
        super().__init__(token)
        self.object = object
        self.name = name

class SetExpression(Expression):
    """For setting object properties (obj.prop = value)"""
    def __init__(self, object: Expression, name: str, value: Expression, token: Optional[Token] = None):
        super().__init__(token)
        self.object = object
        self.name = name
        self.value = value

class ThisExpression(Expression):
    """'this' keyword for accessing the receiver of the running method"""

class SuperExpression(Expression):
    """'super.method' lookup starting above the defining class"""
    def __init__(self, method: str, token: Optional[Token] = None):
        super().__init__(token)
        self.method = method

# Statements
class ExpressionStatement(Statement):
    def __init__(self, expression: Expression, token: Optional[Token] = None):
        super().__init__(token)
        self.expression = expression

class PrintStatement(Statement):
    def __init__(self, expression: Expression, token: Optional[Token] = None):
        super().__init__(token)
        self.expression = expression

class VarStatement(Statement):
    def __init__(self, name: str, initializer: Optional[Expression], token: Optional[Token] = None):
        super().__init__(token)
        self.name = name
        self.initializer = initializer

class BlockStatement(Statement):
    def __init__(self, statements: List[Statement], token: Optional[Token] = None):
        super().__init__(token)
        self.statements = statements

class IfStatement(Statement):
    def __init__(self, condition: Expression, then_branch: Statement,
                 else_branch: Optional[Statement] = None, token: Optional[Token] = None):
        super().__init__(token)
        self.condition = condition
        self.then_branch = then_branch
        self.else_branch = else_branch

class WhileStatement(Statement):
    """Also produced by desugaring 'for' loops"""
    def __init__(self, condition: Expression, body: Statement, token: Optional[Token] = None):
        super().__init__(token)
        self.condition = condition
        self.body = body

class FunctionStatement(Statement):
    def __init__(self, name: str, params: List[str], body: List[Statement], token: Optional[Token] = None):
        super().__init__(token)
        self.name = name
        self.params = params
        self.body = body

class ReturnStatement(Statement):
    def __init__(self, value: Optional[Expression], token: Optional[Token] = None):
        super().__init__(token)
        self.value = value

class ClassStatement(Statement):
    def __init__(self, name: str, superclass: Optional[VariableExpression],
                 methods: List[FunctionStatement], token: Optional[Token] = None):
        super().__init__(token)
        self.name = name
        self.superclass = superclass
        self.methods = methods

class Program(ASTNode):
    """Root node containing all statements"""
    def __init__(self, statements: List[Statement]):
        super().__init__()
        self.statements = statements
