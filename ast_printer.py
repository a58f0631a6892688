"""
Parenthesised prefix rendering of Lako syntax trees
"""

from ast_nodes import *
from values import stringify

class AstPrinter:
    """Renders nodes as ``(op operand ...)``; handy for checking precedence"""

    def print(self, node: ASTNode) -> str:
        if isinstance(node, Program):
            return "\n".join(self.print(statement) for statement in node.statements)
        if isinstance(node, Expression):
            return self.print_expression(node)
        return self.print_statement(node)

    def print_expression(self, expr: Expression) -> str:
        if isinstance(expr, LiteralExpression):
            if isinstance(expr.value, str):
                return f'"{expr.value}"'
            return stringify(expr.value)
        elif isinstance(expr, VariableExpression):
            return expr.name
        elif isinstance(expr, AssignmentExpression):
            return self.parenthesize(f"= {expr.name}", expr.value)
        elif isinstance(expr, UnaryExpression):
            return self.parenthesize(expr.operator, expr.operand)
        elif isinstance(expr, (BinaryExpression, LogicalExpression)):
            return self.parenthesize(expr.operator, expr.left, expr.right)
        elif isinstance(expr, GroupingExpression):
            return self.parenthesize("group", expr.expression)
        elif isinstance(expr, CallExpression):
            return self.parenthesize("call", expr.callee, *expr.arguments)
        elif isinstance(expr, GetExpression):
            return self.parenthesize(f". {expr.name}", expr.object)
        elif isinstance(expr, SetExpression):
            return self.parenthesize(f".= {expr.name}", expr.object, expr.value)
        elif isinstance(expr, ThisExpression):
            return "this"
        elif isinstance(expr, SuperExpression):
            return f"(super {expr.method})"
        raise ValueError(f"Unknown expression type: {type(expr).__name__}")

    def print_statement(self, stmt: Statement) -> str:
        if isinstance(stmt, ExpressionStatement):
            return self.parenthesize(";", stmt.expression)
        elif isinstance(stmt, PrintStatement):
            return self.parenthesize("print", stmt.expression)
        elif isinstance(stmt, VarStatement):
            if stmt.initializer is None:
                return f"(var {stmt.name})"
            return self.parenthesize(f"var {stmt.name}", stmt.initializer)
        elif isinstance(stmt, BlockStatement):
            return self.parenthesize("block", *stmt.statements)
        elif isinstance(stmt, IfStatement):
            if stmt.else_branch is None:
                return self.parenthesize("if", stmt.condition, stmt.then_branch)
            return self.parenthesize("if-else", stmt.condition, stmt.then_branch, stmt.else_branch)
        elif isinstance(stmt, WhileStatement):
            return self.parenthesize("while", stmt.condition, stmt.body)
        elif isinstance(stmt, FunctionStatement):
            params = " ".join(stmt.params)
            return self.parenthesize(f"fun {stmt.name}({params})", *stmt.body)
        elif isinstance(stmt, ReturnStatement):
            if stmt.value is None:
                return "(return)"
            return self.parenthesize("return", stmt.value)
        elif isinstance(stmt, ClassStatement):
            head = f"class {stmt.name}"
            if stmt.superclass is not None:
                head += f" < {stmt.superclass.name}"
            return self.parenthesize(head, *stmt.methods)
        raise ValueError(f"Unknown statement type: {type(stmt).__name__}")

    def parenthesize(self, name: str, *nodes: ASTNode) -> str:
        parts = [name] + [self.print(node) for node in nodes]
        return "(" + " ".join(parts) + ")"
