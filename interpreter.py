"""
Main interpreter for the Lako Programming Language
"""

import logging
import sys
import time
from typing import Any, Callable, Dict, List, Optional, TextIO
from ast_nodes import *
from environment import Environment
from resolver import Resolver
from source_map import Span
from errors import (
    ArityMismatchError, DivisionByZeroError, LakoTypeError, NotCallableError,
    UndefinedPropertyError,
)
from values import (
    LakoCallable, LakoClass, LakoFunction, LakoInstance, NativeFunction,
    is_equal, is_truthy, stringify, type_name,
)

logger = logging.getLogger("lako.interpreter")
logger.addHandler(logging.NullHandler())

class ReturnException(Exception):
    """Control signal carrying a return value up to the nearest call frame"""
    def __init__(self, value):
        super().__init__()
        self.value = value

class Interpreter:
    """Walks the AST; owns the global scope and the output stream for print"""

    def __init__(self, output: Optional[TextIO] = None):
        self.output = output if output is not None else sys.stdout
        self.globals = Environment()
        self.environment = self.globals
        # Scope distance of every resolved local reference, keyed by node
        self.locals: Dict[Expression, int] = {}

        self.define_built_ins()

    def define_built_ins(self):
        """Define built-in functions"""
        self.define_native("clock", 0, time.time)

    def define_native(self, name: str, arity: int, function: Callable[..., Any]):
        if self.globals.is_defined(name):
            logger.debug("Overwriting builtin %s", name)
        self.globals.define(name, NativeFunction(name, arity, function))

    def interpret(self, program: Program):
        """Execute a program; runtime errors propagate as LakoRuntimeError"""
        Resolver(self).resolve(program.statements)
        for statement in program.statements:
            self.execute(statement)

    def resolve(self, expr: Expression, depth: int):
        self.locals[expr] = depth

    def execute(self, stmt: Statement):
        """Execute a statement based on its type"""
        if isinstance(stmt, ExpressionStatement):
            self.evaluate(stmt.expression)
        elif isinstance(stmt, PrintStatement):
            self.execute_print_statement(stmt)
        elif isinstance(stmt, VarStatement):
            self.execute_var_statement(stmt)
        elif isinstance(stmt, BlockStatement):
            self.execute_block(stmt.statements, Environment(self.environment))
        elif isinstance(stmt, IfStatement):
            self.execute_if_statement(stmt)
        elif isinstance(stmt, WhileStatement):
            self.execute_while_statement(stmt)
        elif isinstance(stmt, FunctionStatement):
            self.execute_function_statement(stmt)
        elif isinstance(stmt, ReturnStatement):
            self.execute_return_statement(stmt)
        elif isinstance(stmt, ClassStatement):
            self.execute_class_statement(stmt)
        else:
            raise ValueError(f"Unknown statement type: {type(stmt).__name__}")

    def execute_print_statement(self, stmt: PrintStatement):
        value = self.evaluate(stmt.expression)
        self.output.write(stringify(value) + "\n")

    def execute_var_statement(self, stmt: VarStatement):
        """Execute variable declaration"""
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)

        self.environment.define(stmt.name, value)

    def execute_block(self, statements: List[Statement], environment: Environment):
        """Execute a list of statements in a given environment"""
        previous = self.environment
        try:
            self.environment = environment

            for statement in statements:
                self.execute(statement)
        finally:
            self.environment = previous

    def execute_if_statement(self, stmt: IfStatement):
        """Execute if statement"""
        if is_truthy(self.evaluate(stmt.condition)):
            self.execute(stmt.then_branch)
        elif stmt.else_branch is not None:
            self.execute(stmt.else_branch)

    def execute_while_statement(self, stmt: WhileStatement):
        """Execute while loop"""
        while is_truthy(self.evaluate(stmt.condition)):
            self.execute(stmt.body)

    def execute_function_statement(self, stmt: FunctionStatement):
        """Execute function declaration"""
        function = LakoFunction(stmt, self.environment)
        self.environment.define(stmt.name, function)

    def execute_return_statement(self, stmt: ReturnStatement):
        """Execute return statement"""
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)

        raise ReturnException(value)

    def execute_class_statement(self, stmt: ClassStatement):
        """Execute class declaration"""
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, LakoClass):
                raise LakoTypeError.invalid_superclass(
                    stmt.superclass.name, type_name(superclass),
                    stmt.superclass.line, stmt.superclass.span
                )

        self.environment.define(stmt.name, None)

        # Methods of a subclass close over a scope that binds 'super'
        method_environment = self.environment
        if superclass is not None:
            method_environment = Environment(self.environment)
            method_environment.define("super", superclass)

        methods = {}
        for method in stmt.methods:
            methods[method.name] = LakoFunction(method, method_environment, method.name == "init")

        klass = LakoClass(stmt.name, superclass, methods)
        self.environment.assign(stmt.name, klass, stmt.line, stmt.span)

    def evaluate(self, expr: Expression) -> Any:
        """Evaluate an expression based on its type"""
        if isinstance(expr, LiteralExpression):
            return expr.value
        elif isinstance(expr, VariableExpression):
            return self.look_up_variable(expr.name, expr)
        elif isinstance(expr, AssignmentExpression):
            value = self.evaluate(expr.value)
            distance = self.locals.get(expr)
            if distance is not None:
                self.environment.assign_at(distance, expr.name, value)
            else:
                self.globals.assign(expr.name, value, expr.line, expr.span)
            return value
        elif isinstance(expr, UnaryExpression):
            return self.evaluate_unary_expression(expr)
        elif isinstance(expr, BinaryExpression):
            return self.evaluate_binary_expression(expr)
        elif isinstance(expr, LogicalExpression):
            return self.evaluate_logical_expression(expr)
        elif isinstance(expr, GroupingExpression):
            return self.evaluate(expr.expression)
        elif isinstance(expr, CallExpression):
            return self.evaluate_call_expression(expr)
        elif isinstance(expr, GetExpression):
            return self.evaluate_get_expression(expr)
        elif isinstance(expr, SetExpression):
            return self.evaluate_set_expression(expr)
        elif isinstance(expr, ThisExpression):
            return self.look_up_variable("this", expr)
        elif isinstance(expr, SuperExpression):
            return self.evaluate_super_expression(expr)
        raise ValueError(f"Unknown expression type: {type(expr).__name__}")

    def evaluate_unary_expression(self, expr: UnaryExpression) -> Any:
        """Evaluate unary expression"""
        operand = self.evaluate(expr.operand)

        if expr.operator == "-":
            if not isinstance(operand, float):
                raise LakoTypeError.invalid_unary_operation(
                    expr.operator, type_name(operand), expr.line, expr.span
                )
            return -operand

        # '!'
        return not is_truthy(operand)

    def evaluate_binary_expression(self, expr: BinaryExpression) -> Any:
        """Evaluate binary expression with type-aware error reporting"""
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator

        if operator == "==":
            return is_equal(left, right)
        if operator == "!=":
            return not is_equal(left, right)

        if operator == "+":
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            self.operand_error(expr, left, right)

        if not (isinstance(left, float) and isinstance(right, float)):
            self.operand_error(expr, left, right)

        if operator == "-":
            return left - right
        elif operator == "*":
            return left * right
        elif operator == "/":
            if right == 0:
                raise DivisionByZeroError.division_by_zero(expr.line, expr.span)
            return left / right
        elif operator == ">":
            return left > right
        elif operator == ">=":
            return left >= right
        elif operator == "<":
            return left < right
        elif operator == "<=":
            return left <= right

        raise ValueError(f"Unknown binary operator: {operator}")

    def operand_error(self, expr: BinaryExpression, left: Any, right: Any):
        raise LakoTypeError.invalid_binary_operation(
            expr.operator, type_name(left), type_name(right), expr.line, expr.span
        )

    def evaluate_logical_expression(self, expr: LogicalExpression) -> Any:
        """Evaluate 'and' / 'or'; the result is the operand that decided it"""
        left = self.evaluate(expr.left)

        if expr.operator == "or":
            if is_truthy(left):
                return left
        else:
            if not is_truthy(left):
                return left

        return self.evaluate(expr.right)

    def evaluate_call_expression(self, expr: CallExpression) -> Any:
        """Evaluate function call"""
        callee = self.evaluate(expr.callee)

        arguments = []
        for argument in expr.arguments:
            arguments.append(self.evaluate(argument))

        if not isinstance(callee, LakoCallable):
            raise NotCallableError.not_callable(type_name(callee), expr.line, expr.span)

        if len(arguments) != callee.arity():
            raise ArityMismatchError.wrong_arity(
                callee.arity(), len(arguments), expr.line, expr.span,
                callee.name, self.declaration_span(callee)
            )

        return callee.call(self, arguments)

    def declaration_span(self, callee: LakoCallable) -> Optional[Span]:
        """Where the parameters of a user-defined callee are declared"""
        if isinstance(callee, LakoClass):
            callee = callee.find_method("init")
        if isinstance(callee, LakoFunction):
            return callee.declaration.span
        return None

    def evaluate_get_expression(self, expr: GetExpression) -> Any:
        """Evaluate property access"""
        obj = self.evaluate(expr.object)

        if isinstance(obj, LakoInstance):
            return obj.get(expr.name, expr.line, expr.span)

        raise LakoTypeError.not_an_instance(
            "Only instances have properties", type_name(obj), expr.line, expr.span
        )

    def evaluate_set_expression(self, expr: SetExpression) -> Any:
        """Evaluate property assignment"""
        obj = self.evaluate(expr.object)

        if not isinstance(obj, LakoInstance):
            raise LakoTypeError.not_an_instance(
                "Only instances have fields", type_name(obj), expr.line, expr.span
            )

        value = self.evaluate(expr.value)
        obj.set(expr.name, value)
        return value

    def evaluate_super_expression(self, expr: SuperExpression) -> Any:
        """Look a method up starting at the superclass of the defining class"""
        distance = self.locals[expr]
        superclass = self.environment.get_at(distance, "super")
        # The bound-method scope holding 'this' sits just inside the 'super' scope
        instance = self.environment.get_at(distance - 1, "this")

        method = superclass.find_method(expr.method)
        if method is None:
            raise UndefinedPropertyError.undefined_property(expr.method, expr.line, expr.span)

        return method.bind(instance)

    def look_up_variable(self, name: str, expr: Expression) -> Any:
        """Resolved locals by distance, everything else from globals"""
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name)
        return self.globals.get(name, expr.line, expr.span)
