"""
Error handling for the Lako Programming Language
Includes diagnostics, error codes, and the exception hierarchy for every phase
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional, Any, Dict
from source_map import Span

class Phase(Enum):
    """Pipeline phase that produced a diagnostic"""
    LEXICAL = "lexical"
    SYNTAX = "syntax"
    RUNTIME = "runtime"

class Severity(Enum):
    """Every Lako diagnostic stops the run, so errors are the only level"""
    ERROR = "error"

@dataclass
class LabeledSpan:
    """A span with an optional label"""
    span: Span
    label: Optional[str] = None
    is_primary: bool = False

class ErrorCode:
    """Error code constants"""
    # Lexical errors (LAK1xxx)
    UNEXPECTED_CHARACTER = "LAK1001"
    UNTERMINATED_STRING = "LAK1002"

    # Syntax errors (LAK2xxx)
    EXPECTED_TOKEN = "LAK2001"
    EXPECTED_EXPRESSION = "LAK2002"
    INVALID_ASSIGNMENT_TARGET = "LAK2003"
    TOO_MANY_ARGUMENTS = "LAK2004"
    TOO_MANY_PARAMETERS = "LAK2005"
    MISPLACED_KEYWORD = "LAK2006"

    # Runtime type errors (LAK3xxx)
    OPERAND_TYPE = "LAK3001"
    NOT_CALLABLE = "LAK3002"
    WRONG_ARITY = "LAK3003"
    INVALID_SUPERCLASS = "LAK3004"
    NOT_AN_INSTANCE = "LAK3005"
    DIVISION_BY_ZERO = "LAK3006"

    # Runtime name errors (LAK4xxx)
    UNDEFINED_VARIABLE = "LAK4001"
    UNDEFINED_PROPERTY = "LAK4002"

@dataclass
class Diagnostic:
    """A single reported problem, tagged with the phase that found it"""
    code: str
    severity: Severity
    phase: Phase
    message: str
    line: int
    labels: List[LabeledSpan] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)
    help: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Ensure exactly one primary label
        found_primary = False
        for label in self.labels:
            if label.is_primary and found_primary:
                label.is_primary = False
            elif label.is_primary:
                found_primary = True
        if not found_primary and self.labels:
            self.labels[0].is_primary = True

    def primary_span(self) -> Optional[Span]:
        """Get the primary span for this diagnostic"""
        for label in self.labels:
            if label.is_primary:
                return label.span
        return None

    def to_json(self):
        """Convert diagnostic to JSON-serializable format"""
        return {
            'code': self.code,
            'severity': self.severity.value,
            'phase': self.phase.value,
            'message': self.message,
            'line': self.line,
            'labels': [{
                'span': {'start': label.span.start, 'end': label.span.end, 'file_id': label.span.file_id},
                'label': label.label,
                'is_primary': label.is_primary,
            } for label in self.labels],
            'notes': list(self.notes),
            'help': self.help,
            'data': dict(self.data),
        }

    def __str__(self) -> str:
        return (f"[line {self.line}] {self.phase.value.title()} {self.severity.value} "
                f"[{self.code}]: {self.message}")

def _labels(span: Optional[Span], label: str) -> List[LabeledSpan]:
    if span is None:
        return []
    return [LabeledSpan(span, label, is_primary=True)]

def _describe(token) -> str:
    """Describe where a syntax error happened"""
    if token.lexeme == "":
        return "end of input"
    return f"'{token.lexeme}'"

class LakoError(Exception):
    """Base exception class for all Lako errors with diagnostics support"""

    phase = Phase.RUNTIME

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(str(diagnostic))

    @property
    def line(self) -> int:
        return self.diagnostic.line

    @classmethod
    def from_simple(cls, code: str, message: str, line: int, span: Optional[Span] = None,
                    label: Optional[str] = None, help_text: Optional[str] = None, **data):
        """Create error from simple parameters"""
        diagnostic = Diagnostic(
            code=code,
            severity=Severity.ERROR,
            phase=cls.phase,
            message=message,
            line=line,
            labels=_labels(span, label or message),
            help=help_text,
            data=data,
        )
        return cls(diagnostic)

class LexError(LakoError):
    """Lexical analysis errors"""

    phase = Phase.LEXICAL

    @classmethod
    def unexpected_character(cls, line: int, span: Optional[Span], char: str):
        return cls.from_simple(
            ErrorCode.UNEXPECTED_CHARACTER,
            f"Unexpected character '{char}'.",
            line, span,
            label=f"unexpected character '{char}'",
            help_text="check for typos or unsupported characters",
            character=char,
        )

    @classmethod
    def unterminated_string(cls, line: int, span: Optional[Span]):
        return cls.from_simple(
            ErrorCode.UNTERMINATED_STRING,
            "Unterminated string.",
            line, span,
            label="string starts here",
            help_text="add a closing '\"' to terminate the string",
        )

class ParseError(LakoError):
    """Parser errors"""

    phase = Phase.SYNTAX

    @classmethod
    def expected_token(cls, token, message: str):
        return cls.from_simple(
            ErrorCode.EXPECTED_TOKEN,
            f"{message}, found {_describe(token)}.",
            token.line, token.span,
            label="unexpected token",
            found=token.lexeme,
        )

    @classmethod
    def expected_expression(cls, token):
        return cls.from_simple(
            ErrorCode.EXPECTED_EXPRESSION,
            f"Expect expression, found {_describe(token)}.",
            token.line, token.span,
            label="expected expression here",
            help_text="add a valid expression (variable, literal, or function call)",
            found=token.lexeme,
        )

    @classmethod
    def invalid_assignment_target(cls, token):
        return cls.from_simple(
            ErrorCode.INVALID_ASSIGNMENT_TARGET,
            "Invalid assignment target.",
            token.line, token.span,
            label="cannot assign to this expression",
            help_text="only variables and instance fields can be assigned to",
        )

    @classmethod
    def too_many_arguments(cls, token):
        return cls.from_simple(
            ErrorCode.TOO_MANY_ARGUMENTS,
            "Can't have more than 255 arguments.",
            token.line, token.span,
        )

    @classmethod
    def too_many_parameters(cls, token):
        return cls.from_simple(
            ErrorCode.TOO_MANY_PARAMETERS,
            "Can't have more than 255 parameters.",
            token.line, token.span,
        )

    @classmethod
    def misplaced_keyword(cls, token, message: str):
        return cls.from_simple(
            ErrorCode.MISPLACED_KEYWORD,
            message,
            token.line, token.span,
            label=f"'{token.lexeme}' not allowed here",
        )

class LakoRuntimeError(LakoError):
    """Errors raised while evaluating a program"""

    phase = Phase.RUNTIME

class UndefinedVariableError(LakoRuntimeError):
    """Lookup or assignment of a name no enclosing scope declares"""

    @classmethod
    def undefined_variable(cls, name: str, line: int, span: Optional[Span] = None):
        return cls.from_simple(
            ErrorCode.UNDEFINED_VARIABLE,
            f"Undefined variable '{name}'.",
            line, span,
            label=f"'{name}' not found",
            help_text=f"declare the variable with 'var {name} = value;' before using it",
            name=name,
        )

class LakoTypeError(LakoRuntimeError):
    """Operation applied to a value of the wrong variant"""

    @classmethod
    def invalid_binary_operation(cls, operator: str, left_type: str, right_type: str,
                                 line: int, span: Optional[Span] = None):
        if operator == "+":
            message = f"Operands of '+' must be two numbers or two strings, got {left_type} and {right_type}."
        else:
            message = f"Operands of '{operator}' must be numbers, got {left_type} and {right_type}."
        return cls.from_simple(
            ErrorCode.OPERAND_TYPE, message, line, span,
            label=f"{left_type} {operator} {right_type}",
            operator=operator, left=left_type, right=right_type,
        )

    @classmethod
    def invalid_unary_operation(cls, operator: str, operand_type: str,
                                line: int, span: Optional[Span] = None):
        return cls.from_simple(
            ErrorCode.OPERAND_TYPE,
            f"Operand of '{operator}' must be a number, got {operand_type}.",
            line, span,
            label=f"{operator}{operand_type}",
            operator=operator, operand=operand_type,
        )

    @classmethod
    def invalid_superclass(cls, name: str, actual_type: str, line: int, span: Optional[Span] = None):
        return cls.from_simple(
            ErrorCode.INVALID_SUPERCLASS,
            f"Superclass must be a class, '{name}' is a {actual_type}.",
            line, span,
            label="not a class",
            help_text="a class can only inherit from another class",
        )

    @classmethod
    def not_an_instance(cls, message: str, actual_type: str, line: int, span: Optional[Span] = None):
        return cls.from_simple(
            ErrorCode.NOT_AN_INSTANCE,
            f"{message}, got {actual_type}.",
            line, span,
        )

class DivisionByZeroError(LakoRuntimeError):
    """Numeric division with a zero divisor"""

    @classmethod
    def division_by_zero(cls, line: int, span: Optional[Span] = None):
        return cls.from_simple(
            ErrorCode.DIVISION_BY_ZERO,
            "Division by zero.",
            line, span,
            help_text="ensure the denominator is not zero before dividing",
        )

class ArityMismatchError(LakoRuntimeError):
    """Call with the wrong number of arguments"""

    @classmethod
    def wrong_arity(cls, expected: int, got: int, line: int, span: Optional[Span] = None,
                    callee: Optional[str] = None, declared_at: Optional[Span] = None):
        error = cls.from_simple(
            ErrorCode.WRONG_ARITY,
            f"Expected {expected} arguments but got {got}.",
            line, span,
            label=f"called with {got}",
            expected=expected, got=got,
        )
        diagnostic = error.diagnostic
        if callee is not None:
            noun = "parameter" if expected == 1 else "parameters"
            diagnostic.notes.append(f"'{callee}' takes {expected} {noun}")
        # A secondary label needs a primary one
        if span is not None and declared_at is not None:
            diagnostic.labels.append(LabeledSpan(declared_at, "declared here"))
        return error

class NotCallableError(LakoRuntimeError):
    """Call expression whose callee is not a function or class"""

    @classmethod
    def not_callable(cls, actual_type: str, line: int, span: Optional[Span] = None):
        return cls.from_simple(
            ErrorCode.NOT_CALLABLE,
            f"Can only call functions and classes, got {actual_type}.",
            line, span,
        )

class UndefinedPropertyError(LakoRuntimeError):
    """Property that is neither a field nor a method along the class chain"""

    @classmethod
    def undefined_property(cls, name: str, line: int, span: Optional[Span] = None):
        return cls.from_simple(
            ErrorCode.UNDEFINED_PROPERTY,
            f"Undefined property '{name}'.",
            line, span,
            name=name,
        )
