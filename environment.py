"""
Environment and scoping system for the Lako Programming Language
"""

from typing import Any, Dict, Optional
from errors import UndefinedVariableError
from source_map import Span

class Environment:
    """One scope's bindings plus a link to the enclosing scope.

    Closures keep their defining environment (and therefore its whole parent
    chain) alive simply by referencing it; nothing ever points from a parent
    back to a child.
    """

    def __init__(self, enclosing: Optional['Environment'] = None):
        self.enclosing = enclosing
        self.values: Dict[str, Any] = {}

    def define(self, name: str, value: Any):
        """Bind a name in this scope, shadowing any outer binding"""
        self.values[name] = value

    def get(self, name: str, line: int = 0, span: Optional[Span] = None) -> Any:
        """Look a name up, walking outward through enclosing scopes"""
        environment = self
        while environment is not None:
            if name in environment.values:
                return environment.values[name]
            environment = environment.enclosing

        raise UndefinedVariableError.undefined_variable(name, line, span)

    def assign(self, name: str, value: Any, line: int = 0, span: Optional[Span] = None):
        """Rebind the nearest existing declaration; never creates one"""
        environment = self
        while environment is not None:
            if name in environment.values:
                environment.values[name] = value
                return
            environment = environment.enclosing

        raise UndefinedVariableError.undefined_variable(name, line, span)

    def is_defined(self, name: str) -> bool:
        """Whether this scope itself (not an ancestor) binds the name"""
        return name in self.values

    def ancestor(self, distance: int) -> 'Environment':
        """The scope ``distance`` links out; 0 is this scope"""
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance: int, name: str) -> Any:
        """Read a name the resolver placed exactly ``distance`` scopes out"""
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: str, value: Any):
        self.ancestor(distance).values[name] = value
