"""
Runtime values for the Lako Programming Language

nil, booleans, numbers and strings are plain Python ``None``, ``bool``,
``float`` and ``str``; functions, classes and instances are the classes below.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional
from environment import Environment
from errors import UndefinedPropertyError
from source_map import Span

class LakoCallable(ABC):
    """Anything a call expression can invoke"""

    @abstractmethod
    def arity(self) -> int:
        """Return number of parameters this callable expects"""

    @abstractmethod
    def call(self, interpreter, arguments: List[Any]) -> Any:
        ...

class LakoFunction(LakoCallable):
    """User-defined function or method, closed over its defining environment"""

    def __init__(self, declaration, closure: Environment, is_initializer: bool = False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def name(self) -> str:
        return self.declaration.name

    def arity(self) -> int:
        return len(self.declaration.params)

    def bind(self, instance: 'LakoInstance') -> 'LakoFunction':
        """Return this method with 'this' bound to the given instance"""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LakoFunction(self.declaration, environment, self.is_initializer)

    def call(self, interpreter, arguments: List[Any]) -> Any:
        from interpreter import ReturnException  # Import here to avoid circular imports

        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param, argument)

        try:
            interpreter.execute_block(self.declaration.body, environment)
        except ReturnException as return_value:
            if self.is_initializer:
                return self.closure.get_at(0, "this")
            return return_value.value

        # An initializer always hands back the instance
        if self.is_initializer:
            return self.closure.get_at(0, "this")
        return None

    def __str__(self):
        return f"<fn {self.name}>"

class NativeFunction(LakoCallable):
    """Built-in function implemented in Python"""

    def __init__(self, name: str, arity: int, function: Callable[..., Any]):
        self.name = name
        self._arity = arity
        self.function = function

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter, arguments: List[Any]) -> Any:
        return self.function(*arguments)

    def __str__(self):
        return f"<native fn {self.name}>"

class LakoClass(LakoCallable):
    """User-defined class; calling it constructs an instance"""

    def __init__(self, name: str, superclass: Optional['LakoClass'], methods: Dict[str, LakoFunction]):
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name: str) -> Optional[LakoFunction]:
        """Find method by name, nearest class in the inheritance chain first"""
        klass = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self) -> int:
        """Return number of parameters for constructor"""
        initializer = self.find_method("init")
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter, arguments: List[Any]) -> 'LakoInstance':
        """Create new instance of the class"""
        instance = LakoInstance(self)

        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)

        return instance

    def __str__(self):
        return f"<class {self.name}>"

class LakoInstance:
    """Instance of a Lako class"""

    def __init__(self, klass: LakoClass):
        self.klass = klass
        self.fields: Dict[str, Any] = {}

    def get(self, name: str, line: int = 0, span: Optional[Span] = None) -> Any:
        """Get a field, or a method bound to this instance"""
        if name in self.fields:
            return self.fields[name]

        method = self.klass.find_method(name)
        if method is not None:
            return method.bind(self)

        raise UndefinedPropertyError.undefined_property(name, line, span)

    def set(self, name: str, value: Any):
        """Set a field; methods are never overwritten"""
        self.fields[name] = value

    def __str__(self):
        return f"{self.klass.name} instance"

def is_truthy(value: Any) -> bool:
    """nil and false are falsy, everything else is truthy"""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True

def is_equal(a: Any, b: Any) -> bool:
    """Equality across all variants; values of different variants never compare equal"""
    if type(a) is not type(b):
        return False
    if a is None or isinstance(a, (bool, float, str)):
        return a == b
    return a is b

def type_name(value: Any) -> str:
    """Name of the value's variant, used in error messages"""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, LakoClass):
        return "class"
    if isinstance(value, LakoCallable):
        return "function"
    if isinstance(value, LakoInstance):
        return "instance"
    return type(value).__name__

def format_number(number: float) -> str:
    """Shortest round-trip decimal, without the ".0" of integral values"""
    text = repr(number)
    if text.endswith(".0"):
        return text[:-2]
    return text

def stringify(value: Any) -> str:
    """Display representation used by print"""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    return str(value)
