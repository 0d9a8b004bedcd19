import abc
from typing import TYPE_CHECKING, Any, Optional

from objcompiler.definitions import ObjectDefinition, Reference, USE_DEFAULT
from objcompiler.errors import CompilationError
from objcompiler.instructions import NestedObject

if TYPE_CHECKING:
    from objcompiler.compiler.core import ObjectCreationCompiler

_LITERAL_TYPES = (int, float, str, bytes, bool, type(None))


class ValueCompiler(abc.ABC):
    @abc.abstractmethod
    def compile_value(self, value: Any) -> Any:
        """Turn a bound value into an instruction operand."""


class DefaultValueCompiler(ValueCompiler):
    """Literals and references pass through; nested definitions compile inline.

    Values that need no compilation are returned as the same object.
    """

    def __init__(self, compiler: Optional["ObjectCreationCompiler"] = None):
        self.compiler = compiler

    def compile_value(self, value: Any) -> Any:
        if value is USE_DEFAULT:
            raise CompilationError("USE_DEFAULT is only valid as a parameter binding.")
        if isinstance(value, _LITERAL_TYPES) or isinstance(value, Reference):
            return value
        if isinstance(value, ObjectDefinition):
            if self.compiler is None:
                raise CompilationError(
                    f"Cannot compile nested definition for {value.class_name} "
                    "without an object compiler."
                )
            return NestedObject(value.class_name, self.compiler.compile(value))
        if isinstance(value, (list, tuple)):
            items = [self.compile_value(item) for item in value]
            if all(new is old for new, old in zip(items, value)):
                return value
            return type(value)(items)
        if isinstance(value, dict):
            compiled = {key: self.compile_value(item) for key, item in value.items()}
            if all(compiled[key] is value[key] for key in value):
                return value
            return compiled
        raise CompilationError(f"Unsupported value of type {type(value).__name__}: {value!r}")
