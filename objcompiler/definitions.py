"""Object definitions: the declarative input of the construction compiler."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple


class _UseDefault:
    """Placeholder binding: resolve the parameter from its declared default."""

    _instance: Optional["_UseDefault"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "USE_DEFAULT"

    def __reduce__(self):
        return "USE_DEFAULT"


USE_DEFAULT = _UseDefault()


@dataclass(frozen=True)
class Reference:
    """Reference to another container entry, resolved by the host at run time."""

    entry_name: str


def _freeze_parameters(parameters: Any) -> Mapping[int, Any]:
    if isinstance(parameters, Mapping):
        items = dict(parameters)
    else:
        items = dict(enumerate(parameters))
    for index in items:
        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            raise ValueError(f"Parameter index must be a non-negative int, got {index!r}.")
    return MappingProxyType(items)


@dataclass(frozen=True)
class MethodBinding:
    """Explicit positional bindings for one call (constructor or method).

    ``parameters`` maps a parameter position to its bound value. Positions that
    are missing, or bound to ``USE_DEFAULT``, fall back to the declared default.
    """

    method_name: str
    parameters: Mapping[int, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "parameters", _freeze_parameters(self.parameters))

    def __eq__(self, other):
        if not isinstance(other, MethodBinding):
            return NotImplemented
        return (
            self.method_name == other.method_name
            and dict(self.parameters) == dict(other.parameters)
        )

    def __hash__(self):
        return hash((self.method_name, tuple(sorted(self.parameters))))

    def get(self, index: int) -> Any:
        return self.parameters.get(index, USE_DEFAULT)

    def has(self, index: int) -> bool:
        return self.get(index) is not USE_DEFAULT


@dataclass(frozen=True)
class FieldBinding:
    field_name: str
    value: Any
    class_name: Optional[str] = None


@dataclass(frozen=True)
class ObjectDefinition:
    """Recipe for building one object.

    ``class_name`` is a dotted import path (``pkg.module.Class`` or
    ``pkg.module:Class``). Instances are immutable; use :meth:`with_lazy` to
    derive a copy with a different lazy flag.
    """

    name: str
    class_name: str
    lazy: bool = False
    constructor: Optional[MethodBinding] = None
    fields: Tuple[FieldBinding, ...] = ()
    methods: Tuple[MethodBinding, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "methods", tuple(self.methods))

    def with_lazy(self, lazy: bool) -> "ObjectDefinition":
        return dataclasses.replace(self, lazy=lazy)


@dataclass(frozen=True)
class ObjectDefinitionBuilder:
    """Immutable fluent builder returned by :func:`create`."""

    definition: ObjectDefinition

    def constructor(self, *args: Any, **indexed: Any) -> "ObjectDefinitionBuilder":
        parameters: Dict[int, Any] = dict(enumerate(args))
        parameters.update(_parse_indexed(indexed))
        return self._replace(constructor=MethodBinding("__init__", parameters))

    def field(
        self,
        field_name: str,
        value: Any,
        *,
        class_name: Optional[str] = None,
    ) -> "ObjectDefinitionBuilder":
        binding = FieldBinding(field_name, value, class_name=class_name)
        return self._replace(fields=self.definition.fields + (binding,))

    def method(self, method_name: str, *args: Any, **indexed: Any) -> "ObjectDefinitionBuilder":
        parameters: Dict[int, Any] = dict(enumerate(args))
        parameters.update(_parse_indexed(indexed))
        binding = MethodBinding(method_name, parameters)
        return self._replace(methods=self.definition.methods + (binding,))

    def lazy(self, flag: bool = True) -> "ObjectDefinitionBuilder":
        return self._replace(lazy=flag)

    def build(self) -> ObjectDefinition:
        return self.definition

    def _replace(self, **changes: Any) -> "ObjectDefinitionBuilder":
        return ObjectDefinitionBuilder(dataclasses.replace(self.definition, **changes))


def _parse_indexed(indexed: Dict[str, Any]) -> Dict[int, Any]:
    # create(...).constructor(p1=...) binds position 1
    parameters: Dict[int, Any] = {}
    for key, value in indexed.items():
        if not key.startswith("p") or not key[1:].isdigit():
            raise TypeError(f"Indexed bindings must be named p<N>, got '{key}'.")
        parameters[int(key[1:])] = value
    return parameters


def create(class_name: str, name: Optional[str] = None) -> ObjectDefinitionBuilder:
    """Start an object definition for ``class_name``.

    Example:
        >>> definition = create("app.Mailer").constructor("smtp.local", 25).lazy().build()
        >>> definition.lazy
        True
    """
    return ObjectDefinitionBuilder(ObjectDefinition(name=name or class_name, class_name=class_name))


def get(entry_name: str) -> Reference:
    return Reference(entry_name)
