"""Read-only type introspection used by the construction compiler.

The compiler never touches Python types directly. It asks a
:class:`TypeIntrospector` whether a type exists and can be instantiated, and for
the parameter lists of its constructor and methods. Two implementations ship
with the package:

- :class:`ReflectionIntrospector` imports live types and reads them with
  :mod:`inspect`.
- :class:`objcompiler.registry.TypeRegistry` answers from metadata registered
  ahead of time, for hosts that cannot import the target types at compile time.
"""

from __future__ import annotations

import abc
import enum
import importlib
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from objcompiler.errors import InvalidDefinition


class DefaultValueUnavailable(Exception):
    """Raised by a default provider when the default cannot be introspected."""


@dataclass(frozen=True)
class ParameterInfo:
    name: str
    position: int
    optional: bool = False
    default_provider: Optional[Callable[[], Any]] = None
    keyword_only: bool = False

    def default(self) -> Any:
        if self.default_provider is None:
            raise DefaultValueUnavailable(self.name)
        return self.default_provider()


@dataclass(frozen=True)
class CallableInfo:
    name: str
    parameters: Tuple[ParameterInfo, ...] = ()

    @property
    def display_name(self) -> str:
        return f"{self.name}()"


@dataclass(frozen=True)
class FieldInfo:
    name: str
    owner: str
    public: bool = True
    writable: bool = True


class TypeIntrospector(abc.ABC):
    @abc.abstractmethod
    def class_exists(self, class_name: str) -> bool:
        ...

    @abc.abstractmethod
    def is_instantiable(self, class_name: str) -> bool:
        """True when the type exists and can be constructed directly."""

    @abc.abstractmethod
    def get_constructor(self, class_name: str) -> Optional[CallableInfo]:
        """Return the constructor, or ``None`` when the type declares none."""

    @abc.abstractmethod
    def get_method(self, class_name: str, method_name: str) -> Optional[CallableInfo]:
        ...

    @abc.abstractmethod
    def get_field(self, class_name: str, field_name: str) -> Optional[FieldInfo]:
        ...


def load_class(class_name: str) -> Optional[type]:
    """Import ``pkg.module.Class`` or ``pkg.module:Class.Inner``; ``None`` if absent."""
    resolved = _resolve(class_name)
    return resolved[2] if resolved is not None else None


def split_class_name(class_name: str) -> Tuple[str, str]:
    """Split a class path into ``(module, qualname)``.

    Dotted paths are split where the module actually ends, so
    ``pkg.mod.Outer.Inner`` gives ``("pkg.mod", "Outer.Inner")``. Paths that do
    not import fall back to splitting at the last dot.
    """
    resolved = _resolve(class_name)
    if resolved is not None:
        return resolved[0], resolved[1]
    if ":" in class_name:
        module_name, _, qualname = class_name.partition(":")
    else:
        module_name, _, qualname = class_name.rpartition(".")
    return module_name, qualname


def _resolve(class_name: str) -> Optional[Tuple[str, str, type]]:
    if ":" in class_name:
        module_name, _, qualname = class_name.partition(":")
        candidates = [(module_name, qualname)]
    else:
        parts = class_name.split(".")
        candidates = [
            (".".join(parts[:cut]), ".".join(parts[cut:]))
            for cut in range(len(parts) - 1, 0, -1)
        ]

    for module_name, qualname in candidates:
        if not module_name or not qualname:
            continue
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            # Re-raise misses for any module other than the one being tried.
            if exc.name is not None and not module_name.startswith(exc.name):
                raise
            continue
        obj: Any = module
        for attr in qualname.split("."):
            obj = getattr(obj, attr, None)
            if obj is None:
                break
        if inspect.isclass(obj):
            return module_name, qualname, obj
    return None


class ReflectionIntrospector(TypeIntrospector):
    """Introspect importable Python classes."""

    def class_exists(self, class_name: str) -> bool:
        return load_class(class_name) is not None

    def is_instantiable(self, class_name: str) -> bool:
        cls = load_class(class_name)
        if cls is None:
            return False
        if inspect.isabstract(cls):
            return False
        if getattr(cls, "_is_protocol", False):
            return False
        if issubclass(cls, enum.Enum):
            return False
        return True

    def get_constructor(self, class_name: str) -> Optional[CallableInfo]:
        cls = self._require(class_name)
        if cls.__init__ is object.__init__ and cls.__new__ is object.__new__:
            return None
        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError) as exc:
            raise InvalidDefinition(
                f"The constructor of {class_name} cannot be read through introspection: {exc}"
            ) from exc
        builtin = _is_builtin_callable(cls.__init__) and _is_builtin_callable(cls.__new__)
        return CallableInfo("__init__", _parameters_from_signature(signature, builtin=builtin))

    def get_method(self, class_name: str, method_name: str) -> Optional[CallableInfo]:
        cls = self._require(class_name)
        try:
            static_member = inspect.getattr_static(cls, method_name)
        except AttributeError:
            return None
        member = getattr(cls, method_name)
        if not callable(member) or inspect.isclass(member):
            return None

        try:
            signature = inspect.signature(member)
        except (TypeError, ValueError) as exc:
            raise InvalidDefinition(
                f"The signature of {method_name}() on {class_name} cannot be read through "
                f"introspection: {exc}"
            ) from exc

        if not isinstance(static_member, (staticmethod, classmethod)):
            # Accessed on the class, so the receiver is still part of the signature.
            parameters = list(signature.parameters.values())[1:]
            signature = signature.replace(parameters=parameters)

        return CallableInfo(
            method_name,
            _parameters_from_signature(signature, builtin=_is_builtin_callable(member)),
        )

    def get_field(self, class_name: str, field_name: str) -> Optional[FieldInfo]:
        cls = self._require(class_name)
        public = not field_name.startswith("_")
        for klass in inspect.getmro(cls):
            if klass is object:
                continue
            if field_name in inspect.get_annotations(klass):
                return FieldInfo(field_name, class_name, public=public)
            if field_name in _declared_slots(klass):
                return FieldInfo(field_name, class_name, public=public)
            if field_name in vars(klass):
                member = vars(klass)[field_name]
                if isinstance(member, property):
                    return FieldInfo(
                        field_name, class_name, public=public, writable=member.fset is not None
                    )
                if inspect.isfunction(member) or isinstance(member, (staticmethod, classmethod)):
                    return None
                return FieldInfo(field_name, class_name, public=public)
        return None

    def _require(self, class_name: str) -> type:
        cls = load_class(class_name)
        if cls is None:
            raise InvalidDefinition(f"Class {class_name} does not exist")
        return cls


def _declared_slots(klass: type) -> Tuple[str, ...]:
    slots = vars(klass).get("__slots__", ())
    if isinstance(slots, str):
        return (slots,)
    return tuple(slots)


def _is_builtin_callable(obj: Any) -> bool:
    return inspect.isbuiltin(obj) or inspect.ismethoddescriptor(obj) or type(obj).__name__ in {
        "wrapper_descriptor",
        "method-wrapper",
    }


def _parameters_from_signature(
    signature: inspect.Signature, *, builtin: bool
) -> Tuple[ParameterInfo, ...]:
    parameters = []
    for parameter in signature.parameters.values():
        if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
            continue
        optional = parameter.default is not parameter.empty
        provider = None
        if optional and not builtin and not _is_factory_sentinel(parameter.default):
            provider = _constant(parameter.default)
        parameters.append(
            ParameterInfo(
                name=parameter.name,
                position=len(parameters),
                optional=optional,
                default_provider=provider,
                keyword_only=parameter.kind is parameter.KEYWORD_ONLY,
            )
        )
    return tuple(parameters)


def _is_factory_sentinel(value: Any) -> bool:
    # dataclass fields with default_factory show up as "<factory>" in __init__.
    return type(value).__name__ == "_HAS_DEFAULT_FACTORY_CLASS"


def _constant(value: Any) -> Callable[[], Any]:
    def provider() -> Any:
        return value

    return provider
