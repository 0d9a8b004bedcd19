from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

from objcompiler.errors import InvalidDefinition
from objcompiler.introspection import (
    CallableInfo,
    FieldInfo,
    ParameterInfo,
    TypeIntrospector,
)

_NO_DEFAULT = object()
# Registered default that exists but cannot be read (native routines).
UNREADABLE_DEFAULT = object()


@dataclass(frozen=True)
class TypeSchema:
    name: str
    instantiable: bool = True
    constructor: Optional[CallableInfo] = None
    methods: Dict[str, CallableInfo] = field(default_factory=dict)
    fields: Dict[str, FieldInfo] = field(default_factory=dict)


def make_parameters(spec: Iterable[Any]) -> Tuple[ParameterInfo, ...]:
    """Build parameter metadata from names or ``(name, default)`` pairs.

    A bare name is a required parameter. A pair declares an optional parameter;
    use :data:`UNREADABLE_DEFAULT` as the default to model a default that
    introspection cannot read.
    """
    parameters = []
    for position, item in enumerate(spec):
        if isinstance(item, str):
            name, default = item, _NO_DEFAULT
        else:
            name, default = item
        provider = None
        if default is not _NO_DEFAULT and default is not UNREADABLE_DEFAULT:
            provider = _constant(default)
        parameters.append(
            ParameterInfo(
                name=name,
                position=position,
                optional=default is not _NO_DEFAULT,
                default_provider=provider,
            )
        )
    return tuple(parameters)


class TypeRegistry(TypeIntrospector):
    """
    Holds type metadata registered ahead of compilation.
    """

    def __init__(self):
        self.schemas: Dict[str, TypeSchema] = {}

    def register(
        self,
        name: str,
        *,
        constructor: Optional[Iterable[Any]] = None,
        methods: Optional[Dict[str, Iterable[Any]]] = None,
        fields: Optional[Dict[str, bool]] = None,
        instantiable: bool = True,
        read_only_fields: Iterable[str] = (),
    ) -> TypeSchema:
        """Register a type.

        ``fields`` maps a field name to whether it is public.
        """
        if name in self.schemas:
            raise ValueError(f"Type schema '{name}' already declared.")
        read_only = set(read_only_fields)
        schema = TypeSchema(
            name=name,
            instantiable=instantiable,
            constructor=(
                CallableInfo("__init__", make_parameters(constructor))
                if constructor is not None
                else None
            ),
            methods={
                method_name: CallableInfo(method_name, make_parameters(params))
                for method_name, params in (methods or {}).items()
            },
            fields={
                field_name: FieldInfo(
                    field_name,
                    name,
                    public=public,
                    writable=field_name not in read_only,
                )
                for field_name, public in (fields or {}).items()
            },
        )
        self.schemas[name] = schema
        return schema

    def class_exists(self, class_name: str) -> bool:
        return class_name in self.schemas

    def is_instantiable(self, class_name: str) -> bool:
        schema = self.schemas.get(class_name)
        return schema is not None and schema.instantiable

    def get_constructor(self, class_name: str) -> Optional[CallableInfo]:
        return self._schema(class_name).constructor

    def get_method(self, class_name: str, method_name: str) -> Optional[CallableInfo]:
        return self._schema(class_name).methods.get(method_name)

    def get_field(self, class_name: str, field_name: str) -> Optional[FieldInfo]:
        return self._schema(class_name).fields.get(field_name)

    def _schema(self, class_name: str) -> TypeSchema:
        try:
            return self.schemas[class_name]
        except KeyError as exc:
            raise InvalidDefinition(f"Class {class_name} does not exist") from exc


def _constant(value: Any):
    return lambda: value
