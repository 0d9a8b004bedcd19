from objcompiler.definitions import ObjectDefinition
from objcompiler.introspection import FieldInfo

from .constants import SYNTHETIC_NAME_MARKERS


def _is_synthetic_name(class_name: str) -> bool:
    return any(marker in class_name for marker in SYNTHETIC_NAME_MARKERS)


def _field_owner(definition: ObjectDefinition, class_name: str | None) -> str:
    return class_name or definition.class_name


def _describe_field(field: FieldInfo) -> str:
    return f"{field.owner}.{field.name}"


def _describe_entry(definition: ObjectDefinition) -> str:
    if definition.name == definition.class_name:
        return definition.name
    return f"{definition.name} ({definition.class_name})"
