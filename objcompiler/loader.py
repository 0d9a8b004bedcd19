"""Build object definitions from JSON-style payloads.

Payload shape, one object per entry::

    {
        "mailer": {
            "class": "app.mail.Mailer",
            "lazy": true,
            "constructor": ["smtp.local", {"$default": true}, {"$ref": "logger"}],
            "fields": {"sender": "noreply@example.com"},
            "methods": [{"name": "set_retries", "args": [3]}]
        }
    }

``constructor`` and method ``args`` may also be objects keyed by position
(``{"1": 25}``). A ``fields`` value wrapped as
``{"$value": ..., "$class": "pkg.Owner"}`` overrides the owning class; any
other object is a plain dict value. Nested definitions use
``{"$create": {...}}`` and bytes use ``{"$bytes": "<base64>"}``.
"""

from __future__ import annotations

import base64
import binascii
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping

from objcompiler.definitions import (
    USE_DEFAULT,
    FieldBinding,
    MethodBinding,
    ObjectDefinition,
    Reference,
)
from objcompiler.errors import InvalidDefinition, definition_context

_ENTRY_KEYS = {"class", "lazy", "constructor", "fields", "methods"}


def load_definitions(path: str | Path) -> List[ObjectDefinition]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise InvalidDefinition(f"Definition file {path} must contain a JSON object.")
    return definitions_from_dict(payload)


def definitions_from_dict(payload: Mapping[str, Any]) -> List[ObjectDefinition]:
    return [definition_from_dict(name, entry) for name, entry in payload.items()]


def definition_from_dict(name: str, payload: Any) -> ObjectDefinition:
    with definition_context(name):
        if not isinstance(payload, dict):
            raise InvalidDefinition(f'Entry "{name}" must be an object.')
        unknown = sorted(set(payload) - _ENTRY_KEYS)
        if unknown:
            raise InvalidDefinition(
                f'Entry "{name}" has unknown key(s): {", ".join(unknown)}.'
            )
        class_name = payload.get("class")
        if not isinstance(class_name, str) or not class_name:
            raise InvalidDefinition(f'Entry "{name}" must declare a "class" string.')
        lazy = payload.get("lazy", False)
        if not isinstance(lazy, bool):
            raise InvalidDefinition(f'Entry "{name}": "lazy" must be a boolean.')

        constructor = None
        if "constructor" in payload:
            constructor = MethodBinding("__init__", _parse_arguments(payload["constructor"], "constructor"))

        return ObjectDefinition(
            name=name,
            class_name=class_name,
            lazy=lazy,
            constructor=constructor,
            fields=_parse_fields(payload.get("fields", {})),
            methods=_parse_methods(payload.get("methods", [])),
        )


def _parse_fields(payload: Any) -> List[FieldBinding]:
    if not isinstance(payload, dict):
        raise InvalidDefinition('"fields" must be an object.')
    bindings = []
    for field_name, raw in payload.items():
        if isinstance(raw, dict) and "$value" in raw and set(raw) <= {"$value", "$class"}:
            bindings.append(
                FieldBinding(field_name, _parse_value(raw["$value"]), class_name=raw.get("$class"))
            )
        else:
            bindings.append(FieldBinding(field_name, _parse_value(raw)))
    return bindings


def _parse_methods(payload: Any) -> List[MethodBinding]:
    if not isinstance(payload, list):
        raise InvalidDefinition('"methods" must be a list.')
    bindings = []
    for item in payload:
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            raise InvalidDefinition('Each method binding needs a "name" string.')
        bindings.append(
            MethodBinding(item["name"], _parse_arguments(item.get("args", []), item["name"]))
        )
    return bindings


def _parse_arguments(payload: Any, label: str) -> Dict[int, Any]:
    if isinstance(payload, list):
        return {index: _parse_value(value) for index, value in enumerate(payload)}
    if isinstance(payload, dict):
        parameters = {}
        for key, value in payload.items():
            if not str(key).isdigit():
                raise InvalidDefinition(
                    f"Arguments of {label} must be keyed by position, got '{key}'."
                )
            parameters[int(key)] = _parse_value(value)
        return parameters
    raise InvalidDefinition(f"Arguments of {label} must be a list or an object.")


def _parse_value(value: Any) -> Any:
    if isinstance(value, list):
        return [_parse_value(item) for item in value]
    if not isinstance(value, dict):
        return value
    if set(value) == {"$ref"}:
        return Reference(value["$ref"])
    if set(value) == {"$default"}:
        return USE_DEFAULT
    if set(value) == {"$bytes"}:
        try:
            return base64.b64decode(value["$bytes"], validate=True)
        except (TypeError, binascii.Error) as exc:
            raise InvalidDefinition(f'"$bytes" must hold base64 text: {exc}') from exc
    if set(value) == {"$create"}:
        nested = value["$create"]
        if not isinstance(nested, dict):
            raise InvalidDefinition('"$create" must wrap an entry object.')
        return definition_from_dict(nested.get("class", "<nested>"), nested)
    return {key: _parse_value(item) for key, item in value.items()}
