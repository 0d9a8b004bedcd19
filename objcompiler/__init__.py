"""Public Python API for objcompiler.

The package compiles declarative object definitions into ordered construction
instructions, and renders those instructions as JSON or Python source.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from objcompiler.compiler import ObjectCreationCompiler
from objcompiler.definitions import (
    USE_DEFAULT,
    FieldBinding,
    MethodBinding,
    ObjectDefinition,
    Reference,
    create,
    get,
)
from objcompiler.emitter import PythonEmitter
from objcompiler.errors import CompilationError, CompilationFailed, InvalidDefinition
from objcompiler.exporter import compile_definitions, export_definitions
from objcompiler.instructions import (
    AssignField,
    Construct,
    InstallLazyPlaceholder,
    InvokeMethod,
    NestedObject,
)
from objcompiler.introspection import ReflectionIntrospector, TypeIntrospector
from objcompiler.loader import load_definitions
from objcompiler.registry import TypeRegistry

try:
    __version__: str = version("objcompiler")
except PackageNotFoundError:  # pragma: no cover - editable local fallback
    __version__ = "0.1.0"


def about(*, print_output: bool = True) -> str:
    """Return and optionally print the compiler's output contract.

    Example:
        >>> from objcompiler import about
        >>> "Lazy" in about(print_output=False)
        True
    """
    text = (
        f"objcompiler {__version__}\n"
        "Instruction order: Construct -> AssignField (declaration order) -> InvokeMethod (declaration order).\n"
        "Lazy entries: one InstallLazyPlaceholder wrapping the eager sequence; initialized once on first use.\n"
        "Errors: InvalidDefinition is reported per entry; any other CompilationError aborts the pass."
    )
    if print_output:
        print(text)
    return text


__all__ = [
    "__version__",
    "about",
    "AssignField",
    "CompilationError",
    "CompilationFailed",
    "Construct",
    "FieldBinding",
    "InstallLazyPlaceholder",
    "InvalidDefinition",
    "InvokeMethod",
    "MethodBinding",
    "NestedObject",
    "ObjectCreationCompiler",
    "ObjectDefinition",
    "PythonEmitter",
    "ReflectionIntrospector",
    "Reference",
    "TypeIntrospector",
    "TypeRegistry",
    "USE_DEFAULT",
    "compile_definitions",
    "create",
    "export_definitions",
    "get",
    "load_definitions",
]
