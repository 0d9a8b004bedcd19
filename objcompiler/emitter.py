import math
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from objcompiler.definitions import Reference
from objcompiler.errors import CompilationError
from objcompiler.instructions import (
    AssignField,
    Construct,
    InstallLazyPlaceholder,
    Instruction,
    InvokeMethod,
    NestedObject,
    split_arguments,
)
from objcompiler.introspection import split_class_name

FACTORY_PREFIX = "build_"


class PythonEmitter:
    """Render instruction sequences as Python factory functions.

    A factory takes ``(container, proxy_factory)``: references are fetched with
    ``container.get(name)`` and lazy placeholders are created with
    ``proxy_factory.create_proxy(class_name, initializer)``.
    """

    def emit_module(self, compiled: Dict[str, Sequence[Instruction]]) -> str:
        names = factory_names(compiled)
        out = ['"""Object factories generated by objcompiler. Do not edit."""']
        for entry_name, instructions in compiled.items():
            out.append(self.emit_factory(names[entry_name], instructions))
        table = ["FACTORIES = {"]
        for entry_name in compiled:
            table.append(f"    {entry_name!r}: {names[entry_name]},")
        table.append("}")
        out.append("\n".join(table))
        return "\n\n\n".join(out) + "\n"

    def emit_factory(self, function_name: str, instructions: Sequence[Instruction]) -> str:
        if not function_name.isidentifier():
            raise CompilationError(f"Invalid factory name: {function_name!r}")
        self._counter = 0
        self._modules: List[str] = []
        body = self._emit_sequence(instructions, indent=1)
        imports = [f"    import {module}" for module in self._modules]
        lines = [f"def {function_name}(container, proxy_factory):", *imports, *body]
        return "\n".join(lines)

    def _emit_sequence(self, instructions: Sequence[Instruction], indent: int) -> List[str]:
        pad = "    " * indent
        target = self._fresh("obj")
        lines: List[str] = []
        for instruction in instructions:
            if isinstance(instruction, Construct):
                call = self._emit_call(
                    self._class_expr(instruction.class_name),
                    instruction.args,
                    instruction.kwnames,
                    lines,
                    indent,
                )
                lines.append(pad + f"{target} = {call}")
            elif isinstance(instruction, AssignField):
                value = self._emit_value(instruction.value, lines, indent)
                if instruction.field_name.isidentifier():
                    lines.append(pad + f"{target}.{instruction.field_name} = {value}")
                else:
                    lines.append(pad + f"setattr({target}, {instruction.field_name!r}, {value})")
            elif isinstance(instruction, InvokeMethod):
                call = self._emit_call(
                    f"{target}.{instruction.method_name}",
                    instruction.args,
                    instruction.kwnames,
                    lines,
                    indent,
                )
                lines.append(pad + call)
            elif isinstance(instruction, InstallLazyPlaceholder):
                initializer = self._fresh("initializer")
                lines.append(pad + f"def {initializer}():")
                lines.extend(self._emit_sequence(instruction.initializer, indent + 1))
                lines.append(
                    pad
                    + f"{target} = proxy_factory.create_proxy("
                    + f"{instruction.class_name!r}, {initializer})"
                )
            else:
                raise CompilationError(f"Unsupported instruction: {instruction!r}")
        lines.append(pad + f"return {target}")
        return lines

    def _emit_call(
        self,
        callee: str,
        args: Tuple[Any, ...],
        kwnames: Tuple[str, ...],
        lines: List[str],
        indent: int,
    ) -> str:
        positional, keywords = split_arguments(args, kwnames)
        chunks = [self._emit_value(value, lines, indent) for value in positional]
        chunks.extend(
            f"{name}={self._emit_value(value, lines, indent)}" for name, value in keywords.items()
        )
        return f"{callee}({', '.join(chunks)})"

    def _emit_value(self, value: Any, lines: List[str], indent: int) -> str:
        if value is None or isinstance(value, (bool, int, str, bytes)):
            return repr(value)
        if isinstance(value, float):
            if not math.isfinite(value):
                return f"float({repr(value)!r})"
            return repr(value)
        if isinstance(value, Reference):
            return f"container.get({value.entry_name!r})"
        if isinstance(value, NestedObject):
            pad = "    " * indent
            builder = self._fresh("nested")
            lines.append(pad + f"def {builder}():")
            lines.extend(self._emit_sequence(value.instructions, indent + 1))
            return f"{builder}()"
        if isinstance(value, list):
            return "[" + ", ".join(self._emit_value(item, lines, indent) for item in value) + "]"
        if isinstance(value, tuple):
            items = [self._emit_value(item, lines, indent) for item in value]
            if len(items) == 1:
                return f"({items[0]},)"
            return "(" + ", ".join(items) + ")"
        if isinstance(value, dict):
            pairs = [
                f"{self._emit_value(key, lines, indent)}: {self._emit_value(item, lines, indent)}"
                for key, item in value.items()
            ]
            return "{" + ", ".join(pairs) + "}"
        raise CompilationError(f"Unsupported constant value: {value!r}")

    def _class_expr(self, class_name: str) -> str:
        module, qualname = split_class_name(class_name)
        if not module:
            if class_name in _BUILTIN_NAMES:
                return class_name
            raise CompilationError(f"Cannot emit a reference to unqualified class {class_name!r}")
        if module not in self._modules:
            self._modules.append(module)
        return f"{module}.{qualname}"

    def _fresh(self, prefix: str) -> str:
        self._counter += 1
        return f"_{prefix}_{self._counter}"


_BUILTIN_NAMES = {"object", "dict", "list", "set", "tuple", "str", "int", "float", "bytes"}


def factory_names(entry_names: Iterable[str]) -> Dict[str, str]:
    """Map entry names to unique, valid factory function names."""
    names: Dict[str, str] = {}
    used = set()
    for entry_name in entry_names:
        base = FACTORY_PREFIX + _sanitize_identifier(entry_name)
        candidate = base
        suffix = 2
        while candidate in used:
            candidate = f"{base}_{suffix}"
            suffix += 1
        used.add(candidate)
        names[entry_name] = candidate
    return names


def _sanitize_identifier(value: str) -> str:
    out = []
    for ch in value:
        if ch.isalnum() or ch == "_":
            out.append(ch)
        else:
            out.append("_")
    normalized = "".join(out)
    if not normalized:
        return "entry"
    return normalized
