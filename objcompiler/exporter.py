import base64
import json
import logging
from dataclasses import fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from objcompiler.compiler import ObjectCreationCompiler
from objcompiler.definitions import ObjectDefinition, Reference
from objcompiler.emitter import PythonEmitter
from objcompiler.errors import CompilationFailed, InvalidDefinition
from objcompiler.instructions import Instruction

logger = logging.getLogger(__name__)

CompiledDefinitions = Dict[str, Tuple[Instruction, ...]]


def compile_definitions(
    definitions: Iterable[ObjectDefinition],
    compiler: Optional[ObjectCreationCompiler] = None,
) -> CompiledDefinitions:
    """Compile every definition, keyed by entry name.

    Every entry is attempted; ``InvalidDefinition`` failures are collected and
    raised together as :class:`CompilationFailed`. Any other
    ``CompilationError`` aborts the pass immediately.
    """
    compiler = compiler or ObjectCreationCompiler()
    compiled: CompiledDefinitions = {}
    failures: List[InvalidDefinition] = []
    for definition in definitions:
        if definition.name in compiled:
            raise ValueError(f"Entry '{definition.name}' is defined more than once.")
        try:
            compiled[definition.name] = compiler.compile(definition)
        except InvalidDefinition as exc:
            logger.debug("Entry %s cannot be compiled: %s", definition.name, exc.reason)
            failures.append(exc)
    if failures:
        raise CompilationFailed(failures)
    logger.debug("Compiled %d entries", len(compiled))
    return compiled


def compiled_to_dict(compiled: CompiledDefinitions) -> Dict[str, Any]:
    """Serialize compiled entries into the JSON instruction payload."""
    return {
        "entries": {
            name: instructions_to_dict(instructions)
            for name, instructions in compiled.items()
        }
    }


def instructions_to_dict(instructions: Sequence[Instruction]) -> List[Dict[str, Any]]:
    return [_serialize(instruction) for instruction in instructions]


def export_definitions(
    definitions: Iterable[ObjectDefinition],
    output_dir: str,
    compiler: Optional[ObjectCreationCompiler] = None,
) -> CompiledDefinitions:
    """Compile and write ``instructions.json`` and ``factories.py`` to ``output_dir``."""
    compiled = compile_definitions(definitions, compiler)
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    json_path = out_dir / "instructions.json"
    py_path = out_dir / "factories.py"

    json_path.write_text(
        json.dumps(compiled_to_dict(compiled), indent=2, sort_keys=True),
        encoding="utf-8",
    )
    py_path.write_text(PythonEmitter().emit_module(compiled), encoding="utf-8")
    logger.debug("Wrote %s and %s", json_path, py_path)

    return compiled


def _serialize(value):
    if isinstance(value, Reference):
        return {"$ref": value.entry_name}
    if is_dataclass(value) and not isinstance(value, type):
        data = {"op": type(value).__name__}
        for item in fields(value):
            data[item.name] = _serialize(getattr(value, item.name))
        return data
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {str(k): _serialize(v) for k, v in value.items()}
    if isinstance(value, bytes):
        return {"$bytes": base64.b64encode(value).decode("ascii")}
    return value
