"""FastMCP bridge exposing the object compiler as agent tools."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Type

from objcompiler.compiler import ObjectCreationCompiler
from objcompiler.emitter import PythonEmitter, factory_names
from objcompiler.errors import CompilationError
from objcompiler.exporter import instructions_to_dict
from objcompiler.loader import definition_from_dict


def build_fastmcp_server(
    compiler: Optional[ObjectCreationCompiler] = None,
    *,
    server_name: str = "objcompiler",
    mcp_cls: Optional[Type[Any]] = None,
) -> Any:
    """Create a FastMCP server with ``compile_definition`` and ``emit_factory`` tools.

    Parameters
    ----------
    compiler:
        Compiler used by the tools. Defaults to a reflection-backed compiler.
    server_name:
        Name passed to FastMCP constructor.
    mcp_cls:
        Optional FastMCP-compatible class override (useful for tests).

    Returns:
        Configured MCP server instance.

    Raises:
        RuntimeError: If ``fastmcp`` is unavailable or registration API is unsupported.
    """

    if mcp_cls is None:
        try:
            from fastmcp import FastMCP  # type: ignore
        except ImportError as exc:  # pragma: no cover - depends on optional dependency
            raise RuntimeError(
                "fastmcp is not installed. Install objcompiler[mcp] or pass mcp_cls explicitly."
            ) from exc
        mcp_cls = FastMCP

    compiler = compiler or ObjectCreationCompiler()
    mcp = mcp_cls(server_name)

    tools = {
        "compile_definition": (
            _make_compile_tool(compiler),
            "Compile one object definition into construction instructions.",
        ),
        "emit_factory": (
            _make_emit_tool(compiler),
            "Compile one object definition and render it as a Python factory function.",
        ),
    }
    for tool_name, (fn, description) in tools.items():
        if hasattr(mcp, "tool"):
            _get_tool_decorator(mcp, tool_name=tool_name, tool_description=description)(fn)
            continue
        if hasattr(mcp, "add_tool"):
            mcp.add_tool(fn, name=tool_name, description=description)
            continue
        raise RuntimeError(
            "Provided MCP class does not expose a supported registration API "
            "(expected .tool(...) or .add_tool(...))."
        )

    return mcp


def _make_compile_tool(compiler: ObjectCreationCompiler) -> Callable[..., Dict[str, Any]]:
    def compile_definition(name: str, definition: Dict[str, Any]) -> Dict[str, Any]:
        """Compile the JSON definition of entry ``name``."""
        try:
            instructions = compiler.compile(definition_from_dict(name, definition))
        except CompilationError as exc:
            return {"ok": False, "error": str(exc)}
        return {"ok": True, "instructions": instructions_to_dict(instructions)}

    return compile_definition


def _make_emit_tool(compiler: ObjectCreationCompiler) -> Callable[..., Dict[str, Any]]:
    def emit_factory(name: str, definition: Dict[str, Any]) -> Dict[str, Any]:
        """Render the JSON definition of entry ``name`` as Python source."""
        try:
            instructions = compiler.compile(definition_from_dict(name, definition))
            source = PythonEmitter().emit_factory(factory_names([name])[name], instructions)
        except CompilationError as exc:
            return {"ok": False, "error": str(exc)}
        return {"ok": True, "source": source}

    return emit_factory


def _get_tool_decorator(mcp: Any, *, tool_name: str, tool_description: str):
    try:
        return mcp.tool(name=tool_name, description=tool_description)
    except TypeError:
        return mcp.tool()
