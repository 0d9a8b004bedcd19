import contextvars
from contextlib import contextmanager
from typing import Iterator, List, Optional


_CURRENT_ENTRY_NAME: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "objcompiler_current_entry_name", default=None
)


def current_entry_name() -> Optional[str]:
    return _CURRENT_ENTRY_NAME.get()


@contextmanager
def definition_context(entry_name: Optional[str]) -> Iterator[None]:
    """Attribute any ``InvalidDefinition`` raised in the block to ``entry_name``."""
    token = _CURRENT_ENTRY_NAME.set(entry_name)
    try:
        yield
    finally:
        _CURRENT_ENTRY_NAME.reset(token)


class CompilationError(Exception):
    """Fatal compilation error.

    The definition and the target type are structurally incompatible; the whole
    compilation pass should be aborted.
    """


class InvalidDefinition(CompilationError):
    """Raised when a definition cannot be compiled because of an authoring mistake."""

    def __init__(self, message: str, *, entry_name: Optional[str] = None):
        self.entry_name = entry_name if entry_name is not None else current_entry_name()
        self.reason = message
        super().__init__(_format_with_entry(message, self.entry_name))


class CompilationFailed(CompilationError):
    """Aggregates the per-entry failures of a multi-definition compilation pass."""

    def __init__(self, errors: List[InvalidDefinition]):
        self.errors = list(errors)
        lines = [f"{len(self.errors)} definition(s) cannot be compiled:"]
        lines.extend(f"- {error}" for error in self.errors)
        super().__init__("\n".join(lines))


def _format_with_entry(message: str, entry_name: Optional[str]) -> str:
    if entry_name is None or f'"{entry_name}"' in message:
        return message
    return f"{message}\nEntry: {entry_name}"
