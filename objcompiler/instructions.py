from dataclasses import dataclass
from typing import Any, Tuple


# Value operands

@dataclass(frozen=True)
class NestedObject:
    """A nested definition compiled inline; evaluates to the built object."""

    class_name: str
    instructions: Tuple["Instruction", ...]


# Instructions

class Instruction:
    pass


@dataclass(frozen=True)
class Construct(Instruction):
    class_name: str
    args: Tuple[Any, ...] = ()
    # Names of the trailing ``args`` that must be passed by keyword.
    kwnames: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AssignField(Instruction):
    field_name: str
    value: Any


@dataclass(frozen=True)
class InvokeMethod(Instruction):
    method_name: str
    args: Tuple[Any, ...] = ()
    kwnames: Tuple[str, ...] = ()


@dataclass(frozen=True)
class InstallLazyPlaceholder(Instruction):
    """Install a forwarding proxy whose initializer runs ``initializer`` once."""

    class_name: str
    initializer: Tuple[Instruction, ...]


def split_arguments(args: Tuple[Any, ...], kwnames: Tuple[str, ...]):
    """Split ``args`` into positional values and a keyword mapping."""
    if not kwnames:
        return tuple(args), {}
    cut = len(args) - len(kwnames)
    return tuple(args[:cut]), dict(zip(kwnames, args[cut:]))
