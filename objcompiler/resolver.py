"""Match a callable's formal parameters against explicit bindings."""

from __future__ import annotations

import warnings
from typing import Any, List, Optional, Tuple

from objcompiler.definitions import MethodBinding
from objcompiler.errors import InvalidDefinition
from objcompiler.introspection import CallableInfo, DefaultValueUnavailable, ParameterInfo


class ParameterResolver:
    def resolve(
        self,
        binding: Optional[MethodBinding],
        function: Optional[CallableInfo],
    ) -> Tuple[Any, ...]:
        """Return one argument per formal parameter of ``function``, in order.

        Explicit bindings win and are returned as the very same objects. Unbound
        optional parameters take their declared default. The first required
        parameter without a binding raises :class:`InvalidDefinition`.

        A missing ``function`` resolves to no arguments.
        """
        if function is None:
            return ()

        args: List[Any] = []
        for parameter in function.parameters:
            if binding is not None and binding.has(parameter.position):
                args.append(binding.get(parameter.position))
            elif parameter.optional:
                args.append(self._default_value(parameter, function))
            else:
                raise InvalidDefinition(
                    f"Parameter ${parameter.name} of {function.display_name} "
                    "has no value defined or guessable"
                )

        if binding is not None:
            _warn_unused_bindings(binding, function)
        return tuple(args)

    def _default_value(self, parameter: ParameterInfo, function: CallableInfo) -> Any:
        try:
            return parameter.default()
        except DefaultValueUnavailable as exc:
            raise InvalidDefinition(
                f'The parameter "{parameter.name}" of {function.display_name} has no value '
                "defined or guessable. It has a default value, but the default value can't "
                "be read through introspection because it belongs to a builtin routine or is "
                "produced by a default factory."
            ) from exc


def keyword_names(function: Optional[CallableInfo]) -> Tuple[str, ...]:
    if function is None:
        return ()
    return tuple(parameter.name for parameter in function.parameters if parameter.keyword_only)


def _warn_unused_bindings(binding: MethodBinding, function: CallableInfo) -> None:
    extra = sorted(index for index in binding.parameters if index >= len(function.parameters))
    if extra:
        warnings.warn(
            f"{function.display_name} takes {len(function.parameters)} parameter(s); "
            f"bindings at position(s) {', '.join(map(str, extra))} are ignored.",
            stacklevel=3,
        )
