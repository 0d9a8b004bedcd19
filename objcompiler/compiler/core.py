import logging
from typing import Any, List, Optional, Tuple

from objcompiler.definitions import MethodBinding, ObjectDefinition
from objcompiler.errors import CompilationError, InvalidDefinition, definition_context
from objcompiler.instructions import (
    AssignField,
    Construct,
    InstallLazyPlaceholder,
    Instruction,
    InvokeMethod,
)
from objcompiler.introspection import CallableInfo, ReflectionIntrospector, TypeIntrospector
from objcompiler.resolver import ParameterResolver, keyword_names
from objcompiler.values import DefaultValueCompiler, ValueCompiler

from .helpers import _describe_entry, _describe_field, _field_owner, _is_synthetic_name

logger = logging.getLogger(__name__)


class ObjectCreationCompiler:
    def __init__(
        self,
        introspector: Optional[TypeIntrospector] = None,
        value_compiler: Optional[ValueCompiler] = None,
    ):
        """Create a compiler for object definitions.

        ``introspector`` defaults to reading importable Python classes.
        ``value_compiler`` defaults to passing literals and references through
        and compiling nested definitions with this compiler.
        """
        self.introspector = introspector or ReflectionIntrospector()
        self.value_compiler = value_compiler or DefaultValueCompiler(self)
        self.resolver = ParameterResolver()

    def compile(self, definition: ObjectDefinition) -> Tuple[Instruction, ...]:
        """Compile ``definition`` into an ordered instruction sequence.

        Raises:
            InvalidDefinition: The definition cannot be satisfied (missing or
                abstract class, unresolvable parameter, unreadable default).
            CompilationError: The definition and its class are structurally
                incompatible (anonymous class, non-public field, missing method).
        """
        with definition_context(definition.name):
            self._assert_class_is_not_anonymous(definition)
            self._assert_class_is_instantiable(definition)

            if definition.lazy:
                return self._compile_lazy_definition(definition)

            logger.debug("Compiling entry %s", _describe_entry(definition))
            instructions: List[Instruction] = []

            constructor = self.introspector.get_constructor(definition.class_name)
            instructions.append(
                Construct(
                    definition.class_name,
                    self._compile_arguments(definition.constructor, constructor),
                    keyword_names(constructor),
                )
            )

            for binding in definition.fields:
                owner = _field_owner(definition, binding.class_name)
                field = self.introspector.get_field(owner, binding.field_name)
                if field is None:
                    raise CompilationError(
                        f"Field {owner}.{binding.field_name} does not exist"
                    )
                if not field.public:
                    raise CompilationError(
                        f"Unable to compile access to non-public field {_describe_field(field)}"
                    )
                if not field.writable:
                    raise CompilationError(
                        f"Unable to compile write access to read-only field {_describe_field(field)}"
                    )
                instructions.append(
                    AssignField(binding.field_name, self.value_compiler.compile_value(binding.value))
                )

            for binding in definition.methods:
                method = self.introspector.get_method(definition.class_name, binding.method_name)
                if method is None:
                    raise CompilationError(
                        f"Method {definition.class_name}.{binding.method_name}() does not exist"
                    )
                instructions.append(
                    InvokeMethod(
                        binding.method_name,
                        self._compile_arguments(binding, method),
                        keyword_names(method),
                    )
                )

            return tuple(instructions)

    def resolve_parameters(
        self,
        binding: Optional[MethodBinding],
        function: Optional[CallableInfo],
    ) -> Tuple[Any, ...]:
        """Resolve raw (uncompiled) arguments for ``function``."""
        return self.resolver.resolve(binding, function)

    def _compile_arguments(
        self,
        binding: Optional[MethodBinding],
        function: Optional[CallableInfo],
    ) -> Tuple[Any, ...]:
        if function is None:
            return ()
        compiled = []
        for parameter, value in zip(function.parameters, self.resolve_parameters(binding, function)):
            if binding is not None and binding.has(parameter.position):
                compiled.append(self.value_compiler.compile_value(value))
                continue
            try:
                compiled.append(self.value_compiler.compile_value(value))
            except InvalidDefinition:
                raise
            except CompilationError as exc:
                raise InvalidDefinition(
                    f'The default value of parameter "{parameter.name}" of '
                    f"{function.display_name} cannot be compiled: {exc}"
                ) from exc
        return tuple(compiled)

    def _compile_lazy_definition(self, definition: ObjectDefinition) -> Tuple[Instruction, ...]:
        logger.debug("Compiling lazy entry %s", _describe_entry(definition))
        eager = self.compile(definition.with_lazy(False))
        return (InstallLazyPlaceholder(definition.class_name, eager),)

    def _assert_class_is_not_anonymous(self, definition: ObjectDefinition) -> None:
        if _is_synthetic_name(definition.class_name):
            raise CompilationError("Cannot compile anonymous classes")

    def _assert_class_is_instantiable(self, definition: ObjectDefinition) -> None:
        if self.introspector.is_instantiable(definition.class_name):
            return
        if not self.introspector.class_exists(definition.class_name):
            raise InvalidDefinition(
                f'Entry "{definition.name}" cannot be compiled: the class doesn\'t exist'
            )
        raise InvalidDefinition(
            f'Entry "{definition.name}" cannot be compiled: the class is not instantiable'
        )
