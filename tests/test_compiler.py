import pytest

from objcompiler.compiler import ObjectCreationCompiler
from objcompiler.definitions import USE_DEFAULT, ObjectDefinition, create, get
from objcompiler.errors import CompilationError, InvalidDefinition
from objcompiler.instructions import (
    AssignField,
    Construct,
    InstallLazyPlaceholder,
    InvokeMethod,
    NestedObject,
)


def compile_definition(definition):
    return ObjectCreationCompiler().compile(definition)


def pair_definition(lazy=False):
    return create("sample_types.Pair", "pair").constructor(5).field("x", "hi").lazy(lazy).build()


def test_no_argument_constructor_yields_single_construct():
    instructions = compile_definition(ObjectDefinition("empty", "sample_types.Empty"))

    assert instructions == (Construct("sample_types.Empty", ()),)


def test_constructor_with_default_and_public_field():
    instructions = compile_definition(pair_definition())

    assert instructions == (
        Construct("sample_types.Pair", (5, 10)),
        AssignField("x", "hi"),
    )


def test_lazy_definition_wraps_eager_sequence():
    instructions = compile_definition(pair_definition(lazy=True))

    assert instructions == (
        InstallLazyPlaceholder(
            "sample_types.Pair",
            (
                Construct("sample_types.Pair", (5, 10)),
                AssignField("x", "hi"),
            ),
        ),
    )


def test_lazy_compilation_does_not_mutate_definition():
    definition = pair_definition(lazy=True)
    compiler = ObjectCreationCompiler()

    first = compiler.compile(definition)
    assert definition.lazy is True
    second = compiler.compile(definition)

    assert isinstance(second[0], InstallLazyPlaceholder)
    assert first == second


def test_compiling_twice_is_idempotent():
    definition = (
        create("sample_types.Pair", "pair")
        .constructor(1, 2)
        .field("title", "t")
        .method("configure", "debug")
        .method("reset")
        .build()
    )
    compiler = ObjectCreationCompiler()

    assert compiler.compile(definition) == compiler.compile(definition)


def test_fields_and_methods_are_emitted_in_declaration_order():
    definition = (
        create("sample_types.Pair", "pair")
        .constructor(1)
        .method("reset")
        .field("title", "second")
        .method("configure", "info", True)
        .field("x", "first")
        .build()
    )

    instructions = compile_definition(definition)

    assert instructions == (
        Construct("sample_types.Pair", (1, 10)),
        AssignField("title", "second"),
        AssignField("x", "first"),
        InvokeMethod("reset", ()),
        InvokeMethod("configure", ("info", True)),
    )


def test_method_parameters_fall_back_to_defaults():
    definition = create("sample_types.Pair").constructor(1).method("configure", "warn").build()

    instructions = compile_definition(definition)

    assert instructions[-1] == InvokeMethod("configure", ("warn", False))


def test_use_default_placeholder_takes_declared_default():
    definition = create("sample_types.Pair").constructor(USE_DEFAULT, p1=3).build()

    with pytest.raises(InvalidDefinition, match=r"Parameter \$a of __init__\(\)"):
        compile_definition(definition)

    definition = create("sample_types.Pair").constructor(7, USE_DEFAULT).build()
    assert compile_definition(definition) == (Construct("sample_types.Pair", (7, 10)),)


def test_static_and_class_methods_have_no_receiver_parameter():
    definition = (
        create("sample_types.Pair")
        .constructor(1)
        .method("helper", "a")
        .method("build", "b")
        .build()
    )

    instructions = compile_definition(definition)

    assert instructions[1:] == (
        InvokeMethod("helper", ("a",)),
        InvokeMethod("build", ("b",)),
    )


def test_keyword_only_parameters_are_named():
    definition = create("sample_types.KeywordOnly").constructor("db.local", p2=5).build()

    instructions = compile_definition(definition)

    assert instructions == (
        Construct("sample_types.KeywordOnly", ("db.local", 80, 5), ("port", "timeout")),
    )


def test_variadic_parameters_are_not_formal_parameters():
    instructions = compile_definition(create("sample_types.Varargs").constructor("n").build())

    assert instructions == (Construct("sample_types.Varargs", ("n",)),)


def test_dataclass_constructor_and_nested_class_path():
    assert compile_definition(create("sample_types.Point").constructor(3).build()) == (
        Construct("sample_types.Point", (3, 0)),
    )
    assert compile_definition(create("sample_types:Outer.Inner").build()) == (
        Construct("sample_types:Outer.Inner", (1,)),
    )


def test_nested_definition_compiles_inline():
    point = create("sample_types.Point", "point").constructor(1, 2).build()
    definition = create("sample_types.Holder").constructor(point, get("logger")).build()

    instructions = compile_definition(definition)

    assert instructions == (
        Construct(
            "sample_types.Holder",
            (
                NestedObject("sample_types.Point", (Construct("sample_types.Point", (1, 2)),)),
                get("logger"),
            ),
        ),
    )


def test_bound_values_keep_their_identity():
    shared = [1, 2, 3]
    instructions = compile_definition(
        create("sample_types.Holder").constructor(shared, shared).build()
    )

    construct = instructions[0]
    assert construct.args[0] is shared
    assert construct.args[1] is shared


def test_missing_required_parameter_is_invalid_definition():
    with pytest.raises(InvalidDefinition, match="has no value defined or guessable") as exc_info:
        compile_definition(create("sample_types.Pair", "pair").build())

    assert exc_info.value.entry_name == "pair"


def test_missing_class_is_invalid_definition():
    definition = ObjectDefinition("ghost", "sample_types.Ghost")

    with pytest.raises(
        InvalidDefinition, match="Entry \"ghost\" cannot be compiled: the class doesn't exist"
    ) as exc_info:
        compile_definition(definition)

    assert exc_info.value.entry_name == "ghost"


def test_missing_module_is_invalid_definition():
    with pytest.raises(InvalidDefinition, match="the class doesn't exist"):
        compile_definition(ObjectDefinition("ghost", "no_such_module_anywhere.Thing"))


@pytest.mark.parametrize(
    "class_name",
    ["sample_types.Base", "sample_types.Greeter", "sample_types.Color"],
)
def test_non_instantiable_class_is_invalid_definition(class_name):
    with pytest.raises(InvalidDefinition, match="the class is not instantiable"):
        compile_definition(ObjectDefinition("entry", class_name))


def test_anonymous_class_is_rejected_before_anything_else():
    definition = ObjectDefinition("local", "sample_types:make_local_class.<locals>.Local")

    with pytest.raises(CompilationError, match="Cannot compile anonymous classes") as exc_info:
        compile_definition(definition)

    assert not isinstance(exc_info.value, InvalidDefinition)


def test_anonymous_class_guard_applies_to_lazy_definitions():
    definition = ObjectDefinition("local", "pkg.<locals>.Local", lazy=True)

    with pytest.raises(CompilationError, match="Cannot compile anonymous classes"):
        compile_definition(definition)


@pytest.mark.parametrize("value", ["secret", 0, None, get("other")])
def test_non_public_field_is_always_fatal(value):
    definition = create("sample_types.Pair").constructor(1).field("_secret", value).build()

    with pytest.raises(CompilationError, match="non-public field") as exc_info:
        compile_definition(definition)

    assert not isinstance(exc_info.value, InvalidDefinition)


def test_read_only_property_is_fatal():
    definition = create("sample_types.Pair").constructor(1).field("label", "x").build()

    with pytest.raises(CompilationError, match="read-only field sample_types.Pair.label"):
        compile_definition(definition)


def test_unknown_field_is_fatal():
    definition = create("sample_types.Pair").constructor(1).field("nope", 1).build()

    with pytest.raises(CompilationError, match="Field sample_types.Pair.nope does not exist"):
        compile_definition(definition)


def test_field_owner_override_is_checked():
    definition = (
        create("sample_types.Pair")
        .constructor(1)
        .field("value", 3, class_name="sample_types.Slotted")
        .build()
    )

    assert compile_definition(definition)[1] == AssignField("value", 3)


def test_missing_method_is_fatal():
    definition = create("sample_types.Pair").constructor(1).method("nope").build()

    with pytest.raises(CompilationError, match=r"Method sample_types.Pair.nope\(\) does not exist") as exc_info:
        compile_definition(definition)

    assert not isinstance(exc_info.value, InvalidDefinition)


def test_failure_after_valid_bindings_returns_nothing():
    definition = (
        create("sample_types.Pair")
        .constructor(1)
        .field("x", "ok")
        .method("reset")
        .method("configure")
        .build()
    )

    with pytest.raises(InvalidDefinition, match=r"Parameter \$level of configure\(\)"):
        compile_definition(definition)


def test_nested_definition_errors_name_the_nested_entry():
    nested = ObjectDefinition("inner", "sample_types.Pair")
    definition = create("sample_types.Holder", "outer").constructor(nested).build()

    with pytest.raises(InvalidDefinition) as exc_info:
        compile_definition(definition)

    assert exc_info.value.entry_name == "inner"


def test_extra_bindings_emit_warning():
    definition = create("sample_types.Pair").constructor(1, 2, 3).build()

    with pytest.warns(UserWarning, match=r"bindings at position\(s\) 2 are ignored"):
        instructions = compile_definition(definition)

    assert instructions == (Construct("sample_types.Pair", (1, 2)),)


def test_unsupported_value_is_rejected():
    definition = create("sample_types.Holder").constructor(object()).build()

    with pytest.raises(CompilationError, match="Unsupported value of type object"):
        compile_definition(definition)


def test_default_factory_parameter_is_invalid_definition():
    with pytest.raises(InvalidDefinition, match='parameter "tags" of __init__\\(\\)') as exc_info:
        compile_definition(create("sample_types.Tagged", "tagged").constructor("a").build())

    assert exc_info.value.entry_name == "tagged"
    assert "default factory" in exc_info.value.reason


def test_default_factory_parameter_can_be_bound_explicitly():
    definition = create("sample_types.Tagged").constructor("a", ["x"]).build()

    assert compile_definition(definition) == (Construct("sample_types.Tagged", ("a", ["x"])),)


def test_uncompilable_default_is_invalid_definition():
    with pytest.raises(
        InvalidDefinition,
        match='The default value of parameter "color" of __init__\\(\\) cannot be compiled',
    ) as exc_info:
        compile_definition(create("sample_types.Painter", "painter").build())

    assert exc_info.value.entry_name == "painter"
    assert isinstance(exc_info.value.__cause__, CompilationError)


def test_uncompilable_explicit_binding_stays_fatal():
    definition = create("sample_types.Painter").constructor(object()).build()

    with pytest.raises(CompilationError, match="Unsupported value of type object") as exc_info:
        compile_definition(definition)

    assert not isinstance(exc_info.value, InvalidDefinition)


def test_field_owner_override_naming_missing_class_is_invalid_definition():
    definition = (
        create("sample_types.Pair", "pair")
        .constructor(1)
        .field("x", "hi", class_name="sample_types.Missing")
        .build()
    )

    with pytest.raises(InvalidDefinition, match="Class sample_types.Missing does not exist") as exc_info:
        compile_definition(definition)

    assert exc_info.value.entry_name == "pair"
