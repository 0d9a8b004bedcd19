from __future__ import annotations

import objcompiler
import pytest

from objcompiler.errors import CompilationFailed


def test_public_api_exposes_version_and_about() -> None:
    assert isinstance(objcompiler.__version__, str)
    text = objcompiler.about(print_output=False)
    assert "Instruction order" in text
    assert "Lazy entries" in text


def test_public_api_all_contains_core_exports() -> None:
    exported = set(objcompiler.__all__)
    assert "ObjectCreationCompiler" in exported
    assert "compile_definitions" in exported
    assert "create" in exported
    assert "about" in exported
    assert "__version__" in exported


def test_public_api_end_to_end() -> None:
    definition = objcompiler.create("sample_types.Pair", "pair").constructor(5).field("x", "hi").build()

    assert objcompiler.ObjectCreationCompiler().compile(definition) == (
        objcompiler.Construct("sample_types.Pair", (5, 10)),
        objcompiler.AssignField("x", "hi"),
    )


def test_public_api_reports_missing_class_with_actionable_message() -> None:
    with pytest.raises(CompilationFailed, match="the class doesn't exist"):
        objcompiler.compile_definitions([objcompiler.ObjectDefinition("x", "sample_types.Nope")])
