# tests/unit/source/test_typerefs.py
"""Tests for annotation normalization.

Source annotations and runtime annotations of the same type must produce
equal TypeRefs; the generator compares types by TypeRef equality only.
"""

from __future__ import annotations

import ast
import typing
from typing import Dict, List, Optional, Union

import pytest

from typedprefs.contracts.types import TypeRef
from typedprefs.runtime.declarations import Long
from typedprefs.source.parser import ImportMap
from typedprefs.source.typerefs import (
    from_annotation_node,
    from_runtime_annotation,
    split_qualified,
    union_of,
)

IMPORTS = ImportMap.from_tree(
    ast.parse(
        "import typing\n"
        "from typing import Dict, List, Literal, Optional, Union\n"
        "from geo.shapes import Point\n"
        "from typedprefs import Long\n"
    ),
    "app.prefs",
    False,
)


def from_source(text: str) -> TypeRef:
    return from_annotation_node(ast.parse(text, mode="eval").body, IMPORTS.resolve)


class TestSplitQualified:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("geo.shapes.Point", ("geo.shapes", "Point")),
            ("geo.shapes.Outer.Inner", ("geo.shapes", "Outer.Inner")),
            ("int", ("builtins", "int")),
            ("geo.helper", ("geo", "helper")),
            ("typedprefs.Long", ("typedprefs.runtime.declarations", "Long")),
        ],
    )
    def test_split(self, name: str, expected: tuple[str, str]) -> None:
        assert split_qualified(name) == expected

    def test_known_module_prefix_wins(self) -> None:
        assert split_qualified("PIL.Image.Image", {"PIL", "PIL.Image"}) == ("PIL.Image", "Image")
        assert split_qualified("geo.shapes.Outer.Inner", {"geo"}) == ("geo.shapes", "Outer.Inner")


class TestFromSource:
    def test_builtin(self) -> None:
        assert from_source("int") == TypeRef.builtin("int")

    def test_typing_aliases_normalize(self) -> None:
        assert from_source("List[int]") == from_source("list[int]")
        assert from_source("Dict[str, Point]") == TypeRef.builtin(
            "dict", TypeRef.builtin("str"), TypeRef("geo.shapes", "Point")
        )

    def test_optional_forms_agree(self) -> None:
        expected = TypeRef.builtin("str").with_nullable()
        assert from_source("Optional[str]") == expected
        assert from_source("str | None") == expected
        assert from_source("Union[str, None]") == expected
        assert from_source("None | str") == expected

    def test_union_of_several(self) -> None:
        ref = from_source("int | str | None")
        assert ref.name == "Union"
        assert ref.nullable
        assert ref.args == (TypeRef.builtin("int"), TypeRef.builtin("str"))

    def test_forward_reference_string(self) -> None:
        assert from_source("'Point'") == TypeRef("geo.shapes", "Point")

    def test_long_is_canonical(self) -> None:
        assert from_source("Long") == TypeRef("typedprefs.runtime.declarations", "Long")

    def test_attribute_access(self) -> None:
        assert from_source("typing.List[str]") == TypeRef.builtin("list", TypeRef.builtin("str"))

    def test_literal_arguments(self) -> None:
        ref = from_source("Literal['a', 1]")
        assert ref == TypeRef("typing", "Literal", (TypeRef("", "'a'"), TypeRef("", "1")))

    def test_none(self) -> None:
        assert from_source("None").is_none


class TestFromRuntime:
    def test_builtin_generics(self) -> None:
        assert from_runtime_annotation(list[int], __name__) == TypeRef.builtin("list", TypeRef.builtin("int"))
        assert from_runtime_annotation(List[int], __name__) == TypeRef.builtin("list", TypeRef.builtin("int"))
        assert from_runtime_annotation(Dict[str, int], __name__).name == "dict"

    def test_optional(self) -> None:
        expected = TypeRef.builtin("str").with_nullable()
        assert from_runtime_annotation(Optional[str], __name__) == expected
        assert from_runtime_annotation(str | None, __name__) == expected
        assert from_runtime_annotation(Union[None, str], __name__) == expected

    def test_newtype_long(self) -> None:
        assert from_runtime_annotation(Long, __name__) == TypeRef("typedprefs.runtime.declarations", "Long")

    def test_annotated_unwraps(self) -> None:
        assert from_runtime_annotation(typing.Annotated[int, "meta"], __name__) == TypeRef.builtin("int")

    def test_user_class(self) -> None:
        class Local:
            pass

        ref = from_runtime_annotation(Local, __name__)
        assert ref.module == __name__
        assert ref.name.endswith("Local")

    def test_none_type(self) -> None:
        assert from_runtime_annotation(type(None), __name__).is_none
        assert from_runtime_annotation(None, __name__).is_none

    def test_string_annotation_resolves_against_module(self) -> None:
        assert from_runtime_annotation("dict[str, int]", __name__) == TypeRef.builtin(
            "dict", TypeRef.builtin("str"), TypeRef.builtin("int")
        )
        assert from_runtime_annotation("Long", __name__) == TypeRef("typedprefs.runtime.declarations", "Long")


class TestUnionOf:
    def test_only_none(self) -> None:
        assert union_of([TypeRef.none()]).is_none

    def test_nullable_member_stays_nullable(self) -> None:
        assert union_of([TypeRef.builtin("int").with_nullable()]) == TypeRef.builtin("int").with_nullable()
