# tests/unit/engine/test_type_mapper.py
"""Tests for value type mapping, carriers and default literals."""

from __future__ import annotations

import pytest

from typedprefs.contracts.enums import DiagnosticCode, ValueKind
from typedprefs.contracts.types import TypeRef
from typedprefs.engine.type_mapper import TypeMapper, carrier_base_name, native_kind, render_default
from tests.fixtures.factories import (
    BOOL,
    FLOAT,
    INT,
    LONG,
    POINT,
    STR,
    STRING_SET,
    make_context,
    make_getter,
    make_location,
)

HERE = make_location("app.prefs.AppPrefs.value")


class TestNativeKinds:
    @pytest.mark.parametrize(
        ("type_ref", "kind", "default"),
        [
            (STR, ValueKind.TEXT, '""'),
            (INT, ValueKind.INTEGER, "0"),
            (LONG, ValueKind.LONG, "0"),
            (FLOAT, ValueKind.FLOAT, "0.0"),
            (BOOL, ValueKind.BOOLEAN, "False"),
            (STRING_SET, ValueKind.STRING_SET, "set()"),
        ],
    )
    def test_native_mapping(self, type_ref: TypeRef, kind: ValueKind, default: str) -> None:
        context, _ = make_context()
        value_type = TypeMapper(context).resolve(type_ref, HERE)
        assert value_type.kind is kind
        assert value_type.accessor_suffix == kind.value
        assert value_type.default_literal == default
        assert value_type.carrier is None
        assert context.carriers == {}

    def test_nullable_native_defaults_to_none(self) -> None:
        context, _ = make_context()
        value_type = TypeMapper(context).resolve(INT.with_nullable(), HERE)
        assert value_type.kind is ValueKind.INTEGER
        assert value_type.default_literal == "None"

    def test_native_kind_ignores_nullability(self) -> None:
        assert native_kind(STR.with_nullable()) is ValueKind.TEXT
        assert native_kind(TypeRef.builtin("set", INT)) is None


class TestCarriers:
    def test_unmapped_type_gets_carrier(self) -> None:
        context, _ = make_context()
        value_type = TypeMapper(context).resolve(POINT, HERE)
        assert value_type.kind is ValueKind.CARRIER
        assert value_type.accessor_suffix == "object"
        assert value_type.carrier is not None
        assert value_type.carrier.name == "PointCarrier"
        assert value_type.default_literal == "self.PointCarrier(value=None)"

    def test_builtin_container_zero_value(self) -> None:
        context, _ = make_context()
        value_type = TypeMapper(context).resolve(TypeRef.builtin("list", POINT), HERE)
        assert value_type.carrier is not None
        assert value_type.carrier.name == "ListPointCarrier"
        assert value_type.default_literal == "self.ListPointCarrier(value=[])"

    def test_carrier_reused_per_type(self) -> None:
        context, _ = make_context()
        mapper = TypeMapper(context)
        first = mapper.resolve(POINT, HERE)
        second = mapper.resolve(POINT.with_nullable(), HERE)
        assert first.carrier is second.carrier
        assert second.default_literal == "None"
        assert len(context.carriers) == 1

    def test_colliding_names_get_suffix_and_warning(self) -> None:
        context, collector = make_context()
        mapper = TypeMapper(context)
        mapper.resolve(POINT, HERE)
        other = mapper.resolve(TypeRef("physics.vectors", "Point"), HERE)

        assert other.carrier is not None
        assert other.carrier.name == "PointCarrier2"
        (warning,) = collector.warnings
        assert warning.code is DiagnosticCode.CARRIER_COLLISION
        assert "geo.shapes.Point" in warning.message
        assert "physics.vectors.Point" in warning.message

    def test_carrier_base_names(self) -> None:
        assert carrier_base_name(TypeRef.builtin("dict", STR, INT)) == "DictStrIntCarrier"
        assert carrier_base_name(TypeRef("geo", "Outer.Inner")) == "InnerCarrier"
        assert carrier_base_name(TypeRef("typing", "Literal", (TypeRef("", "1"),))) == "Literal1Carrier"


class TestDefaultLiterals:
    def _literal(self, type_ref: TypeRef, value: object) -> tuple[str, int]:
        context, collector = make_context()
        mapper = TypeMapper(context)
        value_type = mapper.resolve(type_ref, HERE)
        literal = mapper.default_literal(value_type, make_getter("setting", type_ref, default=value))
        return literal, len(collector.errors)

    @pytest.mark.parametrize(
        ("type_ref", "value", "expected"),
        [
            (STR, "en", "'en'"),
            (INT, 11, "11"),
            (LONG, 2**40, str(2**40)),
            (FLOAT, 1, "1.0"),
            (BOOL, True, "True"),
            (STRING_SET, ["b", "a"], "{'a', 'b'}"),
            (STRING_SET, [], "set()"),
            (STR.with_nullable(), None, "None"),
            (POINT, (1, 2), "self.PointCarrier(value=(1, 2))"),
            (TypeRef.builtin("frozenset", STR), frozenset({"x"}), "self.FrozensetStrCarrier(value=frozenset({'x'}))"),
        ],
    )
    def test_valid_defaults(self, type_ref: TypeRef, value: object, expected: str) -> None:
        assert self._literal(type_ref, value) == (expected, 0)

    @pytest.mark.parametrize(
        ("type_ref", "value", "fallback"),
        [
            (INT, "eleven", "0"),
            (INT, True, "0"),
            (LONG, 2**64, "0"),
            (BOOL, 1, "False"),
            (STR, None, '""'),
            (STRING_SET, [1], "set()"),
        ],
    )
    def test_invalid_default_reported_and_zero_used(self, type_ref: TypeRef, value: object, fallback: str) -> None:
        assert self._literal(type_ref, value) == (fallback, 1)

    def test_no_default_uses_zero(self) -> None:
        context, _ = make_context()
        mapper = TypeMapper(context)
        value_type = mapper.resolve(STR, HERE)
        assert mapper.default_literal(value_type, make_getter("name", STR)) == '""'

    def test_render_default_float(self) -> None:
        context, _ = make_context()
        value_type = TypeMapper(context).resolve(FLOAT, HERE)
        assert render_default(value_type, 0.25) == "0.25"
        assert render_default(value_type, False) is None

    def test_render_default_non_finite_float(self) -> None:
        context, _ = make_context()
        value_type = TypeMapper(context).resolve(FLOAT, HERE)
        assert render_default(value_type, float("inf")) == "float('inf')"
        assert render_default(value_type, float("-inf")) == "float('-inf')"
        assert render_default(value_type, 10**400) is None
