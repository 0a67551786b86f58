# tests/unit/engine/test_classifier.py
"""Tests for getter/putter classification."""

from __future__ import annotations

import dataclasses

import pytest

from typedprefs.contracts.declarations import MethodDecl, ParamDecl
from typedprefs.contracts.keys import SettingKey
from typedprefs.contracts.types import TypeRef
from typedprefs.engine.classifier import RESERVED_NAMES, Getter, MethodClassifier, Putter, Unrecognized
from tests.fixtures.factories import (
    INT,
    NONE,
    STR,
    make_getter,
    make_interface,
    make_location,
    make_putter,
)

TOP = make_interface()


def classify(method: MethodDecl) -> Getter | Putter | Unrecognized:
    return MethodClassifier(TOP).classify(method)


class TestGetters:
    def test_zero_params_with_return_is_getter(self) -> None:
        result = classify(make_getter("username", STR))
        assert isinstance(result, Getter)
        assert result.key == SettingKey("username")
        assert result.value_type == STR
        assert not result.has_default

    def test_default_is_carried(self) -> None:
        result = classify(make_getter("volume", INT, default=11))
        assert isinstance(result, Getter)
        assert result.has_default
        assert result.default == 11

    def test_nullable_return_allowed(self) -> None:
        assert isinstance(classify(make_getter("nickname", STR.with_nullable())), Getter)

    def test_missing_return_annotation(self) -> None:
        result = classify(make_getter("username", None))
        assert isinstance(result, Unrecognized)
        assert "no return annotation" in result.reason

    def test_none_return(self) -> None:
        result = classify(make_getter("nothing", NONE))
        assert isinstance(result, Unrecognized)
        assert "must return a value" in result.reason


class TestPutters:
    def test_one_param_returning_none(self) -> None:
        result = classify(make_putter("username", STR, param="name"))
        assert isinstance(result, Putter)
        assert result.param_name == "name"
        assert result.value_type == STR
        assert not result.fluent

    def test_missing_return_annotation_is_putter(self) -> None:
        result = classify(make_putter("username", STR, returns=None))
        assert isinstance(result, Putter)

    @pytest.mark.parametrize(
        "returns",
        [
            TypeRef("typing", "Self"),
            TypeRef("typing_extensions", "Self"),
            TypeRef("app.prefs", "AppPrefs"),
        ],
    )
    def test_fluent_returns(self, returns: TypeRef) -> None:
        result = classify(make_putter("username", STR, returns=returns))
        assert isinstance(result, Putter)
        assert result.fluent

    def test_fluent_on_declaring_ancestor(self) -> None:
        owner = make_interface(name="BasePrefs", store=None)
        method = make_putter("theme", STR, returns=TypeRef("app.prefs", "BasePrefs"))
        result = MethodClassifier(TOP).classify(method, owner)
        assert isinstance(result, Putter)
        assert result.fluent

    def test_nullable_interface_return_is_not_fluent(self) -> None:
        result = classify(make_putter("username", STR, returns=TypeRef("app.prefs", "AppPrefs", nullable=True)))
        assert isinstance(result, Unrecognized)

    def test_other_return_rejected(self) -> None:
        result = classify(make_putter("username", STR, returns=INT))
        assert isinstance(result, Unrecognized)
        assert "must return None or the interface, not 'int'" in result.reason

    def test_unannotated_param(self) -> None:
        result = classify(make_putter("username", None))
        assert isinstance(result, Unrecognized)
        assert "no type annotation" in result.reason

    def test_variadic_param(self) -> None:
        method = dataclasses.replace(make_putter("tags"), params=(ParamDecl("*values", None),))
        result = classify(method)
        assert isinstance(result, Unrecognized)
        assert "variadic" in result.reason

    def test_default_on_putter_rejected(self) -> None:
        method = dataclasses.replace(make_putter("volume", INT), default=3)
        result = classify(method)
        assert isinstance(result, Unrecognized)
        assert "getters only" in result.reason


class TestRejected:
    def test_two_params(self) -> None:
        method = MethodDecl(
            "pair",
            (ParamDecl("a", STR), ParamDecl("b", STR)),
            NONE,
            make_location("app.prefs.AppPrefs.pair"),
        )
        result = classify(method)
        assert isinstance(result, Unrecognized)
        assert "got 2" in result.reason

    @pytest.mark.parametrize("name", sorted(RESERVED_NAMES))
    def test_reserved_names(self, name: str) -> None:
        result = classify(make_getter(name, STR))
        assert isinstance(result, Unrecognized)
        assert "reserved" in result.reason

    def test_leading_underscore(self) -> None:
        result = classify(make_getter("_hidden", STR))
        assert isinstance(result, Unrecognized)
        assert "underscore" in result.reason

    def test_async(self) -> None:
        method = dataclasses.replace(make_getter("token", STR), is_async=True)
        result = classify(method)
        assert isinstance(result, Unrecognized)
        assert "async" in result.reason
