# tests/unit/core/test_naming.py
"""Tests for generated class and module naming."""

from __future__ import annotations

import pytest

from typedprefs.core.naming import (
    implementation_class_name,
    implementation_module_name,
    implementation_module_path,
    pascal_case,
    snake_case,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("CacheExample", "cache_example"),
        ("HTTPPrefs", "http_prefs"),
        ("Prefs2Go", "prefs2_go"),
        ("prefs", "prefs"),
    ],
)
def test_snake_case(name: str, expected: str) -> None:
    assert snake_case(name) == expected


def test_pascal_case() -> None:
    assert pascal_case("list_point") == "ListPoint"
    assert pascal_case("dict") == "Dict"


class TestImplementationNames:
    def test_defaults(self) -> None:
        assert implementation_class_name("AppPrefs") == "AppPrefsImpl"
        assert implementation_module_name("AppPrefs") == "app_prefs_impl"

    def test_custom_suffixes(self) -> None:
        assert implementation_class_name("AppPrefs", "Store") == "AppPrefsStore"
        assert implementation_module_name("AppPrefs", "_gen") == "app_prefs_gen"

    def test_nested_names_are_flattened(self) -> None:
        assert implementation_class_name("Outer.Prefs") == "OuterPrefsImpl"
        assert implementation_module_name("Outer.Prefs") == "outer_prefs_impl"

    def test_module_path_in_interface_package(self) -> None:
        assert implementation_module_path("app.settings.prefs", "AppPrefs") == "app.settings.app_prefs_impl"
        assert implementation_module_path("prefs", "AppPrefs") == "app_prefs_impl"
