# tests/fixtures/factories.py
"""Test-only factories for declarations and generation contexts.

Usage:
    from tests.fixtures.factories import make_getter, make_interface, make_context

Builders produce the same InterfaceDecl / MethodDecl shapes the source parser
and the introspection resolver produce, so engine components can be tested
without writing source files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from typedprefs.contracts.declarations import (
    _NO_DEFAULT,
    CacheDirective,
    InterfaceDecl,
    MethodDecl,
    ParamDecl,
    SourceLocation,
    StoreDirective,
)
from typedprefs.contracts.names import SETTINGS_ACTIONS
from typedprefs.contracts.types import TypeRef
from typedprefs.engine.context import DiagnosticCollector, GenerationContext

MODULE = "app.prefs"
PATH = Path("app/prefs.py")

STR = TypeRef.builtin("str")
INT = TypeRef.builtin("int")
BOOL = TypeRef.builtin("bool")
FLOAT = TypeRef.builtin("float")
LONG = TypeRef("typedprefs.runtime.declarations", "Long")
STRING_SET = TypeRef.builtin("set", STR)
NONE = TypeRef.none()
POINT = TypeRef("geo.shapes", "Point")


def make_location(symbol: str, line: int | None = 1) -> SourceLocation:
    return SourceLocation(PATH, line, symbol)


def make_getter(
    name: str,
    returns: TypeRef | None = STR,
    *,
    default: Any = _NO_DEFAULT,
    cache: CacheDirective | None = None,
    owner: str = "AppPrefs",
    line: int = 1,
) -> MethodDecl:
    return MethodDecl(
        name=name,
        params=(),
        returns=returns,
        location=make_location(f"{MODULE}.{owner}.{name}", line),
        default=default,
        cache=cache,
    )


def make_putter(
    name: str,
    value_type: TypeRef | None = STR,
    *,
    returns: TypeRef | None = NONE,
    param: str = "value",
    cache: CacheDirective | None = None,
    owner: str = "AppPrefs",
    line: int = 2,
) -> MethodDecl:
    return MethodDecl(
        name=name,
        params=(ParamDecl(param, value_type),),
        returns=returns,
        location=make_location(f"{MODULE}.{owner}.{name}", line),
        cache=cache,
    )


def make_interface(
    *methods: MethodDecl,
    name: str = "AppPrefs",
    module: str = MODULE,
    bases: tuple[str, ...] = (SETTINGS_ACTIONS, "typing.Protocol"),
    store: StoreDirective | None = StoreDirective("app"),
    cache: CacheDirective | None = None,
) -> InterfaceDecl:
    return InterfaceDecl(
        module=module,
        name=name,
        bases=bases,
        methods=tuple(methods),
        location=make_location(f"{module}.{name}"),
        store=store,
        cache=cache,
    )


def make_context(interface: InterfaceDecl | None = None) -> tuple[GenerationContext, DiagnosticCollector]:
    collector = DiagnosticCollector()
    return GenerationContext(interface=interface or make_interface(), sink=collector), collector
