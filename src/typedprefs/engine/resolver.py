# src/typedprefs/engine/resolver.py
"""Ancestor resolution: parsed sources first, then import + introspection.

Interfaces declared in the scanned sources are resolved from the symbol table
built by source discovery. Ancestors that live elsewhere (an installed
library, a module outside the source roots) are imported and read back
through ``inspect`` and ``typing``; their declarations are converted to the
same InterfaceDecl shape so the walker treats both alike.
"""

from __future__ import annotations

import importlib
import inspect
import sys
import typing
from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import structlog

from typedprefs.contracts.declarations import (
    _NO_DEFAULT,
    CacheDirective,
    InterfaceDecl,
    MethodDecl,
    ParamDecl,
    SourceLocation,
    StoreDirective,
)
from typedprefs.contracts.enums import DeclarationOrigin
from typedprefs.contracts.names import canonical_name
from typedprefs.contracts.types import TypeRef
from typedprefs.runtime.declarations import CACHE_ATTRIBUTE, DEFAULT_ATTRIBUTE, STORE_ATTRIBUTE
from typedprefs.source.parser import ParsedModule
from typedprefs.source.typerefs import from_runtime_annotation

logger = structlog.get_logger(__name__)

# Alias hops followed through package re-exports before giving up
_MAX_ALIAS_HOPS = 8


class SourceSymbolTable:
    """Interfaces of the current invocation's parsed sources, by qualified name."""

    def __init__(self, modules: Iterable[ParsedModule] = ()) -> None:
        self._interfaces: dict[str, InterfaceDecl] = {}
        self._modules: dict[str, ParsedModule] = {}
        for parsed in modules:
            self.add(parsed)

    def add(self, parsed: ParsedModule) -> None:
        self._modules[parsed.module] = parsed
        for decl in parsed.interfaces:
            self._interfaces[decl.qualified_name] = decl

    def lookup(self, qualified_name: str) -> InterfaceDecl | None:
        """Find an interface, following re-exports such as ``pkg.Name``."""
        name = canonical_name(qualified_name)
        for _ in range(_MAX_ALIAS_HOPS):
            if name in self._interfaces:
                return self._interfaces[name]
            target = self._reexport_target(name)
            if target is None or target == name:
                return None
            name = target
        return None

    def _reexport_target(self, qualified_name: str) -> str | None:
        # Longest parsed-module prefix whose import map binds the next segment
        parts = qualified_name.split(".")
        for split in range(len(parts) - 1, 0, -1):
            module = ".".join(parts[:split])
            parsed = self._modules.get(module)
            if parsed is None:
                continue
            head = parts[split]
            if head not in parsed.imports.aliases:
                return None
            rest = parts[split + 1 :]
            return ".".join([parsed.imports.aliases[head], *rest])
        return None

    def annotated(self) -> list[InterfaceDecl]:
        """Interfaces marked for generation, in discovery order."""
        return [decl for decl in self._interfaces.values() if decl.is_annotated]

    def __contains__(self, qualified_name: object) -> bool:
        return isinstance(qualified_name, str) and self.lookup(qualified_name) is not None

    def __len__(self) -> int:
        return len(self._interfaces)


@contextmanager
def importable(paths: Sequence[Path]) -> Iterator[None]:
    """Temporarily put ``paths`` at the front of ``sys.path``."""
    added = [str(path.resolve()) for path in paths]
    added = [entry for entry in dict.fromkeys(added) if entry not in sys.path]
    sys.path[:0] = added
    importlib.invalidate_caches()
    try:
        yield
    finally:
        for entry in added:
            if entry in sys.path:
                sys.path.remove(entry)


def _qualified(obj: Any) -> str:
    origin = typing.get_origin(obj) or obj
    module = getattr(origin, "__module__", "")
    name = getattr(origin, "__qualname__", None) or getattr(origin, "_name", None) or repr(origin)
    return canonical_name(f"{module}.{name}")


def _source_location(obj: Any, symbol: str) -> SourceLocation:
    try:
        path = inspect.getsourcefile(obj)
    except TypeError:
        path = None
    line: int | None
    try:
        line = inspect.getsourcelines(obj)[1]
    except (OSError, TypeError):
        line = None
    return SourceLocation(Path(path) if path else None, line, symbol)


def interface_from_class(cls: type) -> InterfaceDecl:
    """Describe a runtime class as an InterfaceDecl.

    Overloaded methods are recovered from ``typing.get_overloads``; annotations
    are evaluated with ``typing.get_type_hints`` and fall back to the raw
    annotations when a name only exists for type checkers.
    """
    module = cls.__module__
    qualname = cls.__qualname__
    own = cls.__dict__
    bases = tuple(_qualified(base) for base in own.get("__orig_bases__", cls.__bases__))

    methods: list[MethodDecl] = []
    for name, attribute in own.items():
        if name.startswith("__") and name.endswith("__"):
            continue
        for func in _declared_functions(module, f"{qualname}.{name}", attribute):
            methods.append(_method_from_function(func, name, module))

    store = own.get(STORE_ATTRIBUTE)
    cache = own.get(CACHE_ATTRIBUTE)
    return InterfaceDecl(
        module=module,
        name=qualname,
        bases=bases,
        methods=tuple(methods),
        location=_source_location(cls, f"{module}.{qualname}"),
        store=store if isinstance(store, StoreDirective) else None,
        cache=cache if isinstance(cache, CacheDirective) else None,
        origin=DeclarationOrigin.INTROSPECTION,
    )


def _declared_functions(module: str, qualname: str, attribute: Any) -> list[Callable[..., Any]]:
    # @overload replaces the class attribute with a shared placeholder; the
    # registry is keyed by module and qualified name.
    overloads = typing.get_overloads(SimpleNamespace(__module__=module, __qualname__=qualname))
    if overloads:
        return list(overloads)
    if inspect.isfunction(attribute) and attribute.__qualname__ == qualname:
        return [attribute]
    return []


def _method_from_function(func: Callable[..., Any], name: str, module: str) -> MethodDecl:
    signature = inspect.signature(func)
    try:
        hints = typing.get_type_hints(func)
    except (NameError, TypeError):
        hints = {}

    def annotation_of(key: str, raw: Any) -> TypeRef | None:
        if key in hints:
            return from_runtime_annotation(hints[key], module)
        if raw is inspect.Parameter.empty:
            return None
        return from_runtime_annotation(raw, module)

    params: list[ParamDecl] = []
    for index, parameter in enumerate(signature.parameters.values()):
        if index == 0 and parameter.kind in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD):
            continue
        if parameter.kind is parameter.VAR_POSITIONAL:
            params.append(ParamDecl(f"*{parameter.name}", None))
        elif parameter.kind is parameter.VAR_KEYWORD:
            params.append(ParamDecl(f"**{parameter.name}", None))
        else:
            params.append(ParamDecl(parameter.name, annotation_of(parameter.name, parameter.annotation)))

    cache = getattr(func, CACHE_ATTRIBUTE, None)
    code = getattr(func, "__code__", None)
    location = _source_location(func, f"{module}.{func.__qualname__}")
    if location.line is None and code is not None:
        location = SourceLocation(location.path, code.co_firstlineno, location.symbol)
    return MethodDecl(
        name=name,
        params=tuple(params),
        returns=annotation_of("return", signature.return_annotation),
        location=location,
        default=getattr(func, DEFAULT_ATTRIBUTE, _NO_DEFAULT),
        cache=cache if isinstance(cache, CacheDirective) else None,
        is_async=inspect.iscoroutinefunction(func),
    )


class IntrospectionResolver:
    """Resolve an interface by importing its module and reading the class.

    Args:
        search_paths: Directories made importable while resolving
    """

    def __init__(self, search_paths: Sequence[Path] = ()) -> None:
        self._search_paths = tuple(search_paths)
        self._resolved: dict[str, InterfaceDecl | None] = {}

    def resolve(self, qualified_name: str) -> InterfaceDecl | None:
        name = canonical_name(qualified_name)
        if name not in self._resolved:
            with importable(self._search_paths):
                cls = self._load_class(name)
            self._resolved[name] = interface_from_class(cls) if cls is not None else None
            logger.debug("Introspected interface", name=name, found=cls is not None)
        return self._resolved[name]

    @staticmethod
    def _load_class(qualified_name: str) -> type | None:
        parts = qualified_name.split(".")
        for split in range(len(parts) - 1, 0, -1):
            module_name = ".".join(parts[:split])
            try:
                target: Any = importlib.import_module(module_name)
            except ImportError:
                continue
            except Exception as exc:
                # Ancestor modules are user code; any failure at import time
                # leaves the name unresolved.
                logger.warning("Module failed to import", module=module_name, error=f"{type(exc).__name__}: {exc}")
                return None
            for attribute in parts[split:]:
                target = getattr(target, attribute, None)
                if target is None:
                    return None
            return target if inspect.isclass(target) else None
        return None


class InterfaceResolver:
    """Chains the source symbol table and the optional introspection fallback."""

    def __init__(self, symbols: SourceSymbolTable, introspection: IntrospectionResolver | None = None) -> None:
        self._symbols = symbols
        self._introspection = introspection

    def resolve(self, qualified_name: str) -> InterfaceDecl | None:
        decl = self._symbols.lookup(qualified_name)
        if decl is not None:
            return decl
        if self._introspection is None:
            return None
        return self._introspection.resolve(qualified_name)
