"""Parse Python source into interface declarations.

Every class of a parsed module becomes an InterfaceDecl so that ancestors
declared in the scanned sources resolve without importing anything. Classes
decorated with ``@preferences`` are the generation targets.

Decorator arguments and ``@default`` values are read with
``ast.literal_eval``: declarations are never executed.
"""

from __future__ import annotations

import ast
import builtins
from dataclasses import dataclass, field
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
from typedprefs.contracts.diagnostics import DiagnosticSink
from typedprefs.contracts.enums import DiagnosticCode, Severity, StoreMode
from typedprefs.contracts.names import (
    CACHED_DECORATOR,
    DEFAULT_DECORATOR,
    PREFERENCES_DECORATOR,
    canonical_name,
)
from typedprefs.contracts.types import BUILTINS_MODULE
from typedprefs.source.typerefs import from_annotation_node, split_qualified

# literal_eval raises TypeError for unhashable set members and dict keys, and
# deeply nested literals exhaust the stack or memory.
_LITERAL_ERRORS = (ValueError, TypeError, MemoryError, RecursionError)


@dataclass
class ImportMap:
    """Names bound at module level and what they refer to.

    Attributes:
        module: Name of the module being parsed
        is_package: True for ``__init__`` modules (affects relative imports)
        aliases: Bound name -> fully qualified target
        local_classes: Top-level class names defined in the module
        modules: Dotted names the import statements prove to be modules
    """

    module: str
    is_package: bool = False
    aliases: dict[str, str] = field(default_factory=dict)
    local_classes: set[str] = field(default_factory=set)
    modules: set[str] = field(default_factory=set)

    @classmethod
    def from_tree(cls, tree: ast.Module, module: str, is_package: bool) -> ImportMap:
        imports = cls(module=module, is_package=is_package)
        for node in tree.body:
            if isinstance(node, ast.ClassDef):
                imports.local_classes.add(node.name)
            elif isinstance(node, ast.Import):
                for alias in node.names:
                    imports._add_module(alias.name)
                    if alias.asname:
                        imports.aliases[alias.asname] = alias.name
                    else:
                        head = alias.name.split(".", 1)[0]
                        imports.aliases[head] = head
            elif isinstance(node, ast.ImportFrom):
                base = imports._absolute_from(node.module, node.level)
                if base:
                    imports._add_module(base)
                for alias in node.names:
                    if alias.name == "*":
                        continue
                    target = f"{base}.{alias.name}" if base else alias.name
                    imports.aliases[alias.asname or alias.name] = target
        return imports

    def _add_module(self, dotted: str) -> None:
        parts = dotted.split(".")
        for end in range(1, len(parts) + 1):
            self.modules.add(".".join(parts[:end]))

    def _absolute_from(self, module: str | None, level: int) -> str:
        if level == 0:
            return module or ""
        package_parts = self.module.split(".")
        if not self.is_package:
            package_parts = package_parts[:-1]
        if level > 1:
            package_parts = package_parts[: len(package_parts) - (level - 1)]
        base = ".".join(package_parts)
        if module:
            return f"{base}.{module}" if base else module
        return base

    def qualify(self, dotted: str) -> str:
        """Fully qualified, canonical name for a dotted name as written."""
        head, _, rest = dotted.partition(".")
        if head in self.aliases:
            target = self.aliases[head]
        elif head in self.local_classes:
            target = f"{self.module}.{head}"
        elif hasattr(builtins, head) and not rest:
            return f"{BUILTINS_MODULE}.{head}"
        else:
            target = f"{self.module}.{head}"
        return canonical_name(f"{target}.{rest}" if rest else target)

    def resolve(self, dotted: str) -> tuple[str, str]:
        """(module, qualified name) for a dotted type name as written."""
        head, _, rest = dotted.partition(".")
        if head in self.local_classes and head not in self.aliases:
            return self.module, dotted
        if hasattr(builtins, head) and not rest and head not in self.aliases:
            return BUILTINS_MODULE, head
        return split_qualified(self.qualify(dotted), self.modules)


@dataclass
class ParsedModule:
    """One parsed source file."""

    module: str
    path: Path
    imports: ImportMap
    interfaces: list[InterfaceDecl]

    @property
    def annotated(self) -> list[InterfaceDecl]:
        return [decl for decl in self.interfaces if decl.is_annotated]


class ModuleParser:
    """Turns one module's AST into InterfaceDecls.

    Problems with decorator arguments are reported to ``sink`` and the
    offending directive falls back to its defaults.
    """

    def __init__(self, sink: DiagnosticSink) -> None:
        self._sink = sink

    def parse(self, source: str, path: Path, module: str, *, is_package: bool = False) -> ParsedModule:
        """Parse ``source``.

        Raises:
            SyntaxError: If the source does not parse
            ValueError: If the source contains null bytes (Python 3.11)
        """
        tree = ast.parse(source, filename=str(path))
        imports = ImportMap.from_tree(tree, module, is_package)
        interfaces: list[InterfaceDecl] = []
        for node in tree.body:
            if isinstance(node, ast.ClassDef):
                self._collect(node, "", path, imports, interfaces)
        return ParsedModule(module=module, path=path, imports=imports, interfaces=interfaces)

    def _collect(
        self,
        node: ast.ClassDef,
        outer: str,
        path: Path,
        imports: ImportMap,
        out: list[InterfaceDecl],
    ) -> None:
        qualname = f"{outer}.{node.name}" if outer else node.name
        location = SourceLocation(path, node.lineno, f"{imports.module}.{qualname}")
        store: StoreDirective | None = None
        cache: CacheDirective | None = None
        for decorator in node.decorator_list:
            target = self._decorator_target(decorator, imports)
            if target == PREFERENCES_DECORATOR:
                store = self._store_directive(decorator, location)
            elif target == CACHED_DECORATOR:
                cache = self._cache_directive(decorator, location)

        bases = tuple(
            imports.qualify(dotted)
            for dotted in (self._base_name(base) for base in node.bases)
            if dotted is not None
        )
        methods: list[MethodDecl] = []
        for item in node.body:
            if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)):
                if item.name.startswith("__") and item.name.endswith("__"):
                    continue
                methods.append(self._method(item, path, imports, qualname))
            elif isinstance(item, ast.ClassDef):
                self._collect(item, qualname, path, imports, out)

        out.append(
            InterfaceDecl(
                module=imports.module,
                name=qualname,
                bases=bases,
                methods=tuple(methods),
                location=location,
                store=store,
                cache=cache,
            )
        )

    @staticmethod
    def _base_name(node: ast.expr) -> str | None:
        # Generic[T] / Protocol[T] subscripts name their origin
        if isinstance(node, ast.Subscript):
            node = node.value
        parts: list[str] = []
        while isinstance(node, ast.Attribute):
            parts.append(node.attr)
            node = node.value
        if not isinstance(node, ast.Name):
            return None
        parts.append(node.id)
        return ".".join(reversed(parts))

    def _decorator_target(self, decorator: ast.expr, imports: ImportMap) -> str | None:
        func = decorator.func if isinstance(decorator, ast.Call) else decorator
        dotted = self._base_name(func)
        if dotted is None:
            return None
        return imports.qualify(dotted)

    def _method(self, node: ast.FunctionDef | ast.AsyncFunctionDef, path: Path, imports: ImportMap, owner: str) -> MethodDecl:
        location = SourceLocation(path, node.lineno, f"{imports.module}.{owner}.{node.name}")
        positional = [*node.args.posonlyargs, *node.args.args]
        params = [
            ParamDecl(arg.arg, from_annotation_node(arg.annotation, imports.resolve) if arg.annotation else None)
            for arg in positional[1:]
        ]
        if node.args.vararg is not None:
            params.append(ParamDecl(f"*{node.args.vararg.arg}", None))
        params.extend(
            ParamDecl(arg.arg, from_annotation_node(arg.annotation, imports.resolve) if arg.annotation else None)
            for arg in node.args.kwonlyargs
        )
        if node.args.kwarg is not None:
            params.append(ParamDecl(f"**{node.args.kwarg.arg}", None))

        default_value: Any = _NO_DEFAULT
        cache: CacheDirective | None = None
        for decorator in node.decorator_list:
            target = self._decorator_target(decorator, imports)
            if target == DEFAULT_DECORATOR:
                default_value = self._default_value(decorator, location)
            elif target == CACHED_DECORATOR:
                cache = self._cache_directive(decorator, location)

        returns = from_annotation_node(node.returns, imports.resolve) if node.returns is not None else None
        return MethodDecl(
            name=node.name,
            params=tuple(params),
            returns=returns,
            location=location,
            default=default_value,
            cache=cache,
            is_async=isinstance(node, ast.AsyncFunctionDef),
        )

    def _arguments(self, decorator: ast.expr, names: tuple[str, ...], location: SourceLocation) -> dict[str, ast.expr] | None:
        if not isinstance(decorator, ast.Call):
            self._error(f"Decorator '{ast.unparse(decorator)}' must be called, e.g. '{ast.unparse(decorator)}()'", location)
            return None
        arguments: dict[str, ast.expr] = {}
        if len(decorator.args) > len(names):
            self._error(f"Too many positional arguments in '{ast.unparse(decorator)}'", location)
        for name, value in zip(names, decorator.args, strict=False):
            arguments[name] = value
        for keyword in decorator.keywords:
            if keyword.arg is None or keyword.arg not in names:
                self._error(f"Unsupported argument in '{ast.unparse(decorator)}'", location)
                continue
            arguments[keyword.arg] = keyword.value
        return arguments

    def _store_directive(self, decorator: ast.expr, location: SourceLocation) -> StoreDirective:
        arguments = self._arguments(decorator, ("name", "mode"), location)
        if arguments is None:
            return StoreDirective()
        name = self._literal(arguments.get("name"), "", location)
        if not isinstance(name, str):
            self._error(f"Store name must be a string literal, got {name!r}", location)
            name = ""
        return StoreDirective(name=name, mode=self._store_mode(arguments.get("mode"), location))

    def _store_mode(self, node: ast.expr | None, location: SourceLocation) -> StoreMode:
        if node is None:
            return StoreMode.PRIVATE
        if isinstance(node, ast.Attribute):
            try:
                return StoreMode[node.attr]
            except KeyError:
                pass
        elif isinstance(node, ast.Constant) and isinstance(node.value, str):
            try:
                return StoreMode(node.value)
            except ValueError:
                pass
        self._error(f"Unknown store mode '{ast.unparse(node)}'", location)
        return StoreMode.PRIVATE

    def _cache_directive(self, decorator: ast.expr, location: SourceLocation) -> CacheDirective:
        arguments = self._arguments(decorator, ("cache_size", "cache_on_put"), location)
        if arguments is None:
            return CacheDirective()
        cache_size = self._literal(arguments.get("cache_size"), None, location)
        if cache_size is not None and (isinstance(cache_size, bool) or not isinstance(cache_size, int) or cache_size <= 0):
            self._error(f"cache_size must be a positive int or None, got {cache_size!r}", location)
            cache_size = None
        cache_on_put = self._literal(arguments.get("cache_on_put"), False, location)
        if not isinstance(cache_on_put, bool):
            self._error(f"cache_on_put must be True or False, got {cache_on_put!r}", location)
            cache_on_put = False
        return CacheDirective(cache_size=cache_size, cache_on_put=cache_on_put)

    def _default_value(self, decorator: ast.expr, location: SourceLocation) -> Any:
        arguments = self._arguments(decorator, ("value",), location)
        if arguments is None or "value" not in arguments:
            self._error("@default requires a value", location)
            return _NO_DEFAULT
        try:
            return ast.literal_eval(arguments["value"])
        except _LITERAL_ERRORS:
            self._error(f"@default value must be a literal, got '{ast.unparse(arguments['value'])}'", location)
            return _NO_DEFAULT

    def _literal(self, node: ast.expr | None, fallback: Any, location: SourceLocation) -> Any:
        if node is None:
            return fallback
        try:
            return ast.literal_eval(node)
        except _LITERAL_ERRORS:
            self._error(f"Expected a literal, got '{ast.unparse(node)}'", location)
            return fallback

    def _error(self, message: str, location: SourceLocation) -> None:
        self._sink.emit(Severity.ERROR, message, location, DiagnosticCode.STRUCTURAL)
