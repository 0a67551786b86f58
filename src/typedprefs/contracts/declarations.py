"""Structural description of declared settings interfaces.

These types answer: "What did the user declare?" They are produced by the
source parser and by runtime introspection alike, so the walker never needs
to know which strategy resolved an interface.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from typedprefs.contracts.enums import CacheWriteMode, DeclarationOrigin, StoreMode
from typedprefs.contracts.types import TypeRef


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Most specific place a diagnostic can point at."""

    path: Path | None
    line: int | None
    symbol: str

    def __str__(self) -> str:
        if self.path is None:
            return self.symbol
        if self.line is None:
            return f"{self.path}: {self.symbol}"
        return f"{self.path}:{self.line}: {self.symbol}"


@dataclass(frozen=True, slots=True)
class StoreDirective:
    """Store selection from ``@preferences``.

    An empty name selects the provider's default store.
    """

    name: str = ""
    mode: StoreMode = StoreMode.PRIVATE

    @property
    def uses_default_store(self) -> bool:
        return not self.name


@dataclass(frozen=True, slots=True)
class CacheDirective:
    """Caching request from ``@cached``.

    Attributes:
        cache_size: Maximum entries; None means auto sizing (one slot per
            getter key)
        cache_on_put: True selects update mode, False evict mode
    """

    cache_size: int | None = None
    cache_on_put: bool = False

    @property
    def write_mode(self) -> CacheWriteMode:
        return CacheWriteMode.UPDATE if self.cache_on_put else CacheWriteMode.EVICT


@dataclass(frozen=True, slots=True)
class ParamDecl:
    """A declared method parameter (``self`` excluded)."""

    name: str
    annotation: TypeRef | None


_NO_DEFAULT: Any = object()


@dataclass(frozen=True)
class MethodDecl:
    """A method declared on an interface.

    Attributes:
        name: Method name
        params: Parameters after ``self``
        returns: Return annotation, None when the annotation is missing
        default: Value from ``@default``; check ``has_default`` first
        cache: Per-setting ``@cached`` directive, if any
        is_async: Declared with ``async def``
        location: Declaration site
    """

    name: str
    params: tuple[ParamDecl, ...]
    returns: TypeRef | None
    location: SourceLocation
    default: Any = _NO_DEFAULT
    cache: CacheDirective | None = None
    is_async: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not _NO_DEFAULT


@dataclass(frozen=True)
class InterfaceDecl:
    """A declared or ancestor interface.

    Attributes:
        module: Defining module
        name: Qualified name inside the module
        bases: Canonical qualified names of the direct ancestors
        methods: Declared methods in declaration order (overloads expanded)
        store: ``@preferences`` directive; None for plain ancestors
        cache: Interface-level ``@cached`` directive
        location: Declaration site
        origin: Resolution strategy that produced this declaration
    """

    module: str
    name: str
    bases: tuple[str, ...]
    methods: tuple[MethodDecl, ...]
    location: SourceLocation
    store: StoreDirective | None = None
    cache: CacheDirective | None = None
    origin: DeclarationOrigin = DeclarationOrigin.SOURCE

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}"

    @property
    def package(self) -> str:
        return self.module.rpartition(".")[0]

    @property
    def is_annotated(self) -> bool:
        return self.store is not None

    @property
    def type_ref(self) -> TypeRef:
        return TypeRef(self.module, self.name)
