# src/typedprefs/engine/classifier.py
"""MethodClassifier: getter, putter or neither.

Shapes:
    getter  ``def key(self) -> T``
    putter  ``def key(self, value: T) -> None``
    fluent  ``def key(self, value: T) -> Self`` (or the interface type)

The key is the method name verbatim, so a getter and putter pair up by
sharing a name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from typedprefs.contracts.declarations import InterfaceDecl, MethodDecl
from typedprefs.contracts.keys import SettingKey
from typedprefs.contracts.types import TypeRef

# Names taken by the lifecycle operations of every generated class
RESERVED_NAMES: frozenset[str] = frozenset(
    {
        "get",
        "contains",
        "remove",
        "register_on_change_listener",
        "unregister_on_change_listener",
        "clear",
        "clear_defined",
        "init_defaults",
        "reset_cache",
    }
)

_SELF_TYPES: frozenset[tuple[str, str]] = frozenset({("typing", "Self"), ("typing_extensions", "Self")})


@dataclass(frozen=True, slots=True)
class Getter:
    key: SettingKey
    value_type: TypeRef
    method: MethodDecl

    @property
    def has_default(self) -> bool:
        return self.method.has_default

    @property
    def default(self) -> Any:
        return self.method.default


@dataclass(frozen=True, slots=True)
class Putter:
    key: SettingKey
    value_type: TypeRef
    param_name: str
    fluent: bool
    method: MethodDecl


@dataclass(frozen=True, slots=True)
class Unrecognized:
    method: MethodDecl
    reason: str


Classification = Getter | Putter | Unrecognized


class MethodClassifier:
    """Classify declared methods of one top-level interface.

    Args:
        top: The interface being generated; a putter returning it is fluent
    """

    def __init__(self, top: InterfaceDecl) -> None:
        self._top = top

    def classify(self, method: MethodDecl, owner: InterfaceDecl | None = None) -> Classification:
        """Decide the role of ``method`` declared on ``owner`` (default: top)."""
        if method.name in RESERVED_NAMES:
            return Unrecognized(method, f"'{method.name}' is reserved for a generated lifecycle method")
        if method.name.startswith("_"):
            return Unrecognized(method, "setting names must not start with an underscore")
        if method.is_async:
            return Unrecognized(method, "settings accessors cannot be async")

        key = SettingKey.from_method_name(method.name)

        if not method.params:
            if method.returns is None:
                return Unrecognized(method, "getter has no return annotation")
            if method.returns.is_none and not method.returns.nullable:
                return Unrecognized(method, "getter must return a value, not None")
            return Getter(key, method.returns, method)

        if len(method.params) == 1:
            param = method.params[0]
            if param.name.startswith("*"):
                return Unrecognized(method, f"putter parameter '{param.name}' must not be variadic")
            if param.annotation is None:
                return Unrecognized(method, f"putter parameter '{param.name}' has no type annotation")
            fluent = self._is_fluent(method.returns, owner or self._top)
            if method.returns is not None and not method.returns.is_none and not fluent:
                return Unrecognized(
                    method,
                    f"putter must return None or the interface, not '{method.returns.render()}'",
                )
            if method.has_default:
                return Unrecognized(method, "@default applies to getters only")
            return Putter(key, param.annotation, param.name, fluent, method)

        return Unrecognized(
            method,
            f"expected no parameters (getter) or one parameter (putter), got {len(method.params)}",
        )

    def _is_fluent(self, returns: TypeRef | None, owner: InterfaceDecl) -> bool:
        if returns is None or returns.nullable:
            return False
        if (returns.module, returns.name) in _SELF_TYPES:
            return True
        bare = TypeRef(returns.module, returns.name)
        return bare in (self._top.type_ref, owner.type_ref)
