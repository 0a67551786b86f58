"""Decorators and marker interfaces used to declare settings interfaces.

The decorators only record metadata on the decorated object. The generator
reads the same metadata statically from source, or through introspection for
ancestors that live outside the scanned sources.

Example:
    @preferences(name="app")
    @cached(cache_on_put=True)
    class AppPrefs(SettingsActions, CacheActions, Protocol):
        @overload
        def username(self) -> str: ...
        @overload
        def username(self, value: str) -> None: ...

        @overload
        @default(11)
        def volume(self) -> int: ...
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, NewType, Protocol, TypeVar

from typedprefs.contracts.declarations import CacheDirective, StoreDirective
from typedprefs.contracts.enums import StoreMode

if TYPE_CHECKING:
    from typedprefs.runtime.store import OnChangeListener, SettingsStore

T = TypeVar("T")

STORE_ATTRIBUTE = "__typedprefs_store__"
CACHE_ATTRIBUTE = "__typedprefs_cache__"
DEFAULT_ATTRIBUTE = "__typedprefs_default__"

# 64-bit integer setting, stored with the store's long accessors.
Long = NewType("Long", int)


def preferences(name: str = "", mode: StoreMode = StoreMode.PRIVATE) -> Callable[[type[T]], type[T]]:
    """Mark a class as a settings interface to generate an implementation for.

    Args:
        name: Named store to open; empty selects the provider's default store
        mode: Open mode forwarded to the provider for named stores
    """
    directive = StoreDirective(name=name, mode=StoreMode(mode))

    def decorate(cls: type[T]) -> type[T]:
        setattr(cls, STORE_ATTRIBUTE, directive)
        return cls

    return decorate


def cached(cache_size: int | None = None, *, cache_on_put: bool = False) -> Callable[[T], T]:
    """Request an LRU cache in front of the store.

    On an interface this enables caching; on a single method it only selects
    the put behaviour for that setting.

    Args:
        cache_size: Maximum cached entries; None sizes the cache to the number
            of getters
        cache_on_put: Update the cache on put instead of evicting the entry
    """
    if cache_size is not None and cache_size <= 0:
        raise ValueError(f"cache_size must be positive, got {cache_size}")
    directive = CacheDirective(cache_size=cache_size, cache_on_put=cache_on_put)

    def decorate(target: T) -> T:
        _reject_overload_dummy(target, "cached")
        setattr(target, CACHE_ATTRIBUTE, directive)
        return target

    return decorate


def default(value: Any) -> Callable[[T], T]:
    """Declare the value a getter returns while its key is unset.

    Must be a literal (str, int, float, bool, None, or a set/list/tuple/dict
    of literals) so the generator can reproduce it in source.
    """

    def decorate(func: T) -> T:
        _reject_overload_dummy(func, "default")
        setattr(func, DEFAULT_ATTRIBUTE, value)
        return func

    return decorate


def _reject_overload_dummy(target: Any, decorator: str) -> None:
    # @overload returns one shared placeholder; metadata set on it would leak
    # into every overloaded method of the process.
    if getattr(target, "__name__", None) == "_overload_dummy":
        raise TypeError(f"@{decorator} must be applied below @overload, directly on the declared method")


class SettingsActions(Protocol):
    """Lifecycle operations every generated implementation provides."""

    def get(self) -> "SettingsStore":
        """Return the underlying store."""
        ...

    def contains(self, key: str) -> bool: ...

    def remove(self, key: str) -> None: ...

    def register_on_change_listener(self, listener: "OnChangeListener") -> None: ...

    def unregister_on_change_listener(self, listener: "OnChangeListener") -> None: ...

    def clear(self) -> None:
        """Remove every key of the store, including keys other interfaces declared."""
        ...

    def clear_defined(self) -> None:
        """Remove only the keys declared by this interface."""
        ...

    def init_defaults(self) -> None:
        """Write each setting's current (default) value back to the store."""
        ...


class CacheActions(Protocol):
    """Operations present on implementations generated with caching."""

    def reset_cache(self) -> None:
        """Empty the cache without touching the store."""
        ...
