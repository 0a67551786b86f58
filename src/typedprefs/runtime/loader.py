"""Locate and instantiate generated implementations by naming convention.

Generated classes live next to their interface: ``app.prefs.AppPrefs`` is
implemented by ``app.app_prefs_impl.AppPrefsImpl`` with the default suffixes.
Instances are cached per (provider, interface) pair so every caller shares one
cache layer.
"""

import importlib
import threading
import weakref
from typing import Any, TypeVar, cast

from typedprefs.contracts.errors import ImplementationNotFoundError
from typedprefs.core.naming import (
    DEFAULT_CLASS_SUFFIX,
    DEFAULT_MODULE_SUFFIX,
    implementation_class_name,
    implementation_module_path,
)
from typedprefs.runtime.store import StoreProvider

T = TypeVar("T")

_instances: "weakref.WeakKeyDictionary[Any, dict[type, Any]]" = weakref.WeakKeyDictionary()
_lock = threading.Lock()


def implementation_class(
    interface: type[T],
    *,
    class_suffix: str = DEFAULT_CLASS_SUFFIX,
    module_suffix: str = DEFAULT_MODULE_SUFFIX,
) -> type[T]:
    """Import the generated implementation class of ``interface``.

    Raises:
        ImplementationNotFoundError: If the module or class does not exist
    """
    module_path = implementation_module_path(interface.__module__, interface.__qualname__, module_suffix)
    class_name = implementation_class_name(interface.__qualname__, class_suffix)
    try:
        module = importlib.import_module(module_path)
    except ModuleNotFoundError as e:
        if e.name != module_path:
            raise
        raise ImplementationNotFoundError(
            f"{interface.__module__}.{interface.__qualname__}", module_path, class_name
        ) from None
    try:
        return cast("type[T]", getattr(module, class_name))
    except AttributeError:
        raise ImplementationNotFoundError(
            f"{interface.__module__}.{interface.__qualname__}", module_path, class_name
        ) from None


def get_preferences(
    interface: type[T],
    provider: StoreProvider,
    *,
    class_suffix: str = DEFAULT_CLASS_SUFFIX,
    module_suffix: str = DEFAULT_MODULE_SUFFIX,
) -> T:
    """Return the shared implementation instance of ``interface`` for ``provider``."""
    with _lock:
        per_provider = _instances.setdefault(provider, {})
        if interface not in per_provider:
            impl = implementation_class(interface, class_suffix=class_suffix, module_suffix=module_suffix)
            per_provider[interface] = impl(provider)  # type: ignore[call-arg]
        return cast("T", per_provider[interface])


def forget_instances() -> None:
    """Drop every cached instance (tests, or after swapping providers)."""
    with _lock:
        _instances.clear()
