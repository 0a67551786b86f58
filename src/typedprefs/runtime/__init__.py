"""Runtime support imported by generated implementations and by interface modules."""

from typedprefs.runtime.declarations import (
    CacheActions,
    Long,
    SettingsActions,
    cached,
    default,
    preferences,
)
from typedprefs.runtime.loader import get_preferences, implementation_class
from typedprefs.runtime.lru import LruCache
from typedprefs.runtime.store import (
    BaseStore,
    MemoryStore,
    MemoryStoreProvider,
    OnChangeListener,
    SettingsStore,
    StoreProvider,
)

__all__ = [
    "BaseStore",
    "CacheActions",
    "Long",
    "LruCache",
    "MemoryStore",
    "MemoryStoreProvider",
    "OnChangeListener",
    "SettingsActions",
    "SettingsStore",
    "StoreProvider",
    "cached",
    "default",
    "get_preferences",
    "implementation_class",
    "preferences",
]
