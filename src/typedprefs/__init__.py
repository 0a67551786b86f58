"""
typedprefs: typed settings classes generated from declared interfaces.

Declare a Protocol with getter/putter pairs, run ``typedprefs generate``, and
get an implementation backed by a key-value store with optional LRU caching.
"""

from typedprefs.contracts.enums import StoreMode
from typedprefs.runtime.declarations import (
    CacheActions,
    Long,
    SettingsActions,
    cached,
    default,
    preferences,
)
from typedprefs.runtime.loader import get_preferences

__version__ = "0.4.0"

__all__ = [
    "CacheActions",
    "Long",
    "SettingsActions",
    "StoreMode",
    "__version__",
    "cached",
    "default",
    "get_preferences",
    "preferences",
]
