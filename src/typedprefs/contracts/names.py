"""Well-known qualified names.

Declarations are matched by canonical qualified name, never by object
identity, so the parser and the introspection path agree on them.
"""

RUNTIME_MODULE = "typedprefs.runtime.declarations"

SETTINGS_ACTIONS = f"{RUNTIME_MODULE}.SettingsActions"
CACHE_ACTIONS = f"{RUNTIME_MODULE}.CacheActions"
PREFERENCES_DECORATOR = f"{RUNTIME_MODULE}.preferences"
CACHED_DECORATOR = f"{RUNTIME_MODULE}.cached"
DEFAULT_DECORATOR = f"{RUNTIME_MODULE}.default"
LONG_TYPE = f"{RUNTIME_MODULE}.Long"
STORE_MODE = "typedprefs.contracts.enums.StoreMode"

# Marker interfaces: structural, never setting declarations.
MARKER_INTERFACES: frozenset[str] = frozenset({SETTINGS_ACTIONS, CACHE_ACTIONS})

# Typing plumbing that may appear among an interface's bases.
STRUCTURAL_BASES: frozenset[str] = frozenset(
    {
        "builtins.object",
        "typing.Protocol",
        "typing.Generic",
        "typing_extensions.Protocol",
        "abc.ABC",
    }
)

# Public re-exports resolve to their defining module.
_PUBLIC_ALIASES: dict[str, str] = {
    "typedprefs.SettingsActions": SETTINGS_ACTIONS,
    "typedprefs.CacheActions": CACHE_ACTIONS,
    "typedprefs.preferences": PREFERENCES_DECORATOR,
    "typedprefs.cached": CACHED_DECORATOR,
    "typedprefs.default": DEFAULT_DECORATOR,
    "typedprefs.Long": LONG_TYPE,
    "typedprefs.StoreMode": STORE_MODE,
    "typedprefs.runtime.SettingsActions": SETTINGS_ACTIONS,
    "typedprefs.runtime.CacheActions": CACHE_ACTIONS,
    "typedprefs.runtime.preferences": PREFERENCES_DECORATOR,
    "typedprefs.runtime.cached": CACHED_DECORATOR,
    "typedprefs.runtime.default": DEFAULT_DECORATOR,
    "typedprefs.runtime.Long": LONG_TYPE,
    "typedprefs.contracts.StoreMode": STORE_MODE,
    "typing_extensions.Protocol": "typing.Protocol",
}


def canonical_name(qualified_name: str) -> str:
    """Map a public alias to the name of the defining module's object."""
    return _PUBLIC_ALIASES.get(qualified_name, qualified_name)


def is_traversable_base(qualified_name: str) -> bool:
    """True when an ancestor may declare settings and must be walked."""
    name = canonical_name(qualified_name)
    return name not in MARKER_INTERFACES and name not in STRUCTURAL_BASES
