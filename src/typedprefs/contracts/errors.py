"""Exceptions raised across typedprefs.

Only unrecoverable conditions are exceptions. Problems in user declarations
are diagnostics (see ``contracts.diagnostics``).
"""

from pathlib import Path


class TypedPrefsError(Exception):
    """Base class for typedprefs exceptions."""


class EmissionError(TypedPrefsError):
    """Raised when a generated unit cannot be written.

    Emission failures abort the whole invocation: a partially written output
    tree is never reported as success.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write {path}: {reason}")


class StoreTypeError(TypedPrefsError, TypeError):
    """Raised by a store when a key is read with a kind other than it was written with."""

    def __init__(self, key: str, stored: str, requested: str) -> None:
        self.key = key
        self.stored = stored
        self.requested = requested
        super().__init__(f"Key {key!r} holds a {stored} value, not {requested}")


class ImplementationNotFoundError(TypedPrefsError, LookupError):
    """Raised when no generated implementation exists for an interface."""

    def __init__(self, interface: str, module: str, class_name: str) -> None:
        self.interface = interface
        self.module = module
        self.class_name = class_name
        super().__init__(
            f"No generated implementation {class_name!r} in module {module!r} for {interface}. Run 'typedprefs generate' first."
        )


class InvalidKeyError(TypedPrefsError, ValueError):
    """Raised by a store for a key that cannot be persisted as UTF-8 text."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid store key {key!r}: {reason}")
