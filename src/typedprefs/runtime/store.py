"""Key-value store capability used by generated implementations.

Generated code talks to a SettingsStore through one typed accessor pair per
value kind (``get_string``/``put_string``, ``get_object``/``put_object``...).
Every put is committed before it returns. Putting ``None`` removes the key.

Backends implement BaseStore's five primitives; typing rules, listener
notification and locking live here once.
"""

import copy
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from typedprefs.contracts.enums import StoreMode, ValueKind
from typedprefs.contracts.errors import InvalidKeyError, StoreTypeError

_LONG_MIN = -(2**63)
_LONG_MAX = 2**63 - 1

DEFAULT_STORE_NAME = "__default__"


class OnChangeListener(Protocol):
    """Called after a key changes; ``key`` is None after ``clear()``."""

    def __call__(self, store: "SettingsStore", key: str | None) -> None: ...


@runtime_checkable
class SettingsStore(Protocol):
    """Typed key-value persistence used by generated settings classes."""

    def get_string(self, key: str, default: str | None) -> str | None: ...

    def put_string(self, key: str, value: str | None) -> None: ...

    def get_int(self, key: str, default: int | None) -> int | None: ...

    def put_int(self, key: str, value: int | None) -> None: ...

    def get_long(self, key: str, default: int | None) -> int | None: ...

    def put_long(self, key: str, value: int | None) -> None: ...

    def get_float(self, key: str, default: float | None) -> float | None: ...

    def put_float(self, key: str, value: float | None) -> None: ...

    def get_bool(self, key: str, default: bool | None) -> bool | None: ...

    def put_bool(self, key: str, value: bool | None) -> None: ...

    def get_string_set(self, key: str, default: set[str] | None) -> set[str] | None: ...

    def put_string_set(self, key: str, value: Iterable[str] | None) -> None: ...

    def get_object(self, key: str, default: Any) -> Any: ...

    def put_object(self, key: str, value: Any) -> None: ...

    def contains(self, key: str) -> bool: ...

    def keys(self) -> list[str]: ...

    def remove(self, key: str) -> None: ...

    def remove_keys(self, keys: Iterable[str]) -> None: ...

    def clear(self) -> None: ...

    def register_listener(self, listener: OnChangeListener) -> None: ...

    def unregister_listener(self, listener: OnChangeListener) -> None: ...


@runtime_checkable
class StoreProvider(Protocol):
    """Hands out stores to generated constructors."""

    def named(self, name: str, mode: StoreMode) -> SettingsStore: ...

    def default(self) -> SettingsStore: ...


def coerce_value(kind: ValueKind, value: Any) -> Any:
    """Validate ``value`` for ``kind`` and return the form the store keeps.

    Raises:
        TypeError: If the value cannot be stored as ``kind``
    """
    if kind is ValueKind.TEXT:
        if not isinstance(value, str):
            raise TypeError(f"expected str, got {type(value).__name__}")
        return value
    if kind in (ValueKind.INTEGER, ValueKind.LONG):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"expected int, got {type(value).__name__}")
        if kind is ValueKind.LONG and not _LONG_MIN <= value <= _LONG_MAX:
            raise TypeError(f"value {value} does not fit in a 64-bit long")
        return value
    if kind is ValueKind.FLOAT:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"expected float, got {type(value).__name__}")
        return float(value)
    if kind is ValueKind.BOOLEAN:
        if not isinstance(value, bool):
            raise TypeError(f"expected bool, got {type(value).__name__}")
        return value
    if kind is ValueKind.STRING_SET:
        if isinstance(value, str) or not isinstance(value, Iterable):
            raise TypeError(f"expected a collection of str, got {type(value).__name__}")
        items = frozenset(value)
        if not all(isinstance(item, str) for item in items):
            raise TypeError("string sets may only contain str")
        return items
    return value


def check_key(key: str) -> str:
    """Return ``key`` if every backend can persist it.

    Raises:
        InvalidKeyError: If the key is not a str or is not encodable as UTF-8
    """
    if not isinstance(key, str):
        raise InvalidKeyError(repr(key), f"expected str, got {type(key).__name__}")
    try:
        key.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidKeyError(key, exc.reason) from None
    return key


class BaseStore(ABC):
    """Shared behaviour for store backends.

    Subclasses implement the raw primitives; values reaching ``_save`` are
    already validated by ``coerce_value``.
    """

    def __init__(self) -> None:
        self._listeners: list[OnChangeListener] = []
        self._listener_lock = threading.Lock()

    @abstractmethod
    def _load(self, key: str) -> tuple[ValueKind, Any] | None:
        """Return (kind, value) for ``key`` or None when absent."""

    @abstractmethod
    def _save(self, key: str, kind: ValueKind, value: Any) -> None: ...

    @abstractmethod
    def _delete(self, keys: list[str]) -> list[str]:
        """Delete ``keys`` in one commit; returns the keys that existed."""

    @abstractmethod
    def _delete_all(self) -> None: ...

    @abstractmethod
    def keys(self) -> list[str]: ...

    def _get(self, key: str, kind: ValueKind, default: Any) -> Any:
        entry = self._load(check_key(key))
        if entry is None:
            return default
        stored_kind, value = entry
        if stored_kind is not kind:
            raise StoreTypeError(key, stored_kind.name.lower(), kind.name.lower())
        if kind is ValueKind.STRING_SET:
            return set(value)
        return value

    def _put(self, key: str, kind: ValueKind, value: Any) -> None:
        check_key(key)
        if value is None:
            self.remove(key)
            return
        self._save(key, kind, coerce_value(kind, value))
        self._notify(key)

    def get_string(self, key: str, default: str | None) -> str | None:
        return self._get(key, ValueKind.TEXT, default)

    def put_string(self, key: str, value: str | None) -> None:
        self._put(key, ValueKind.TEXT, value)

    def get_int(self, key: str, default: int | None) -> int | None:
        return self._get(key, ValueKind.INTEGER, default)

    def put_int(self, key: str, value: int | None) -> None:
        self._put(key, ValueKind.INTEGER, value)

    def get_long(self, key: str, default: int | None) -> int | None:
        return self._get(key, ValueKind.LONG, default)

    def put_long(self, key: str, value: int | None) -> None:
        self._put(key, ValueKind.LONG, value)

    def get_float(self, key: str, default: float | None) -> float | None:
        return self._get(key, ValueKind.FLOAT, default)

    def put_float(self, key: str, value: float | None) -> None:
        self._put(key, ValueKind.FLOAT, value)

    def get_bool(self, key: str, default: bool | None) -> bool | None:
        return self._get(key, ValueKind.BOOLEAN, default)

    def put_bool(self, key: str, value: bool | None) -> None:
        self._put(key, ValueKind.BOOLEAN, value)

    def get_string_set(self, key: str, default: set[str] | None) -> set[str] | None:
        return self._get(key, ValueKind.STRING_SET, default)

    def put_string_set(self, key: str, value: Iterable[str] | None) -> None:
        self._put(key, ValueKind.STRING_SET, value)

    def get_object(self, key: str, default: Any) -> Any:
        return self._get(key, ValueKind.CARRIER, default)

    def put_object(self, key: str, value: Any) -> None:
        self._put(key, ValueKind.CARRIER, value)

    def contains(self, key: str) -> bool:
        return self._load(check_key(key)) is not None

    def remove(self, key: str) -> None:
        if self._delete([check_key(key)]):
            self._notify(key)

    def remove_keys(self, keys: Iterable[str]) -> None:
        for key in self._delete([check_key(key) for key in keys]):
            self._notify(key)

    def clear(self) -> None:
        self._delete_all()
        self._notify(None)

    def register_listener(self, listener: OnChangeListener) -> None:
        with self._listener_lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unregister_listener(self, listener: OnChangeListener) -> None:
        with self._listener_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, key: str | None) -> None:
        with self._listener_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(self, key)


class MemoryStore(BaseStore):
    """Process-local store.

    Object values are deep-copied in and out, so callers never share state
    with the store, the same as with a persistent backend.
    """

    def __init__(self) -> None:
        super().__init__()
        self._data: dict[str, tuple[ValueKind, Any]] = {}
        self._lock = threading.RLock()

    def _load(self, key: str) -> tuple[ValueKind, Any] | None:
        with self._lock:
            entry = self._data.get(key)
        if entry is None:
            return None
        kind, value = entry
        if kind is ValueKind.CARRIER:
            return kind, copy.deepcopy(value)
        return entry

    def _save(self, key: str, kind: ValueKind, value: Any) -> None:
        if kind is ValueKind.CARRIER:
            value = copy.deepcopy(value)
        with self._lock:
            self._data[key] = (kind, value)

    def _delete(self, keys: list[str]) -> list[str]:
        with self._lock:
            return [key for key in keys if self._data.pop(key, None) is not None]

    def _delete_all(self) -> None:
        with self._lock:
            self._data.clear()

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)


class MemoryStoreProvider:
    """StoreProvider handing out one MemoryStore per store name."""

    def __init__(self) -> None:
        self._stores: dict[str, MemoryStore] = {}
        self._modes: dict[str, StoreMode] = {}
        self._lock = threading.Lock()

    def named(self, name: str, mode: StoreMode) -> MemoryStore:
        with self._lock:
            self._modes[name] = mode
            return self._stores.setdefault(name, MemoryStore())

    def default(self) -> MemoryStore:
        with self._lock:
            return self._stores.setdefault(DEFAULT_STORE_NAME, MemoryStore())

    def mode_of(self, name: str) -> StoreMode | None:
        return self._modes.get(name)
