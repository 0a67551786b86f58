"""Roles, kinds, modes and severities shared across generator boundaries."""

from enum import StrEnum


class Role(StrEnum):
    """Role a declared method plays for its setting."""

    GETTER = "getter"
    PUTTER = "putter"


class ValueKind(StrEnum):
    """Value kinds the store represents natively, plus the carrier fallback.

    The value doubles as the accessor suffix used for store calls
    (``get_string``, ``put_long``, ``get_object``...).
    """

    TEXT = "string"
    INTEGER = "int"
    LONG = "long"
    FLOAT = "float"
    BOOLEAN = "bool"
    STRING_SET = "string_set"
    CARRIER = "object"


class StoreMode(StrEnum):
    """Open mode passed to the store provider for named stores."""

    PRIVATE = "private"
    MULTI_PROCESS = "multi_process"


class CacheWriteMode(StrEnum):
    """What a putter does to the cache after writing the store."""

    EVICT = "evict"
    UPDATE = "update"


class Severity(StrEnum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"


class DiagnosticCode(StrEnum):
    """Category of a generator diagnostic.

    Values:
        STRUCTURAL: Method matches neither getter nor putter shape, or has
            an invalid default literal
        RESOLUTION: Ancestor interface could not be located
        CONFIGURATION: Directive combination the store cannot honour
        CONSISTENCY: Getter without putter or putter without getter
        TYPE_MISMATCH: Getter and putter of one key disagree on value type
        CARRIER_COLLISION: Two carrier types derived the same name
        SOURCE: A source file could not be parsed
    """

    STRUCTURAL = "structural"
    RESOLUTION = "resolution"
    CONFIGURATION = "configuration"
    CONSISTENCY = "consistency"
    TYPE_MISMATCH = "type-mismatch"
    CARRIER_COLLISION = "carrier-collision"
    SOURCE = "source"


class DeclarationOrigin(StrEnum):
    """Which resolution strategy produced an interface declaration."""

    SOURCE = "source"
    INTROSPECTION = "introspection"
