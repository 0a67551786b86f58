"""Classified settings and resolved cache configuration."""

from dataclasses import dataclass

from typedprefs.contracts.declarations import SourceLocation
from typedprefs.contracts.enums import CacheWriteMode, Role
from typedprefs.contracts.keys import SettingKey
from typedprefs.contracts.types import ValueType


@dataclass(frozen=True, slots=True)
class SettingDescriptor:
    """One half (getter or putter) of a logical setting.

    Attributes:
        key: Persistence key, derived from the method name
        role: GETTER or PUTTER
        value_type: Resolved store representation
        default_literal: Source expression used as the store default
            (getters only)
        location: Declaration site of the method
        param_name: Putter parameter name
        fluent: Putter returns ``self`` for chaining
    """

    key: SettingKey
    role: Role
    value_type: ValueType
    location: SourceLocation
    default_literal: str | None = None
    param_name: str = "value"
    fluent: bool = False

    @property
    def uses_carrier(self) -> bool:
        return self.value_type.uses_carrier


@dataclass(frozen=True, slots=True)
class CacheConfig:
    """Cache attached to one generated unit.

    Attributes:
        max_entries: LRU capacity
        write_mode: Default put behaviour for all settings
        auto_sized: True when max_entries was derived from the getter count
        overrides: Per-setting write modes selected by method-level directives
    """

    max_entries: int
    write_mode: CacheWriteMode = CacheWriteMode.EVICT
    auto_sized: bool = False
    overrides: tuple[tuple[SettingKey, CacheWriteMode], ...] = ()

    def mode_for(self, key: SettingKey) -> CacheWriteMode:
        for override_key, mode in self.overrides:
            if override_key == key:
                return mode
        return self.write_mode
