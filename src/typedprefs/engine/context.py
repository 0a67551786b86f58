# src/typedprefs/engine/context.py
"""Per-interface generation state and diagnostic collection.

A GenerationContext is created fresh for every top-level interface and is
never shared: descriptors, carriers and cache configuration of one interface
can never leak into the unit of another.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from typedprefs.contracts.declarations import InterfaceDecl, SourceLocation
from typedprefs.contracts.descriptors import CacheConfig, SettingDescriptor
from typedprefs.contracts.diagnostics import Diagnostic, DiagnosticSink
from typedprefs.contracts.enums import DiagnosticCode, Role, Severity
from typedprefs.contracts.keys import SettingKey
from typedprefs.contracts.types import CarrierSpec, TypeRef

logger = structlog.get_logger(__name__)


class DiagnosticCollector:
    """DiagnosticSink that records every diagnostic and logs it.

    Used by the processor for a whole invocation; the CLI reads the
    collected diagnostics to decide the exit status.
    """

    def __init__(self) -> None:
        self._diagnostics: list[Diagnostic] = []

    def emit(
        self,
        severity: Severity,
        message: str,
        location: SourceLocation,
        code: DiagnosticCode,
    ) -> None:
        diagnostic = Diagnostic(severity=severity, code=code, message=message, location=location)
        self._diagnostics.append(diagnostic)
        logger.info(
            "diagnostic",
            severity=severity.value,
            code=code.value,
            message=message,
            location=str(location),
        )

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return tuple(self._diagnostics)

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self._diagnostics if d.severity is Severity.ERROR)

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self._diagnostics if d.severity is Severity.WARNING)

    @property
    def has_errors(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self._diagnostics)

    def with_code(self, code: DiagnosticCode) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self._diagnostics if d.code is code)

    def __len__(self) -> int:
        return len(self._diagnostics)


@dataclass
class GenerationContext:
    """Mutable state for generating one interface's implementation.

    Attributes:
        interface: The top-level annotated interface
        sink: Receiver of diagnostics
        getters: Getter descriptors by key (first declaration wins)
        putters: Putter descriptors by key (first declaration wins)
        order: Keys in first-seen order
        carriers: Carrier per distinct unmapped value type
        cache: Resolved cache configuration, None when caching is off
        error_count: Errors reported for this interface
    """

    interface: InterfaceDecl
    sink: DiagnosticSink
    getters: dict[SettingKey, SettingDescriptor] = field(default_factory=dict)
    putters: dict[SettingKey, SettingDescriptor] = field(default_factory=dict)
    order: list[SettingKey] = field(default_factory=list)
    carriers: dict[TypeRef, CarrierSpec] = field(default_factory=dict)
    cache: CacheConfig | None = None
    error_count: int = 0

    def error(self, message: str, location: SourceLocation, code: DiagnosticCode) -> None:
        self.error_count += 1
        self.sink.emit(Severity.ERROR, message, location, code)

    def warning(self, message: str, location: SourceLocation, code: DiagnosticCode) -> None:
        self.sink.emit(Severity.WARNING, message, location, code)

    def register(self, descriptor: SettingDescriptor) -> bool:
        """Record a descriptor unless its key/role is already declared.

        Returns:
            True if recorded, False if a more derived declaration already won
        """
        table = self.getters if descriptor.role is Role.GETTER else self.putters
        if descriptor.key in table:
            logger.debug(
                "Shadowed declaration ignored",
                key=str(descriptor.key),
                role=descriptor.role.value,
                location=str(descriptor.location),
            )
            return False
        table[descriptor.key] = descriptor
        if descriptor.key not in self.order:
            self.order.append(descriptor.key)
        return True

    def drop(self, key: SettingKey, role: Role) -> None:
        table = self.getters if role is Role.GETTER else self.putters
        table.pop(key, None)
        if key not in self.getters and key not in self.putters and key in self.order:
            self.order.remove(key)

    @property
    def keys(self) -> tuple[SettingKey, ...]:
        return tuple(self.order)

    @property
    def getter_keys(self) -> tuple[SettingKey, ...]:
        return tuple(key for key in self.order if key in self.getters)

    @property
    def paired_keys(self) -> tuple[SettingKey, ...]:
        return tuple(key for key in self.order if key in self.getters and key in self.putters)
