# src/typedprefs/engine/processor.py
"""SettingsProcessor: drives generation for each annotated interface.

Per interface, in order:

1. fresh GenerationContext
2. InterfaceWalker collects declared and inherited methods
3. MethodClassifier tags each method; TypeMapper resolves value types
4. KeyConsistencyChecker drops putters whose type disagrees with the getter
5. CacheBinder resolves the cache configuration
6. UnitBuilder assembles the GeneratedUnit
7. KeyConsistencyChecker reports keys missing a half
8. the unit is handed to the emitter

Diagnostics never stop processing; only EmissionError aborts the run.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

from typedprefs.contracts.declarations import InterfaceDecl, MethodDecl
from typedprefs.contracts.descriptors import SettingDescriptor
from typedprefs.contracts.diagnostics import Diagnostic, DiagnosticSink
from typedprefs.contracts.enums import DiagnosticCode, Role, Severity
from typedprefs.contracts.keys import SettingKey
from typedprefs.contracts.unit import GeneratedUnit
from typedprefs.core.config import GeneratorSettings
from typedprefs.core.naming import DEFAULT_CLASS_SUFFIX, DEFAULT_MODULE_SUFFIX
from typedprefs.emit.writer import UnitEmitter
from typedprefs.engine.assembler import UnitBuilder
from typedprefs.engine.cache_binder import CacheBinder
from typedprefs.engine.checker import KeyConsistencyChecker
from typedprefs.engine.classifier import Getter, MethodClassifier, Unrecognized
from typedprefs.engine.context import DiagnosticCollector, GenerationContext
from typedprefs.engine.resolver import InterfaceResolver, IntrospectionResolver, SourceSymbolTable
from typedprefs.engine.type_mapper import TypeMapper
from typedprefs.engine.walker import AncestorResolver, InterfaceWalker
from typedprefs.source.discovery import discover_sources

logger = structlog.get_logger(__name__)


class SettingsProcessor:
    """Generate implementation units for annotated interfaces.

    Args:
        resolver: Resolves ancestor names to declarations
        sink: Receives every diagnostic
        emitter: Receives each finished unit (None: build only)
        class_suffix: Implementation class name suffix
        module_suffix: Implementation module name suffix
    """

    def __init__(
        self,
        resolver: AncestorResolver,
        sink: DiagnosticSink,
        *,
        emitter: UnitEmitter | None = None,
        class_suffix: str = DEFAULT_CLASS_SUFFIX,
        module_suffix: str = DEFAULT_MODULE_SUFFIX,
    ) -> None:
        self._walker = InterfaceWalker(resolver)
        self._sink = sink
        self._emitter = emitter
        self._class_suffix = class_suffix
        self._module_suffix = module_suffix
        self._checker = KeyConsistencyChecker()
        self._binder = CacheBinder()

    def process(self, interface: InterfaceDecl) -> GeneratedUnit:
        """Build (and emit, if an emitter is set) the unit for ``interface``.

        Raises:
            EmissionError: If the emitter cannot write the unit
        """
        context = GenerationContext(interface=interface, sink=self._sink)
        classifier = MethodClassifier(interface)
        mapper = TypeMapper(context)
        method_directives: list[tuple[SettingKey, MethodDecl]] = []

        for declared in self._walker.traverse(interface, context):
            method = declared.method
            classification = classifier.classify(method, declared.owner)
            if isinstance(classification, Unrecognized):
                context.error(
                    f"Method '{method.name}' is neither a getter nor a putter: {classification.reason}",
                    method.location,
                    DiagnosticCode.STRUCTURAL,
                )
                continue

            role = Role.GETTER if isinstance(classification, Getter) else Role.PUTTER
            table = context.getters if role is Role.GETTER else context.putters
            if classification.key in table:
                # A more derived declaration already defines this half
                continue

            value_type = mapper.resolve(classification.value_type, method.location)
            if isinstance(classification, Getter):
                descriptor = SettingDescriptor(
                    key=classification.key,
                    role=Role.GETTER,
                    value_type=value_type,
                    location=method.location,
                    default_literal=mapper.default_literal(value_type, method),
                )
            else:
                descriptor = SettingDescriptor(
                    key=classification.key,
                    role=Role.PUTTER,
                    value_type=value_type,
                    location=method.location,
                    param_name=classification.param_name,
                    fluent=classification.fluent,
                )
            context.register(descriptor)
            if method.cache is not None and all(key != classification.key for key, _ in method_directives):
                method_directives.append((classification.key, method))

        self._checker.reconcile_types(context)
        context.cache = self._binder.configure(interface, context, method_directives)
        unit = UnitBuilder(
            context,
            context.cache,
            class_suffix=self._class_suffix,
            module_suffix=self._module_suffix,
            cache_binder=self._binder,
        ).build()
        self._checker.check_coverage(context)

        logger.info(
            "Generated implementation",
            interface=interface.qualified_name,
            implementation=f"{unit.qualified_module}.{unit.class_name}",
            settings=len(unit.keys),
            carriers=len(unit.carriers),
            cached=unit.caching,
            errors=context.error_count,
        )
        if self._emitter is not None:
            self._emitter.write(unit.package, unit)
        return unit

    def process_all(self, interfaces: Iterable[InterfaceDecl]) -> list[GeneratedUnit]:
        return [self.process(interface) for interface in interfaces]


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of one generator invocation."""

    units: tuple[GeneratedUnit, ...]
    diagnostics: tuple[Diagnostic, ...]

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity is Severity.ERROR)

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity is Severity.WARNING)

    def failed(self, *, strict: bool = False) -> bool:
        """True when the invocation should exit non-zero."""
        return bool(self.errors) or (strict and bool(self.warnings))


def run_generation(
    settings: GeneratorSettings,
    emitter_for: Callable[[Path], UnitEmitter | None],
    *,
    collector: DiagnosticCollector | None = None,
) -> GenerationResult:
    """Discover interfaces under every source root and generate them.

    Args:
        settings: Generator configuration
        emitter_for: Emitter for the output directory of a source root
            (None builds without writing)
        collector: Diagnostic collector (a fresh one by default)

    Raises:
        EmissionError: If a unit cannot be written
    """
    collector = collector if collector is not None else DiagnosticCollector()
    roots: Sequence[Path] = settings.source_roots
    parsed_by_root = {
        root: discover_sources(
            [root],
            collector,
            exclude=settings.exclude,
            generated_marker=settings.output.header_comment,
        )
        for root in roots
    }

    symbols = SourceSymbolTable(module for modules in parsed_by_root.values() for module in modules)
    introspection = (
        IntrospectionResolver([*roots, *settings.resolution.import_paths])
        if settings.resolution.allow_introspection
        else None
    )
    resolver = InterfaceResolver(symbols, introspection)

    units: list[GeneratedUnit] = []
    for root, modules in parsed_by_root.items():
        processor = SettingsProcessor(
            resolver,
            collector,
            emitter=emitter_for(settings.output_dir_for(root)),
            class_suffix=settings.output.class_suffix,
            module_suffix=settings.output.module_suffix,
        )
        for parsed in modules:
            units.extend(processor.process_all(parsed.annotated))

    logger.info(
        "Generation finished",
        units=len(units),
        errors=len(collector.errors),
        warnings=len(collector.warnings),
    )
    return GenerationResult(units=tuple(units), diagnostics=collector.diagnostics)
