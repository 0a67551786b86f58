"""Generator core: walk, classify, map, assemble and check settings interfaces."""

from typedprefs.engine.assembler import UnitBuilder
from typedprefs.engine.context import DiagnosticCollector, GenerationContext
from typedprefs.engine.processor import GenerationResult, SettingsProcessor, run_generation
from typedprefs.engine.resolver import InterfaceResolver, IntrospectionResolver, SourceSymbolTable

__all__ = [
    "DiagnosticCollector",
    "GenerationContext",
    "GenerationResult",
    "InterfaceResolver",
    "IntrospectionResolver",
    "SettingsProcessor",
    "SourceSymbolTable",
    "UnitBuilder",
    "run_generation",
]
