"""Source discovery: scan roots, parse modules into interface declarations."""

from typedprefs.source.discovery import discover_sources, iter_source_files, module_name_for
from typedprefs.source.parser import ImportMap, ModuleParser, ParsedModule

__all__ = [
    "ImportMap",
    "ModuleParser",
    "ParsedModule",
    "discover_sources",
    "iter_source_files",
    "module_name_for",
]
