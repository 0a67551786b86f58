"""Emission collaborator: render generated units and write them out."""

from typedprefs.emit.renderer import UnitRenderer
from typedprefs.emit.writer import FileEmitter, MemoryEmitter, UnitEmitter, module_path

__all__ = [
    "FileEmitter",
    "MemoryEmitter",
    "UnitEmitter",
    "UnitRenderer",
    "module_path",
]
