# src/typedprefs/emit/writer.py
"""Emitters: where rendered units go.

FileEmitter writes ``<output_dir>/<package path>/<module>.py``; MemoryEmitter
keeps the rendered sources (used by ``typedprefs check`` and by tests).
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog

from typedprefs.contracts.errors import EmissionError
from typedprefs.contracts.unit import GeneratedUnit
from typedprefs.emit.renderer import UnitRenderer

logger = structlog.get_logger(__name__)


class UnitEmitter(Protocol):
    def write(self, package_name: str, unit: GeneratedUnit) -> None:
        """Persist ``unit`` as a module of ``package_name``.

        Raises:
            EmissionError: If the unit cannot be written
        """
        ...


def module_path(output_dir: Path, package_name: str, unit: GeneratedUnit) -> Path:
    package_dir = output_dir.joinpath(*package_name.split(".")) if package_name else output_dir
    return package_dir / f"{unit.module_name}.py"


class FileEmitter:
    """Render and write units below ``output_dir``.

    Files are written atomically (temporary file + rename) so an interrupted
    run never leaves a truncated module behind.
    """

    def __init__(self, output_dir: Path, renderer: UnitRenderer | None = None) -> None:
        self._output_dir = output_dir
        self._renderer = renderer or UnitRenderer()
        self.written: list[Path] = []

    def write(self, package_name: str, unit: GeneratedUnit) -> None:
        path = module_path(self._output_dir, package_name, unit)
        source = self._renderer.render(unit)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(source)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise EmissionError(path, exc.strerror or str(exc)) from exc

        self.written.append(path)
        logger.info("Wrote implementation", path=str(path), class_name=unit.class_name)


class MemoryEmitter:
    """Render units and keep the sources keyed by qualified module name."""

    def __init__(self, renderer: UnitRenderer | None = None) -> None:
        self._renderer = renderer or UnitRenderer()
        self.sources: dict[str, str] = {}
        self.units: dict[str, GeneratedUnit] = {}

    def write(self, package_name: str, unit: GeneratedUnit) -> None:
        qualified = f"{package_name}.{unit.module_name}" if package_name else unit.module_name
        self.sources[qualified] = self._renderer.render(unit)
        self.units[qualified] = unit
