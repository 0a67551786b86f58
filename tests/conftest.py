# tests/conftest.py
"""Shared test fixtures and helpers.

Fixtures:
- project: write interface sources into a temporary source root, run the
  generator over it and import the results
- provider: a fresh MemoryStoreProvider

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import importlib
import os
import sys
import textwrap
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from typedprefs.core.config import GeneratorSettings, OutputSettings, ResolutionSettings
from typedprefs.emit.writer import FileEmitter
from typedprefs.engine.context import DiagnosticCollector
from typedprefs.engine.processor import GenerationResult, run_generation
from typedprefs.runtime.loader import forget_instances, implementation_class
from typedprefs.runtime.store import MemoryStoreProvider

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


@pytest.fixture(autouse=True)
def _forget_loader_instances() -> Iterator[None]:
    """Loader instances are cached per provider; never leak them across tests."""
    yield
    forget_instances()


@pytest.fixture
def provider() -> MemoryStoreProvider:
    return MemoryStoreProvider()


@dataclass
class GeneratedProject:
    """A temporary source root after one generator run."""

    root: Path
    result: GenerationResult
    collector: DiagnosticCollector
    written: list[Path] = field(default_factory=list)

    def module(self, name: str) -> ModuleType:
        return importlib.import_module(name)

    def interface(self, qualified_name: str) -> type:
        module_name, _, class_name = qualified_name.rpartition(".")
        return getattr(self.module(module_name), class_name)  # type: ignore[no-any-return]

    def implementation(self, qualified_name: str) -> type:
        return implementation_class(self.interface(qualified_name))

    def source_of(self, qualified_module: str) -> str:
        return (self.root / (qualified_module.replace(".", "/") + ".py")).read_text(encoding="utf-8")

    def messages(self, code: str | None = None) -> list[str]:
        return [d.message for d in self.result.diagnostics if code is None or d.code == code]


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Callable[..., GeneratedProject]]:
    """Build a project from ``{relative path: source}`` and generate it.

    Keyword arguments are forwarded to GeneratorSettings (``output``,
    ``resolution``, ``exclude``...). Modules imported from the temporary
    root are purged from ``sys.modules`` afterwards so tests can reuse
    package names.
    """
    root = tmp_path / "src"
    root.mkdir()
    monkeypatch.syspath_prepend(str(root))

    def build(files: Mapping[str, str], **overrides: Any) -> GeneratedProject:
        for relative, text in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(text), encoding="utf-8")
        overrides.setdefault("output", OutputSettings())
        overrides.setdefault("resolution", ResolutionSettings())
        config = GeneratorSettings(source_roots=[root], **overrides)
        emitters: list[FileEmitter] = []

        def emitter_for(output_dir: Path) -> FileEmitter:
            emitter = FileEmitter(output_dir)
            emitters.append(emitter)
            return emitter

        collector = DiagnosticCollector()
        result = run_generation(config, emitter_for, collector=collector)
        importlib.invalidate_caches()
        written = [path for emitter in emitters for path in emitter.written]
        return GeneratedProject(root=root, result=result, collector=collector, written=written)

    yield build

    for name, module in list(sys.modules.items()):
        module_file = getattr(module, "__file__", None)
        if module_file and Path(module_file).is_relative_to(tmp_path):
            del sys.modules[name]
