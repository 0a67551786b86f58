"""Source discovery by folder scanning.

Scans source roots recursively for ``.py`` files and parses each one into
InterfaceDecls. User sources are untrusted input: files that fail to read or
parse are reported as diagnostics and skipped, never raised.
"""

import fnmatch
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from typedprefs.contracts.declarations import SourceLocation
from typedprefs.contracts.diagnostics import DiagnosticSink
from typedprefs.contracts.enums import DiagnosticCode, Severity
from typedprefs.source.parser import ModuleParser, ParsedModule

logger = logging.getLogger(__name__)

# Directories that never contain declarations
EXCLUDED_DIRECTORIES: frozenset[str] = frozenset(
    {
        "__pycache__",
        ".git",
        ".hg",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
        ".tox",
        ".venv",
        "venv",
        "node_modules",
    }
)


def module_name_for(path: Path, root: Path) -> tuple[str, bool]:
    """Dotted module name of ``path`` relative to ``root``.

    Returns:
        (module name, True when the file is a package ``__init__``)
    """
    relative = path.relative_to(root).with_suffix("")
    parts = list(relative.parts)
    is_package = parts[-1] == "__init__"
    if is_package:
        parts = parts[:-1]
    return ".".join(parts), is_package


def iter_source_files(root: Path, exclude: Iterable[str] = ()) -> Iterator[Path]:
    """Yield ``.py`` files under ``root`` in a stable order.

    Args:
        root: Source root
        exclude: Glob patterns matched against the root-relative POSIX path
    """
    patterns = tuple(exclude)
    for path in sorted(root.rglob("*.py")):
        relative = path.relative_to(root)
        if any(part in EXCLUDED_DIRECTORIES for part in relative.parts[:-1]):
            continue
        if not all(part.isidentifier() for part in relative.with_suffix("").parts):
            # Not importable, so it cannot host an interface
            continue
        if any(fnmatch.fnmatch(relative.as_posix(), pattern) for pattern in patterns):
            logger.debug("Excluded by pattern: %s", relative)
            continue
        yield path


def discover_sources(
    roots: Iterable[Path],
    sink: DiagnosticSink,
    *,
    exclude: Iterable[str] = (),
    generated_marker: str | None = None,
) -> list[ParsedModule]:
    """Parse every source file under ``roots``.

    Args:
        roots: Source roots; module names are relative to their root
        sink: Receives SOURCE diagnostics for unreadable or unparsable files
        exclude: Glob patterns of files to skip
        generated_marker: First-line comment identifying generated modules,
            which are skipped

    Returns:
        Parsed modules in discovery order
    """
    parser = ModuleParser(sink)
    exclude = tuple(exclude)
    parsed: list[ParsedModule] = []

    for root in roots:
        if not root.is_dir():
            logger.warning("Source root does not exist: %s", root)
            continue

        for path in iter_source_files(root, exclude):
            module, is_package = module_name_for(path, root)
            if not module:
                continue
            try:
                source = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                sink.emit(
                    Severity.ERROR,
                    f"Cannot read source file: {exc}",
                    SourceLocation(path, None, module),
                    DiagnosticCode.SOURCE,
                )
                continue

            if generated_marker and source.startswith(f"# {generated_marker}"):
                logger.debug("Skipping generated module: %s", path)
                continue

            try:
                parsed.append(parser.parse(source, path, module, is_package=is_package))
            except SyntaxError as exc:
                sink.emit(
                    Severity.ERROR,
                    f"Cannot parse source file: {exc.msg}",
                    SourceLocation(path, exc.lineno, module),
                    DiagnosticCode.SOURCE,
                )
            except ValueError as exc:
                # ast.parse rejects source containing null bytes with ValueError
                sink.emit(
                    Severity.ERROR,
                    f"Cannot parse source file: {exc}",
                    SourceLocation(path, None, module),
                    DiagnosticCode.SOURCE,
                )

    logger.debug("Parsed %d source modules", len(parsed))
    return parsed
