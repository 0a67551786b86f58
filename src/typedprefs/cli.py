# src/typedprefs/cli.py
"""typedprefs Command Line Interface.

Entry point for the typedprefs CLI tool.
"""

from __future__ import annotations

from pathlib import Path

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from typedprefs import __version__
from typedprefs.contracts.enums import Severity
from typedprefs.contracts.errors import EmissionError
from typedprefs.core.config import GeneratorSettings, load_settings
from typedprefs.emit.renderer import UnitRenderer
from typedprefs.emit.writer import FileEmitter, MemoryEmitter, UnitEmitter
from typedprefs.engine.processor import GenerationResult, run_generation

__all__ = ["app"]

DEFAULT_SETTINGS_FILE = Path("typedprefs.yaml")

app = typer.Typer(
    name="typedprefs",
    help="typedprefs: generate typed settings implementations from declared interfaces.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"typedprefs version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables (TYPEDPREFS_* overrides) from a .env file.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # We handle existence check ourselves for better error message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """typedprefs: generate typed settings implementations from declared interfaces."""
    from typedprefs.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "WARNING"
    configure_logging(json_output=json_logs, level=log_level)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _resolve_settings(
    settings: Path | None,
    roots: list[Path] | None,
    out: Path | None,
    no_introspection: bool,
) -> GeneratorSettings:
    """Load the settings file (explicit, or ./typedprefs.yaml if present) and apply CLI overrides."""
    config_path = settings.expanduser() if settings is not None else None
    if config_path is None and DEFAULT_SETTINGS_FILE.exists():
        config_path = DEFAULT_SETTINGS_FILE

    try:
        config = load_settings(config_path)
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {config_path}: {e.problem}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {config_path}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None

    update: dict[str, object] = {}
    if roots:
        update["source_roots"] = roots
    if out is not None:
        update["output"] = config.output.model_copy(update={"directory": out})
    if no_introspection:
        update["resolution"] = config.resolution.model_copy(update={"allow_introspection": False})
    return config.model_copy(update=update) if update else config


def _report(result: GenerationResult, *, strict: bool) -> None:
    for diagnostic in result.diagnostics:
        color = typer.colors.RED if diagnostic.severity is Severity.ERROR else typer.colors.YELLOW
        typer.secho(diagnostic.format(), fg=color, err=True)
    typer.echo(
        f"{len(result.units)} implementation(s), {len(result.errors)} error(s), {len(result.warnings)} warning(s)",
        err=True,
    )
    if result.failed(strict=strict):
        raise typer.Exit(1)


@app.command()
def generate(
    roots: list[Path] | None = typer.Argument(
        None,
        help="Source roots to scan (default: from settings, else ./src).",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file (default: ./typedprefs.yaml if present).",
    ),
    out: Path | None = typer.Option(
        None,
        "--out",
        "-o",
        help="Write generated packages under this directory instead of the source roots.",
    ),
    no_introspection: bool = typer.Option(
        False,
        "--no-introspection",
        help="Never import modules to resolve ancestors outside the scanned sources.",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit non-zero on warnings as well as errors.",
    ),
) -> None:
    """Generate implementations for every @preferences interface."""
    config = _resolve_settings(settings, roots, out, no_introspection)
    renderer = UnitRenderer(config.output.header_comment)
    emitters: list[FileEmitter] = []

    def emitter_for(output_dir: Path) -> UnitEmitter:
        emitter = FileEmitter(output_dir, renderer)
        emitters.append(emitter)
        return emitter

    try:
        result = run_generation(config, emitter_for)
    except EmissionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    for emitter in emitters:
        for path in emitter.written:
            typer.echo(f"wrote {path}")
    _report(result, strict=strict or config.fail_on_warning)


@app.command()
def check(
    roots: list[Path] | None = typer.Argument(
        None,
        help="Source roots to scan (default: from settings, else ./src).",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file (default: ./typedprefs.yaml if present).",
    ),
    no_introspection: bool = typer.Option(
        False,
        "--no-introspection",
        help="Never import modules to resolve ancestors outside the scanned sources.",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit non-zero on warnings as well as errors.",
    ),
) -> None:
    """Validate interfaces and report diagnostics without writing files."""
    config = _resolve_settings(settings, roots, None, no_introspection)
    emitter = MemoryEmitter(UnitRenderer(config.output.header_comment))
    result = run_generation(config, lambda _output_dir: emitter)

    for module in sorted(emitter.sources):
        typer.echo(f"ok {module}")
    _report(result, strict=strict or config.fail_on_warning)


if __name__ == "__main__":
    app()
