# src/typedprefs/core/config.py
"""
Configuration schema and loading for the generator.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_HEADER_COMMENT = "Generated by typedprefs. Do not edit."


class OutputSettings(BaseModel):
    """Where and how generated implementations are written."""

    model_config = {"frozen": True}

    directory: Path | None = Field(
        default=None,
        description="Root to write generated packages under (default: the source root they came from)",
    )
    class_suffix: str = Field(default="Impl", description="Appended to the interface name")
    module_suffix: str = Field(default="_impl", description="Appended to the snake_case interface name")
    header_comment: str = Field(
        default=DEFAULT_HEADER_COMMENT,
        description="First-line comment of every generated module",
    )

    @field_validator("class_suffix", "module_suffix")
    @classmethod
    def validate_suffix(cls, v: str) -> str:
        if not v or not f"x{v}".isidentifier():
            raise ValueError(f"suffix must extend an identifier, got {v!r}")
        return v

    @field_validator("header_comment")
    @classmethod
    def validate_header(cls, v: str) -> str:
        if "\n" in v:
            raise ValueError("header_comment must be a single line")
        return v


class ResolutionSettings(BaseModel):
    """How ancestors outside the scanned sources are located."""

    model_config = {"frozen": True}

    allow_introspection: bool = Field(
        default=True,
        description="Import ancestors not found in the scanned sources and introspect them",
    )
    import_paths: list[Path] = Field(
        default_factory=list,
        description="Extra directories made importable while introspecting",
    )


class GeneratorSettings(BaseModel):
    """Top-level generator configuration."""

    model_config = {"frozen": True}

    source_roots: list[Path] = Field(
        default_factory=lambda: [Path("src")],
        description="Directories scanned for @preferences interfaces",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns (relative to a source root) of files to skip",
    )
    fail_on_warning: bool = Field(default=False, description="Treat warnings as errors for the exit status")
    output: OutputSettings = Field(default_factory=OutputSettings)
    resolution: ResolutionSettings = Field(default_factory=ResolutionSettings)

    @field_validator("source_roots")
    @classmethod
    def validate_source_roots(cls, v: list[Path]) -> list[Path]:
        if not v:
            raise ValueError("at least one source root is required")
        return v

    def output_dir_for(self, source_root: Path) -> Path:
        """Directory generated packages for ``source_root`` are written under."""
        if self.output.directory is not None:
            return self.output.directory
        return source_root


def load_settings(config_path: Path | None = None) -> GeneratorSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (TYPEDPREFS_*) - highest priority
    2. Config file (typedprefs.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: TYPEDPREFS_OUTPUT__CLASS_SUFFIX for nested keys.

    Args:
        config_path: Path to YAML configuration file; None reads only the
            environment

    Returns:
        Validated GeneratorSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="TYPEDPREFS",
        settings_files=[str(config_path)] if config_path is not None else [],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; convert to lowercase for Pydantic
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    return GeneratorSettings(**_lowercase_keys(raw_config))


def _lowercase_keys(config: dict[str, Any]) -> dict[str, Any]:
    """Lowercase nested mapping keys (Dynaconf uppercases env-provided ones)."""
    result: dict[str, Any] = {}
    for key, value in config.items():
        if isinstance(value, dict):
            result[key.lower()] = _lowercase_keys(value)
        else:
            result[key.lower()] = value
    return result
