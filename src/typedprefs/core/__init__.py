# src/typedprefs/core/__init__.py
"""Core infrastructure: Configuration, Logging, Naming."""

from typedprefs.core.config import (
    GeneratorSettings,
    OutputSettings,
    ResolutionSettings,
    load_settings,
)
from typedprefs.core.logging import configure_logging
from typedprefs.core.naming import (
    implementation_class_name,
    implementation_module_name,
    implementation_module_path,
    snake_case,
)

__all__ = [
    "GeneratorSettings",
    "OutputSettings",
    "ResolutionSettings",
    "configure_logging",
    "implementation_class_name",
    "implementation_module_name",
    "implementation_module_path",
    "load_settings",
    "snake_case",
]
