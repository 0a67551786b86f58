"""Naming conventions shared by the generator and the runtime loader."""

import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

DEFAULT_CLASS_SUFFIX = "Impl"
DEFAULT_MODULE_SUFFIX = "_impl"


def snake_case(name: str) -> str:
    """Convert a CamelCase class name to snake_case.

    Examples:
        >>> snake_case("CacheExample")
        'cache_example'
        >>> snake_case("HTTPPrefs")
        'http_prefs'
    """
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def pascal_case(name: str) -> str:
    """Capitalize each underscore-separated part: ``list_point`` -> ``ListPoint``."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def implementation_class_name(interface_name: str, suffix: str = DEFAULT_CLASS_SUFFIX) -> str:
    """Class name of the generated implementation (nested names are flattened)."""
    return interface_name.replace(".", "") + suffix


def implementation_module_name(interface_name: str, suffix: str = DEFAULT_MODULE_SUFFIX) -> str:
    """Module name of the generated implementation inside the interface's package."""
    return snake_case(interface_name.replace(".", "")) + suffix


def implementation_module_path(
    interface_module: str,
    interface_name: str,
    suffix: str = DEFAULT_MODULE_SUFFIX,
) -> str:
    """Fully qualified module of the generated implementation."""
    package = interface_module.rpartition(".")[0]
    module_name = implementation_module_name(interface_name, suffix)
    if not package:
        return module_name
    return f"{package}.{module_name}"
