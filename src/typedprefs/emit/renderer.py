# src/typedprefs/emit/renderer.py
"""Render GeneratedUnits to Python source with Jinja2."""

from __future__ import annotations

import jinja2

from typedprefs.contracts.unit import GeneratedUnit
from typedprefs.core.config import DEFAULT_HEADER_COMMENT

TEMPLATE_NAME = "unit.py.j2"


class UnitRenderer:
    """Renders one module per GeneratedUnit.

    Args:
        header_comment: First-line comment marking the module as generated
    """

    def __init__(self, header_comment: str = DEFAULT_HEADER_COMMENT) -> None:
        self._header_comment = header_comment
        self._env = self._create_jinja_env()
        self._template = self._env.get_template(TEMPLATE_NAME)

    @staticmethod
    def _create_jinja_env() -> jinja2.Environment:
        return jinja2.Environment(
            loader=jinja2.PackageLoader("typedprefs.emit", "templates"),
            autoescape=False,  # Python source, not HTML
            undefined=jinja2.StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def render(self, unit: GeneratedUnit) -> str:
        uses_overload = any(method.overloads for method in unit.methods)
        return self._template.render(
            unit=unit,
            methods=(unit.constructor, *unit.methods),
            header_comment=self._header_comment,
            typing_names="Any, overload" if uses_overload else "Any",
            uses_store_mode=any("StoreMode." in line for line in unit.constructor.body),
        )
