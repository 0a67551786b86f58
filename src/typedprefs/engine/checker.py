# src/typedprefs/engine/checker.py
"""KeyConsistencyChecker: getter/putter pairing.

Two checks run per interface:

- ``reconcile_types`` before assembly: a putter whose value type disagrees
  with its getter is reported and dropped, so the unit never pairs them.
- ``check_coverage`` after assembly: keys with only one half are reported as
  warnings; the unit is still complete for the halves that exist.
"""

from __future__ import annotations

from typedprefs.contracts.enums import DiagnosticCode, Role
from typedprefs.engine.context import GenerationContext


class KeyConsistencyChecker:
    def reconcile_types(self, context: GenerationContext) -> None:
        for key in list(context.paired_keys):
            getter = context.getters[key]
            putter = context.putters[key]
            getter_type = getter.value_type.type_ref.with_nullable(False)
            putter_type = putter.value_type.type_ref.with_nullable(False)
            if getter_type == putter_type:
                continue
            context.error(
                f"Putter '{key}' takes '{putter.value_type.type_ref.render()}' "
                f"but getter '{key}' returns '{getter.value_type.type_ref.render()}'",
                putter.location,
                DiagnosticCode.TYPE_MISMATCH,
            )
            context.drop(key, Role.PUTTER)

    def check_coverage(self, context: GenerationContext) -> None:
        getter_keys = set(context.getters)
        putter_keys = set(context.putters)
        for key in context.keys:
            if key in getter_keys and key not in putter_keys:
                context.warning(
                    f"No putter found for getter '{key}'",
                    context.getters[key].location,
                    DiagnosticCode.CONSISTENCY,
                )
            elif key in putter_keys and key not in getter_keys:
                context.warning(
                    f"No getter found for putter '{key}'",
                    context.putters[key].location,
                    DiagnosticCode.CONSISTENCY,
                )
