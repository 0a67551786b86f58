# src/typedprefs/engine/type_mapper.py
"""TypeMapper: declared value type -> native store representation.

Native kinds:

    str       -> TEXT        get_string / put_string        ""
    int       -> INTEGER     get_int / put_int              0
    Long      -> LONG        get_long / put_long            0
    float     -> FLOAT       get_float / put_float          0.0
    bool      -> BOOLEAN     get_bool / put_bool            False
    set[str]  -> STRING_SET  get_string_set / ...           set()

Every other type is stored through ``get_object``/``put_object`` wrapped in
a nested carrier dataclass generated once per distinct type.
"""

from __future__ import annotations

import math
import re
from typing import Any

import structlog

from typedprefs.contracts.declarations import MethodDecl, SourceLocation
from typedprefs.contracts.enums import DiagnosticCode, ValueKind
from typedprefs.contracts.names import LONG_TYPE
from typedprefs.contracts.types import BUILTINS_MODULE, CarrierSpec, TypeRef, ValueType
from typedprefs.core.naming import pascal_case
from typedprefs.engine.context import GenerationContext
from typedprefs.source.typerefs import split_qualified

logger = structlog.get_logger(__name__)

LONG_MIN = -(2**63)
LONG_MAX = 2**63 - 1

_NATIVE: dict[TypeRef, ValueKind] = {
    TypeRef.builtin("str"): ValueKind.TEXT,
    TypeRef.builtin("int"): ValueKind.INTEGER,
    TypeRef(*split_qualified(LONG_TYPE)): ValueKind.LONG,
    TypeRef.builtin("float"): ValueKind.FLOAT,
    TypeRef.builtin("bool"): ValueKind.BOOLEAN,
    TypeRef.builtin("set", TypeRef.builtin("str")): ValueKind.STRING_SET,
}

_ZERO_LITERALS: dict[ValueKind, str] = {
    ValueKind.TEXT: '""',
    ValueKind.INTEGER: "0",
    ValueKind.LONG: "0",
    ValueKind.FLOAT: "0.0",
    ValueKind.BOOLEAN: "False",
    ValueKind.STRING_SET: "set()",
}

# Zero values of builtin containers wrapped in carriers
_CARRIER_ZERO_LITERALS: dict[str, str] = {
    "list": "[]",
    "dict": "{}",
    "tuple": "()",
    "set": "set()",
    "frozenset": "frozenset()",
    "bytes": 'b""',
    "bytearray": "bytearray()",
    "complex": "0j",
}

_NON_NAME = re.compile(r"[^0-9A-Za-z_]")


def native_kind(type_ref: TypeRef) -> ValueKind | None:
    """Native kind of a type, ignoring nullability; None when it needs a carrier."""
    return _NATIVE.get(type_ref.with_nullable(False))


def carrier_base_name(type_ref: TypeRef) -> str:
    """``list[Point]`` -> ``ListPointCarrier``."""
    parts = [_NON_NAME.sub("", name) for name in type_ref.with_nullable(False).simple_names()]
    stem = "".join(pascal_case(part) for part in parts if part)
    if not stem or stem[0].isdigit():
        stem = f"Value{stem}"
    return f"{stem}Carrier"


class TypeMapper:
    """Resolve value types for one GenerationContext."""

    def __init__(self, context: GenerationContext) -> None:
        self._context = context

    def resolve(self, type_ref: TypeRef, location: SourceLocation) -> ValueType:
        """Map ``type_ref``; unmapped types register (or reuse) a carrier."""
        kind = native_kind(type_ref)
        if kind is not None:
            default = "None" if type_ref.nullable else _ZERO_LITERALS[kind]
            return ValueType(kind=kind, type_ref=type_ref, default_literal=default)

        carrier = self._carrier_for(type_ref, location)
        default = "None" if type_ref.nullable else carrier.instance_literal(carrier.zero_literal)
        return ValueType(kind=ValueKind.CARRIER, type_ref=type_ref, default_literal=default, carrier=carrier)

    def _carrier_for(self, type_ref: TypeRef, location: SourceLocation) -> CarrierSpec:
        wrapped = type_ref.with_nullable(False)
        existing = self._context.carriers.get(wrapped)
        if existing is not None:
            return existing

        base_name = carrier_base_name(wrapped)
        name = base_name
        taken = {spec.name: spec for spec in self._context.carriers.values()}
        suffix = 2
        while name in taken:
            name = f"{base_name}{suffix}"
            suffix += 1
        if name != base_name:
            self._context.warning(
                f"Carrier name '{base_name}' for '{wrapped.render()}' collides with the carrier "
                f"for '{taken[base_name].type_ref.render()}'; using '{name}'",
                location,
                DiagnosticCode.CARRIER_COLLISION,
            )

        zero = _CARRIER_ZERO_LITERALS.get(wrapped.name, "None") if wrapped.module == BUILTINS_MODULE else "None"
        carrier = CarrierSpec(name=name, type_ref=wrapped, zero_literal=zero)
        self._context.carriers[wrapped] = carrier
        logger.debug("Registered carrier", carrier=name, type=wrapped.render())
        return carrier

    def default_literal(self, value_type: ValueType, method: MethodDecl) -> str:
        """Source expression for a getter's store default.

        An ``@default`` value that does not fit the kind is reported and the
        zero default is used instead.
        """
        if not method.has_default:
            return value_type.default_literal
        literal = render_default(value_type, method.default)
        if literal is None:
            self._context.error(
                f"Default {method.default!r} of '{method.name}' is not a valid "
                f"'{value_type.type_ref.render()}' value",
                method.location,
                DiagnosticCode.STRUCTURAL,
            )
            return value_type.default_literal
        return literal


def render_default(value_type: ValueType, value: Any) -> str | None:
    """Render ``value`` as a source literal of ``value_type``; None if it does not fit."""
    if value is None:
        return "None" if value_type.type_ref.nullable else None

    kind = value_type.kind
    if kind is ValueKind.TEXT:
        return repr(value) if isinstance(value, str) else None
    if kind is ValueKind.BOOLEAN:
        return repr(value) if isinstance(value, bool) else None
    if isinstance(value, bool):
        # bool is an int subclass; never a numeric default
        return None
    if kind is ValueKind.INTEGER:
        return repr(value) if isinstance(value, int) else None
    if kind is ValueKind.LONG:
        return repr(value) if isinstance(value, int) and LONG_MIN <= value <= LONG_MAX else None
    if kind is ValueKind.FLOAT:
        if not isinstance(value, (int, float)):
            return None
        try:
            number = float(value)
        except OverflowError:
            return None
        # repr of inf/nan is not valid source
        return repr(number) if math.isfinite(number) else f"float({str(number)!r})"
    if kind is ValueKind.STRING_SET:
        if not isinstance(value, (set, frozenset, list, tuple)) or not all(isinstance(v, str) for v in value):
            return None
        members = sorted(set(value))
        if not members:
            return "set()"
        return "{" + ", ".join(repr(member) for member in members) + "}"

    # Carrier: any literal is accepted and wrapped
    assert value_type.carrier is not None
    return value_type.carrier.instance_literal(_literal_repr(value))


def _literal_repr(value: Any) -> str:
    if isinstance(value, (set, frozenset)):
        members = ", ".join(sorted(_literal_repr(member) for member in value))
        if isinstance(value, frozenset):
            return f"frozenset({{{members}}})" if members else "frozenset()"
        return f"{{{members}}}" if members else "set()"
    return repr(value)
