# src/typedprefs/engine/accessors.py
"""AccessorEmitter: getter and putter bodies without caching.

Bodies are lists of source lines relative to the method's indentation. A
getter body leaves the value in ``result`` before returning it, so the cache
binder can wrap it without re-parsing anything.
"""

from __future__ import annotations

from typedprefs.contracts.descriptors import SettingDescriptor
from typedprefs.contracts.enums import Role
from typedprefs.contracts.unit import ParamSpec, SignatureSpec


def key_literal(descriptor: SettingDescriptor) -> str:
    return repr(descriptor.key.name)


class AccessorEmitter:
    """Build store read/write statements for one setting half."""

    def read_lines(self, getter: SettingDescriptor) -> list[str]:
        """Statements that leave the current value in ``result``."""
        value_type = getter.value_type
        default = getter.default_literal if getter.default_literal is not None else value_type.default_literal
        call = f"self._store.get_{value_type.accessor_suffix}({key_literal(getter)}, {default})"
        if not getter.uses_carrier:
            return [f"result = {call}"]
        return [
            f"stored = {call}",
            "result = None if stored is None else stored.value",
        ]

    def getter_body(self, getter: SettingDescriptor) -> list[str]:
        return [*self.read_lines(getter), "return result"]

    def write_lines(self, putter: SettingDescriptor) -> list[str]:
        """Statements that write the putter's argument; None removes the key."""
        value_type = putter.value_type
        argument = putter.param_name
        if putter.uses_carrier:
            assert value_type.carrier is not None
            argument = f"None if {putter.param_name} is None else {value_type.carrier.instance_literal(putter.param_name)}"
        return [f"self._store.put_{value_type.accessor_suffix}({key_literal(putter)}, {argument})"]

    def return_lines(self, putter: SettingDescriptor) -> list[str]:
        return ["return self"] if putter.fluent else []

    def getter_signature(self, getter: SettingDescriptor) -> SignatureSpec:
        return SignatureSpec(params=(), returns=getter.value_type.type_ref.render())

    def putter_signature(self, putter: SettingDescriptor, interface_annotation: str) -> SignatureSpec:
        param = ParamSpec(putter.param_name, putter.value_type.type_ref.with_nullable().render())
        return SignatureSpec(params=(param,), returns=interface_annotation if putter.fluent else "None")

    def signature(self, descriptor: SettingDescriptor, interface_annotation: str) -> SignatureSpec:
        if descriptor.role is Role.GETTER:
            return self.getter_signature(descriptor)
        return self.putter_signature(descriptor, interface_annotation)
