# src/typedprefs/engine/assembler.py
"""ClassAssembler: builds the GeneratedUnit for one interface.

UnitBuilder accumulates the pieces (constructor statements, accessors,
lifecycle operations, carriers) and is finalized exactly once by ``build()``,
which returns an immutable GeneratedUnit.
"""

from __future__ import annotations

from typedprefs.contracts.declarations import InterfaceDecl
from typedprefs.contracts.descriptors import CacheConfig, SettingDescriptor
from typedprefs.contracts.keys import SettingKey
from typedprefs.contracts.types import CarrierSpec, TypeRef
from typedprefs.contracts.unit import FieldSpec, GeneratedUnit, MethodSpec, ParamSpec, SignatureSpec
from typedprefs.core.naming import (
    DEFAULT_CLASS_SUFFIX,
    DEFAULT_MODULE_SUFFIX,
    implementation_class_name,
    implementation_module_name,
)
from typedprefs.engine.accessors import AccessorEmitter
from typedprefs.engine.cache_binder import CacheBinder
from typedprefs.engine.context import GenerationContext

UNSET = "_UNSET"


class UnitBuilder:
    """Assemble a GeneratedUnit from a populated GenerationContext.

    Args:
        context: Context with classified, type-reconciled descriptors
        cache: Cache configuration, None when caching is off
        class_suffix: Appended to the interface name for the class
        module_suffix: Appended to the snake_case interface name for the module
    """

    def __init__(
        self,
        context: GenerationContext,
        cache: CacheConfig | None,
        *,
        class_suffix: str = DEFAULT_CLASS_SUFFIX,
        module_suffix: str = DEFAULT_MODULE_SUFFIX,
        accessors: AccessorEmitter | None = None,
        cache_binder: CacheBinder | None = None,
    ) -> None:
        self._context = context
        self._interface: InterfaceDecl = context.interface
        self._cache = cache
        self._class_suffix = class_suffix
        self._module_suffix = module_suffix
        self._accessors = accessors or AccessorEmitter()
        self._binder = cache_binder or CacheBinder()
        self._methods: list[MethodSpec] = []
        self._type_refs: list[TypeRef] = [self._interface.type_ref]
        self._built = False

    @property
    def interface_annotation(self) -> str:
        return self._interface.type_ref.render()

    def build(self) -> GeneratedUnit:
        """Finalize the unit. Can only be called once.

        Raises:
            RuntimeError: If called a second time
        """
        if self._built:
            raise RuntimeError("UnitBuilder.build() called twice")
        self._built = True

        for key in self._context.keys:
            self._add_accessor(key)
        self._add_lifecycle()

        carriers = self._carriers()
        return GeneratedUnit(
            package=self._interface.package,
            module_name=implementation_module_name(self._interface.name, self._module_suffix),
            class_name=implementation_class_name(self._interface.name, self._class_suffix),
            interface=self._interface.type_ref,
            imports=self._imports(carriers),
            fields=self._fields(),
            constructor=self._constructor(),
            methods=tuple(self._methods),
            carriers=carriers,
            cache=self._cache,
            keys=self._context.keys,
        )

    def _descriptors(self) -> list[SettingDescriptor]:
        found: list[SettingDescriptor] = []
        for key in self._context.keys:
            for table in (self._context.getters, self._context.putters):
                if key in table:
                    found.append(table[key])
        return found

    def _carriers(self) -> tuple[CarrierSpec, ...]:
        # Only carriers still referenced after type reconciliation
        seen: dict[str, CarrierSpec] = {}
        for descriptor in self._descriptors():
            carrier = descriptor.value_type.carrier
            if carrier is not None and carrier.name not in seen:
                seen[carrier.name] = carrier
        return tuple(seen.values())

    def _imports(self, carriers: tuple[CarrierSpec, ...]) -> tuple[str, ...]:
        modules: set[str] = set()
        for type_ref in self._type_refs:
            modules |= type_ref.modules()
        for carrier in carriers:
            modules |= carrier.type_ref.modules()
        return tuple(sorted(modules))

    def _fields(self) -> tuple[FieldSpec, ...]:
        fields = [FieldSpec("_store", "SettingsStore")]
        if self._cache is not None:
            fields.append(FieldSpec("_cache", "LruCache[str, Any]"))
        return tuple(fields)

    def _constructor(self) -> MethodSpec:
        store = self._interface.store
        if store is None or store.uses_default_store:
            opener = "provider.default()"
        else:
            opener = f"provider.named({store.name!r}, StoreMode.{store.mode.name})"
        body = [f"self._store = {opener}"]
        if self._cache is not None:
            body.extend(self._binder.constructor_lines(self._cache))
        return MethodSpec(
            name="__init__",
            params=(ParamSpec("provider", "StoreProvider"),),
            returns="None",
            body=tuple(body),
        )

    def _add_accessor(self, key: SettingKey) -> None:
        getter = self._context.getters.get(key)
        putter = self._context.putters.get(key)
        for descriptor in (getter, putter):
            if descriptor is not None:
                self._type_refs.append(descriptor.value_type.type_ref)

        if getter is not None and putter is not None:
            self._methods.append(self._pair(getter, putter))
        elif getter is not None:
            self._methods.append(
                MethodSpec(
                    name=key.name,
                    params=(),
                    returns=getter.value_type.type_ref.render(),
                    body=tuple(self._getter_body(getter)),
                )
            )
        elif putter is not None:
            signature = self._accessors.putter_signature(putter, self.interface_annotation)
            self._methods.append(
                MethodSpec(
                    name=key.name,
                    params=signature.params,
                    returns=signature.returns,
                    body=tuple(self._putter_body(putter)),
                )
            )

    def _pair(self, getter: SettingDescriptor, putter: SettingDescriptor) -> MethodSpec:
        overloads: tuple[SignatureSpec, ...] = (
            self._accessors.getter_signature(getter),
            self._accessors.putter_signature(putter, self.interface_annotation),
        )
        body = [
            f"if {putter.param_name} is {UNSET}:",
            *(f"    {line}" for line in self._getter_body(getter)),
            *self._putter_body(putter),
        ]
        return MethodSpec(
            name=getter.key.name,
            params=(ParamSpec(putter.param_name, "Any", UNSET),),
            returns="Any",
            body=tuple(body),
            overloads=overloads,
        )

    def _getter_body(self, getter: SettingDescriptor) -> list[str]:
        if self._cache is None:
            return self._accessors.getter_body(getter)
        return self._binder.getter_body(getter, self._accessors.read_lines(getter))

    def _putter_body(self, putter: SettingDescriptor) -> list[str]:
        lines = self._accessors.write_lines(putter)
        if self._cache is not None:
            lines.extend(self._binder.after_put_lines(putter, self._cache))
        lines.extend(self._accessors.return_lines(putter))
        return lines

    def _add_lifecycle(self) -> None:
        caching = self._cache is not None
        keys = self._context.keys
        paired = self._context.paired_keys

        remove = ["self._store.remove(key)"]
        clear = ["self._store.clear()"]
        clear_defined = [f"self._store.remove_keys({_tuple_literal(keys)})"]
        if caching:
            remove.extend(self._binder.remove_lines())
            clear.extend(self._binder.clear_lines())
            clear_defined.extend(self._binder.clear_defined_lines(keys))
        init_defaults = [f"self.{key.name}(self.{key.name}())" for key in paired] or ["pass"]

        key_param = (ParamSpec("key", "str"),)
        listener_param = (ParamSpec("listener", "OnChangeListener"),)
        self._methods.extend(
            [
                MethodSpec("get", (), "SettingsStore", ("return self._store",)),
                MethodSpec("contains", key_param, "bool", ("return self._store.contains(key)",)),
                MethodSpec("remove", key_param, "None", tuple(remove)),
                MethodSpec(
                    "register_on_change_listener",
                    listener_param,
                    "None",
                    ("self._store.register_listener(listener)",),
                ),
                MethodSpec(
                    "unregister_on_change_listener",
                    listener_param,
                    "None",
                    ("self._store.unregister_listener(listener)",),
                ),
                MethodSpec("clear", (), "None", tuple(clear)),
                MethodSpec("clear_defined", (), "None", tuple(clear_defined)),
                MethodSpec("init_defaults", (), "None", tuple(init_defaults)),
            ]
        )
        if caching:
            self._methods.append(MethodSpec("reset_cache", (), "None", tuple(self._binder.reset_cache_body())))


def _tuple_literal(keys: tuple[SettingKey, ...]) -> str:
    if not keys:
        return "()"
    if len(keys) == 1:
        return f"({keys[0].name!r},)"
    return "(" + ", ".join(repr(key.name) for key in keys) + ")"
