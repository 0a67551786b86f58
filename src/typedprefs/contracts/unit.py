"""The generated unit handed to the emission collaborator.

A GeneratedUnit is produced once by ``UnitBuilder.build()`` and is never
mutated afterwards. Method bodies are source lines relative to the method's
own indentation.
"""

from dataclasses import dataclass

from typedprefs.contracts.descriptors import CacheConfig
from typedprefs.contracts.keys import SettingKey
from typedprefs.contracts.types import CarrierSpec, TypeRef


@dataclass(frozen=True, slots=True)
class ParamSpec:
    name: str
    annotation: str
    default: str | None = None

    def render(self) -> str:
        rendered = f"{self.name}: {self.annotation}"
        if self.default is not None:
            return f"{rendered} = {self.default}"
        return rendered


@dataclass(frozen=True, slots=True)
class SignatureSpec:
    """Typed signature emitted as an ``@overload`` stub."""

    params: tuple[ParamSpec, ...]
    returns: str


@dataclass(frozen=True, slots=True)
class MethodSpec:
    name: str
    params: tuple[ParamSpec, ...]
    returns: str
    body: tuple[str, ...]
    overloads: tuple[SignatureSpec, ...] = ()


@dataclass(frozen=True, slots=True)
class FieldSpec:
    name: str
    annotation: str


@dataclass(frozen=True, slots=True)
class GeneratedUnit:
    """A complete implementation class ready for rendering.

    Attributes:
        package: Package the module is written into ("" for top level)
        module_name: Module name inside the package
        class_name: Implementation class name
        interface: The implemented top-level interface
        imports: Modules the rendered source needs imported
        fields: Instance fields set up by the constructor
        constructor: ``__init__`` method
        methods: Accessors followed by lifecycle operations
        carriers: One nested carrier per distinct unmapped value type
        cache: Cache configuration, None when caching is off
        keys: Every key declared by the interface, declaration order
    """

    package: str
    module_name: str
    class_name: str
    interface: TypeRef
    imports: tuple[str, ...]
    fields: tuple[FieldSpec, ...]
    constructor: MethodSpec
    methods: tuple[MethodSpec, ...]
    carriers: tuple[CarrierSpec, ...]
    cache: CacheConfig | None
    keys: tuple[SettingKey, ...]

    @property
    def qualified_module(self) -> str:
        if not self.package:
            return self.module_name
        return f"{self.package}.{self.module_name}"

    @property
    def caching(self) -> bool:
        return self.cache is not None

    def method(self, name: str) -> MethodSpec:
        for spec in self.methods:
            if spec.name == name:
                return spec
        raise KeyError(name)

    def method_names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.methods)
