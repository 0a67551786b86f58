"""Type references and resolved value types.

A TypeRef is the structural, canonical description of a declared annotation.
Both resolution strategies (parsed source and runtime introspection) produce
TypeRefs, so equality of two TypeRefs is type identity for the generator.
"""

from dataclasses import dataclass, field, replace

from typedprefs.contracts.enums import ValueKind

BUILTINS_MODULE = "builtins"


@dataclass(frozen=True, slots=True)
class TypeRef:
    """Canonical reference to a declared type.

    Attributes:
        module: Defining module ("builtins" for builtin types, "" for literal
            expressions such as ``Literal`` arguments)
        name: Qualified name inside the module (may contain dots for
            nested classes)
        args: Generic arguments
        nullable: True for ``Optional[X]`` / ``X | None``
    """

    module: str
    name: str
    args: tuple["TypeRef", ...] = ()
    nullable: bool = False

    @classmethod
    def builtin(cls, name: str, *args: "TypeRef") -> "TypeRef":
        return cls(BUILTINS_MODULE, name, tuple(args))

    @classmethod
    def none(cls) -> "TypeRef":
        return cls(BUILTINS_MODULE, "None")

    @property
    def is_none(self) -> bool:
        return self.module == BUILTINS_MODULE and self.name == "None"

    @property
    def is_builtin(self) -> bool:
        return self.module == BUILTINS_MODULE

    @property
    def qualified_name(self) -> str:
        if not self.module:
            return self.name
        return f"{self.module}.{self.name}"

    def with_nullable(self, nullable: bool = True) -> "TypeRef":
        return replace(self, nullable=nullable)

    def render(self) -> str:
        """Render as a source-level annotation usable in generated code."""
        base = self.name if self.is_builtin or not self.module else self.qualified_name
        if self.args:
            base = f"{base}[{', '.join(arg.render() for arg in self.args)}]"
        if self.nullable:
            return f"{base} | None"
        return base

    def modules(self) -> frozenset[str]:
        """Modules the rendered annotation needs imported."""
        found: set[str] = set()
        if self.module and not self.is_builtin:
            found.add(self.module)
        for arg in self.args:
            found |= arg.modules()
        return frozenset(found)

    def simple_names(self) -> list[str]:
        """Last name segments of this type and its arguments, depth-first."""
        names = [self.name.rsplit(".", 1)[-1]]
        for arg in self.args:
            names.extend(arg.simple_names())
        return names

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True, slots=True)
class CarrierSpec:
    """Nested wrapper type generated for one unmapped value type.

    Attributes:
        name: Class name of the carrier inside the generated unit
        type_ref: The wrapped value type
        zero_literal: Source expression for the wrapped type's zero value
    """

    name: str
    type_ref: TypeRef
    zero_literal: str = "None"

    def instance_literal(self, value_literal: str) -> str:
        return f"self.{self.name}(value={value_literal})"


@dataclass(frozen=True, slots=True)
class ValueType:
    """Resolved store representation of a declared value type.

    Attributes:
        kind: Native store kind or CARRIER
        type_ref: The declared type
        default_literal: Zero-value source expression used when the getter
            declares no default
        carrier: Carrier spec for CARRIER kind, None otherwise
    """

    kind: ValueKind
    type_ref: TypeRef
    default_literal: str
    carrier: CarrierSpec | None = field(default=None)

    @property
    def accessor_suffix(self) -> str:
        return self.kind.value

    @property
    def uses_carrier(self) -> bool:
        return self.kind is ValueKind.CARRIER
