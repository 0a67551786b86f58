"""Build canonical TypeRefs from annotations.

Two entry points, one per resolution strategy:

- ``from_annotation_node``: an ``ast`` annotation plus a name resolver (parsed
  source)
- ``from_runtime_annotation``: an evaluated annotation object (introspection)

Both normalize the same way, so ``typing.List[int]`` written in source and
``list[int]`` read back at runtime compare equal.
"""

from __future__ import annotations

import ast
import builtins
import sys
import types
import typing
from collections.abc import Callable, Collection, Sequence
from typing import Any

from typedprefs.contracts.names import canonical_name
from typedprefs.contracts.types import BUILTINS_MODULE, TypeRef

NameResolver = Callable[[str], tuple[str, str]]

# typing aliases that mean the builtin generic
_TYPING_ALIASES: dict[str, str] = {
    "List": "list",
    "Dict": "dict",
    "Set": "set",
    "FrozenSet": "frozenset",
    "Tuple": "tuple",
    "Type": "type",
}


def split_qualified(qualified_name: str, known_modules: Collection[str] = ()) -> tuple[str, str]:
    """Split ``pkg.mod.Outer.Inner`` into (module, qualified class name).

    The longest strict prefix found in ``known_modules`` (modules named by
    import statements) stays in the module part. Past it, the class part
    starts at the first capitalized segment; without one, the last segment
    is the name.
    """
    qualified_name = canonical_name(qualified_name)
    segments = qualified_name.split(".")
    if len(segments) == 1:
        return BUILTINS_MODULE, segments[0]
    start = 1
    for index in range(len(segments) - 1, 1, -1):
        if ".".join(segments[:index]) in known_modules:
            start = index
            break
    split_at = len(segments) - 1
    for index in range(start, len(segments)):
        if segments[index][:1].isupper():
            split_at = index
            break
    return ".".join(segments[:split_at]), ".".join(segments[split_at:])


def normalize(module: str, name: str) -> tuple[str, str]:
    """Map typing aliases to their builtin generic."""
    if module in ("typing", "typing_extensions") and name in _TYPING_ALIASES:
        return BUILTINS_MODULE, _TYPING_ALIASES[name]
    return module, name


def union_of(members: Sequence[TypeRef]) -> TypeRef:
    """Collapse union members; a ``None`` member makes the result nullable."""
    non_null = [member for member in members if not member.is_none]
    has_none = len(non_null) != len(members)
    if not non_null:
        return TypeRef.none()
    if len(non_null) == 1:
        single = non_null[0]
        return single.with_nullable(single.nullable or has_none)
    return TypeRef("typing", "Union", tuple(non_null), nullable=has_none)


def _literal(value: Any) -> TypeRef:
    if value is Ellipsis:
        return TypeRef("", "...")
    return TypeRef("", repr(value))


def from_annotation_node(node: ast.expr, resolve: NameResolver) -> TypeRef:
    """Convert a source annotation to a TypeRef.

    Args:
        node: Annotation expression
        resolve: Maps a dotted name as written to (module, qualified name)
    """
    if isinstance(node, ast.Constant):
        if node.value is None:
            return TypeRef.none()
        if isinstance(node.value, str):
            # Forward reference
            try:
                parsed = ast.parse(node.value, mode="eval")
            except SyntaxError:
                return _literal(node.value)
            return from_annotation_node(parsed.body, resolve)
        return _literal(node.value)

    if isinstance(node, (ast.Name, ast.Attribute)):
        dotted = _dotted_name(node)
        if dotted is None:
            return TypeRef("", ast.unparse(node))
        module, name = normalize(*resolve(dotted))
        return TypeRef(module, name)

    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return union_of([from_annotation_node(member, resolve) for member in _flatten_union(node)])

    if isinstance(node, ast.Subscript):
        base = from_annotation_node(node.value, resolve)
        arg_nodes = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]
        if base.module in ("typing", "typing_extensions") and base.name == "Literal":
            return TypeRef("typing", "Literal", tuple(_literal_node(arg) for arg in arg_nodes))
        args = [from_annotation_node(arg, resolve) for arg in arg_nodes]
        return _apply_generic(base, args)

    if isinstance(node, ast.List):
        members = ", ".join(from_annotation_node(elt, resolve).render() for elt in node.elts)
        return TypeRef("", f"[{members}]")

    return TypeRef("", ast.unparse(node))


def _literal_node(node: ast.expr) -> TypeRef:
    if isinstance(node, ast.Constant):
        return _literal(node.value)
    return TypeRef("", ast.unparse(node))


def _apply_generic(base: TypeRef, args: list[TypeRef]) -> TypeRef:
    if base.module in ("typing", "typing_extensions"):
        if base.name == "Optional" and len(args) == 1:
            return union_of([args[0], TypeRef.none()])
        if base.name == "Union":
            return union_of(args)
        if base.name == "Annotated" and args:
            return args[0]
    return TypeRef(base.module, base.name, tuple(args), base.nullable)


def _flatten_union(node: ast.expr) -> list[ast.expr]:
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return _flatten_union(node.left) + _flatten_union(node.right)
    return [node]


def _dotted_name(node: ast.expr) -> str | None:
    parts: list[str] = []
    while isinstance(node, ast.Attribute):
        parts.append(node.attr)
        node = node.value
    if not isinstance(node, ast.Name):
        return None
    parts.append(node.id)
    return ".".join(reversed(parts))


def from_runtime_annotation(annotation: Any, owner_module: str) -> TypeRef:
    """Convert an evaluated annotation object to a TypeRef.

    Args:
        annotation: Annotation object (class, generic alias, union, string...)
        owner_module: Module the annotation was written in; string
            annotations are resolved against its globals
    """
    if annotation is None or annotation is type(None):
        return TypeRef.none()

    if isinstance(annotation, typing.ForwardRef):
        annotation = annotation.__forward_arg__
    if isinstance(annotation, str):
        return _from_string_annotation(annotation, owner_module)

    if annotation is Ellipsis:
        return TypeRef("", "...")

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin is typing.Union or origin is types.UnionType:
        return union_of([from_runtime_annotation(arg, owner_module) for arg in args])
    if origin is typing.Annotated:
        return from_runtime_annotation(args[0], owner_module)
    if origin is typing.Literal:
        return TypeRef("typing", "Literal", tuple(_literal(arg) for arg in args))
    if origin is not None:
        base = from_runtime_annotation(origin, owner_module)
        return TypeRef(base.module, base.name, tuple(from_runtime_annotation(arg, owner_module) for arg in args))

    module = getattr(annotation, "__module__", None)
    name = getattr(annotation, "__qualname__", None) or getattr(annotation, "_name", None)
    if isinstance(module, str) and isinstance(name, str):
        return TypeRef(*normalize(module, name))
    return TypeRef("", repr(annotation))


def _from_string_annotation(text: str, owner_module: str) -> TypeRef:
    try:
        parsed = ast.parse(text, mode="eval")
    except SyntaxError:
        return _literal(text)
    namespace = vars(sys.modules[owner_module]) if owner_module in sys.modules else {}

    def resolve(dotted: str) -> tuple[str, str]:
        head, _, rest = dotted.partition(".")
        if head in namespace:
            target: Any = namespace[head]
            for attribute in rest.split(".") if rest else []:
                target = getattr(target, attribute, None)
                if target is None:
                    return split_qualified(f"{owner_module}.{dotted}", {owner_module})
            if isinstance(target, types.ModuleType):
                return split_qualified(target.__name__)
            resolved = from_runtime_annotation(target, owner_module)
            return resolved.module, resolved.name
        if hasattr(builtins, head) and not rest:
            return BUILTINS_MODULE, head
        return split_qualified(f"{owner_module}.{dotted}", {owner_module})

    return from_annotation_node(parsed.body, resolve)
