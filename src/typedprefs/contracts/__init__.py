"""Shared contracts for the generator and its collaborators.

This package is a LEAF MODULE: it depends on nothing else in typedprefs, so
the runtime support package, the engine and the emitters can all import it.

Import patterns:
    from typedprefs.contracts import SettingKey, TypeRef, GeneratedUnit
"""

from typedprefs.contracts.declarations import (
    CacheDirective,
    InterfaceDecl,
    MethodDecl,
    ParamDecl,
    SourceLocation,
    StoreDirective,
)
from typedprefs.contracts.descriptors import CacheConfig, SettingDescriptor
from typedprefs.contracts.diagnostics import Diagnostic, DiagnosticSink
from typedprefs.contracts.enums import (
    CacheWriteMode,
    DeclarationOrigin,
    DiagnosticCode,
    Role,
    Severity,
    StoreMode,
    ValueKind,
)
from typedprefs.contracts.errors import (
    EmissionError,
    ImplementationNotFoundError,
    InvalidKeyError,
    StoreTypeError,
    TypedPrefsError,
)
from typedprefs.contracts.keys import SettingKey
from typedprefs.contracts.types import CarrierSpec, TypeRef, ValueType
from typedprefs.contracts.unit import (
    FieldSpec,
    GeneratedUnit,
    MethodSpec,
    ParamSpec,
    SignatureSpec,
)

__all__ = [
    "CacheConfig",
    "CacheDirective",
    "CacheWriteMode",
    "CarrierSpec",
    "DeclarationOrigin",
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticSink",
    "EmissionError",
    "FieldSpec",
    "GeneratedUnit",
    "ImplementationNotFoundError",
    "InterfaceDecl",
    "InvalidKeyError",
    "MethodDecl",
    "MethodSpec",
    "ParamDecl",
    "ParamSpec",
    "Role",
    "SettingDescriptor",
    "SettingKey",
    "Severity",
    "SignatureSpec",
    "SourceLocation",
    "StoreDirective",
    "StoreMode",
    "StoreTypeError",
    "TypeRef",
    "TypedPrefsError",
    "ValueKind",
    "ValueType",
]
