"""Diagnostics reported while generating.

Non-fatal problems never raise: they are emitted to a DiagnosticSink and
generation carries on with whatever is still valid.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from typedprefs.contracts.declarations import SourceLocation
from typedprefs.contracts.enums import DiagnosticCode, Severity


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single reported problem."""

    severity: Severity
    code: DiagnosticCode
    message: str
    location: SourceLocation

    def format(self) -> str:
        return f"{self.location}: {self.severity.value}[{self.code.value}]: {self.message}"


@runtime_checkable
class DiagnosticSink(Protocol):
    """Receiver of generator diagnostics."""

    def emit(
        self,
        severity: Severity,
        message: str,
        location: SourceLocation,
        code: DiagnosticCode,
    ) -> None:
        """Report a diagnostic.

        Args:
            severity: ERROR or WARNING
            message: Human-readable description
            location: Most specific location available (method, then interface)
            code: Diagnostic category
        """
        ...
