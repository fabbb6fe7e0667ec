"""Exception hierarchy and warning records for schema translation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class SchemaMeshError(Exception):
    """Base exception for all schema-mesh errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Initialize error with message and optional details.

        Args:
            message: Human-readable error message
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of error."""
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class UnsupportedFormat(SchemaMeshError):
    """Raised when no reader or writer is registered for a format identifier."""

    def __init__(self, identifier: str, direction: str, available: Optional[list] = None) -> None:
        message = f"No {direction} registered for format '{identifier}'"
        details: Dict[str, Any] = {"format": identifier, "direction": direction}
        if available is not None:
            details["available"] = ", ".join(available)
        super().__init__(message, details)
        self.identifier = identifier


class ParseError(SchemaMeshError):
    """Raised when input cannot be parsed in its declared format."""

    def __init__(
        self,
        message: str,
        source_format: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        token: Optional[str] = None,
    ) -> None:
        details: Dict[str, Any] = {}
        if source_format:
            details["format"] = source_format
        if line is not None:
            details["line"] = line
        if column is not None:
            details["column"] = column
        if token:
            details["token"] = token
        super().__init__(message, details)
        self.line = line
        self.column = column
        self.token = token


class StructuralError(SchemaMeshError):
    """Raised when a model would violate a structural invariant.

    Covers cycles, duplicate names and unresolved references.
    """

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        kind: Optional[str] = None,
        reference: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        details: Dict[str, Any] = {}
        if kind:
            details["kind"] = kind
        if entity:
            details["entity"] = entity
        if reference:
            details["reference"] = reference
        details.update(kwargs)
        super().__init__(message, details)
        self.entity = entity
        self.kind = kind
        self.reference = reference


class MappingError(SchemaMeshError):
    """Raised when an essential source construct has no model counterpart."""

    def __init__(self, message: str, construct: Optional[str] = None, **kwargs: Any) -> None:
        details: Dict[str, Any] = {}
        if construct:
            details["construct"] = construct
        details.update(kwargs)
        super().__init__(message, details)


class WriteError(SchemaMeshError):
    """Raised when serialization to the target grammar fails."""

    def __init__(self, message: str, target_format: Optional[str] = None, **kwargs: Any) -> None:
        details: Dict[str, Any] = {}
        if target_format:
            details["format"] = target_format
        details.update(kwargs)
        super().__init__(message, details)


class TranslationAborted(SchemaMeshError):
    """Raised when warnings are promoted to errors by ``fail_on_warnings``."""

    def __init__(self, message: str, warnings: Optional[list] = None) -> None:
        warnings = list(warnings or [])
        super().__init__(message, {"warnings": ", ".join(w.code for w in warnings)} if warnings else None)
        self.warnings = warnings


@dataclass(frozen=True)
class TranslationWarning:
    """A recoverable condition reported alongside a successful result."""

    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": dict(self.details)}


__all__ = [
    "SchemaMeshError",
    "UnsupportedFormat",
    "ParseError",
    "StructuralError",
    "MappingError",
    "WriteError",
    "TranslationAborted",
    "TranslationWarning",
]
