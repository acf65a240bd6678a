"""
errors/taxonomy.py - Export error taxonomy

Structured error types raised inside the export engine. Every error carries
a machine-checkable code and a human-readable message; the orchestrator
converts them to FailureInfo so nothing crosses the engine boundary.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(Enum):
    """Machine-checkable failure codes."""
    SERIALIZATION_FAILED = "SERIALIZATION_FAILED"
    FILE_WRITE_FAILED = "FILE_WRITE_FAILED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    MISSING_DATA = "MISSING_DATA"
    PARTIAL_BATCH_FAILURE = "PARTIAL_BATCH_FAILURE"
    RENDER_FAILED = "RENDER_FAILED"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    EXPORT_FAILED = "EXPORT_FAILED"


# =============================================================================
# BASE ERROR CLASS
# =============================================================================

class ExportError(Exception):
    """
    Base class for export errors.

    Provides structured error information with:
    - Error code for programmatic handling
    - Human-readable message
    - Record id when the failure is tied to one record
    - Detailed context for debugging
    """

    code: ErrorCode = ErrorCode.EXPORT_FAILED

    def __init__(
        self,
        message: str = "",
        *,
        record_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        self.message = message or self.__class__.__doc__ or "Export error"
        self.record_id = record_id
        self.details = details or {}
        self.details.update(kwargs)

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code.value,
            "message": self.message,
            "record_id": self.record_id,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


# =============================================================================
# SPECIFIC ERROR TYPES
# =============================================================================

class SerializationError(ExportError):
    """Encoder could not represent a value."""

    code = ErrorCode.SERIALIZATION_FAILED

    def __init__(self, reason: str, **kwargs):
        super().__init__(
            message=f"Value could not be serialized: {reason}",
            reason=reason,
            **kwargs,
        )


class FileWriteError(ExportError):
    """Artifact could not be written to the target path."""

    code = ErrorCode.FILE_WRITE_FAILED

    def __init__(self, path: str, reason: str, **kwargs):
        super().__init__(
            message=f"Could not write {path}: {reason}",
            path=path,
            reason=reason,
            **kwargs,
        )


class ExportValidationError(ExportError):
    """Produced artifact failed its structural checks."""

    code = ErrorCode.VALIDATION_FAILED

    def __init__(self, issues: List[str], **kwargs):
        issue_count = len(issues)
        message = f"Artifact validation failed with {issue_count} issue(s)"
        if issues:
            message += f": {issues[0]}"
            if issue_count > 1:
                message += f" (+{issue_count - 1} more)"

        super().__init__(
            message=message,
            issues=list(issues),
            issue_count=issue_count,
            **kwargs,
        )


class MissingDataError(ExportError):
    """Required record fields are absent."""

    code = ErrorCode.MISSING_DATA

    def __init__(self, record_id: Optional[str], missing: List[str], **kwargs):
        label = record_id or "<unknown>"
        if missing:
            message = f"Record {label} is incomplete: {', '.join(missing)}"
        else:
            message = f"Record {label} is not available"
        super().__init__(
            message=message,
            record_id=record_id,
            missing=list(missing),
            **kwargs,
        )


class RenderError(ExportError):
    """Document layout or text encoding failed."""

    code = ErrorCode.RENDER_FAILED

    def __init__(self, reason: str, **kwargs):
        super().__init__(
            message=f"Document rendering failed: {reason}",
            reason=reason,
            **kwargs,
        )


class UnsupportedFormatError(ExportError):
    """Requested format has no encoder."""

    code = ErrorCode.UNSUPPORTED_FORMAT

    def __init__(self, format: str, **kwargs):
        super().__init__(
            message=f"Unsupported export format: {format}",
            format=format,
            **kwargs,
        )


# =============================================================================
# FAILURE INFO (boundary representation)
# =============================================================================

@dataclass
class FailureInfo:
    """Failure carried on results in place of a raised exception."""

    code: ErrorCode
    message: str
    record_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        record_id: Optional[str] = None,
    ) -> "FailureInfo":
        """Build failure info from any exception."""
        if isinstance(exc, ExportError):
            return cls(
                code=exc.code,
                message=exc.message,
                record_id=exc.record_id or record_id,
                details=dict(exc.details),
            )
        return cls(
            code=ErrorCode.EXPORT_FAILED,
            message=f"{type(exc).__name__}: {exc}",
            record_id=record_id,
        )

    def describe(self) -> str:
        """Single-line description, prefixed by record id when known."""
        text = f"[{self.code.value}] {self.message}"
        if self.record_id:
            return f"{self.record_id}: {text}"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "record_id": self.record_id,
            "details": _jsonable(self.details),
        }


def _jsonable(details: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in details.items():
        if isinstance(value, (str, int, float, bool)) or value is None:
            out[key] = value
        elif isinstance(value, (list, tuple)):
            out[key] = [v if isinstance(v, (str, int, float, bool)) else str(v) for v in value]
        else:
            out[key] = str(value)
    return out


# All export error codes for documentation
EXPORT_ERROR_TYPES = {
    ErrorCode.SERIALIZATION_FAILED: SerializationError,
    ErrorCode.FILE_WRITE_FAILED: FileWriteError,
    ErrorCode.VALIDATION_FAILED: ExportValidationError,
    ErrorCode.MISSING_DATA: MissingDataError,
    ErrorCode.RENDER_FAILED: RenderError,
    ErrorCode.UNSUPPORTED_FORMAT: UnsupportedFormatError,
}
