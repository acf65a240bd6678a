"""
exporters/results.py - Export result types.

INVARIANTS:
- ExportResult.success implies no validation errors, an output path and a
  byte count.
- BatchExportResult.succeeded + BatchExportResult.failed == total.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .enums import ExportStage, ExportStatus
from ..errors import ErrorCode, FailureInfo


@dataclass
class ExportResult:
    """Result of exporting one record (or of one call in single mode)."""
    success: bool
    status: ExportStatus
    record_id: Optional[str] = None
    output_path: Optional[str] = None
    bytes_written: Optional[int] = None
    error: Optional[FailureInfo] = None
    validation_errors: List[str] = field(default_factory=list)
    stages: List[ExportStage] = field(default_factory=list)

    @property
    def error_code(self) -> Optional[ErrorCode]:
        return self.error.code if self.error else None

    @classmethod
    def failed(
        cls,
        failure: FailureInfo,
        record_id: Optional[str] = None,
        status: ExportStatus = ExportStatus.FAILED,
        **kwargs,
    ) -> "ExportResult":
        return cls(
            success=False,
            status=status,
            record_id=record_id or failure.record_id,
            error=failure,
            **kwargs,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "status": self.status.value,
            "record_id": self.record_id,
            "output_path": self.output_path,
            "bytes_written": self.bytes_written,
            "error": self.error.to_dict() if self.error else None,
            "validation_errors": list(self.validation_errors),
            "stages": [s.value for s in self.stages],
        }


@dataclass
class BatchExportResult:
    """Result of a batch export."""
    requested: int = 0
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    per_record_results: List[ExportResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    failures: List[FailureInfo] = field(default_factory=list)
    output_path: Optional[str] = None
    bytes_written: Optional[int] = None
    validation_errors: List[str] = field(default_factory=list)
    cancelled: bool = False
    error_code: Optional[ErrorCode] = None
    stages: List[ExportStage] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True when every accounted record was exported."""
        return self.failed == 0 and not self.validation_errors and self.error_code is None

    @property
    def is_partial(self) -> bool:
        return self.error_code == ErrorCode.PARTIAL_BATCH_FAILURE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requested": self.requested,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "per_record_results": [r.to_dict() for r in self.per_record_results],
            "errors": list(self.errors),
            "failures": [f.to_dict() for f in self.failures],
            "output_path": self.output_path,
            "bytes_written": self.bytes_written,
            "validation_errors": list(self.validation_errors),
            "cancelled": self.cancelled,
            "error_code": self.error_code.value if self.error_code else None,
            "stages": [s.value for s in self.stages],
        }
