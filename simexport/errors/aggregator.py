"""
errors/aggregator.py - Aggregate per-record batch failures

Collects failures during a batch run without aborting it and renders the
ordered error strings and summary carried on BatchExportResult.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import uuid

from .taxonomy import ErrorCode, FailureInfo


@dataclass
class BatchErrorReport:
    """Aggregated batch error report."""

    report_id: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    total_errors: int = 0
    by_code: Dict[str, int] = field(default_factory=dict)
    record_ids: List[str] = field(default_factory=list)

    summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report_id": self.report_id,
            "total_errors": self.total_errors,
            "by_code": self.by_code,
            "record_ids": self.record_ids,
            "summary": self.summary,
        }


class BatchErrorAggregator:
    """
    Accumulates per-record failures for one batch run.

    Order of insertion is preserved so the rendered errors follow input
    record order.
    """

    def __init__(self):
        self._failures: List[FailureInfo] = []

    def add(self, failure: FailureInfo) -> None:
        """Add a failure."""
        self._failures.append(failure)

    def add_exception(self, exc: BaseException, record_id: Optional[str] = None) -> FailureInfo:
        """Record an exception raised while processing one record."""
        failure = FailureInfo.from_exception(exc, record_id=record_id)
        self.add(failure)
        return failure

    def add_all(self, failures: List[FailureInfo]) -> None:
        """Add multiple failures."""
        for failure in failures:
            self.add(failure)

    @property
    def failures(self) -> List[FailureInfo]:
        return list(self._failures)

    @property
    def failed_record_ids(self) -> List[str]:
        """Ids of failed records, first occurrence order."""
        return list(dict.fromkeys(f.record_id for f in self._failures if f.record_id))

    def get_by_code(self, code: ErrorCode) -> List[FailureInfo]:
        """Get failures by error code."""
        return [f for f in self._failures if f.code == code]

    def has_errors(self) -> bool:
        return bool(self._failures)

    def messages(self) -> List[str]:
        """Human-readable error lines, one per failure."""
        return [f.describe() for f in self._failures]

    def generate_report(self) -> BatchErrorReport:
        """Generate aggregated report."""
        report = BatchErrorReport(
            report_id=str(uuid.uuid4())[:8],
            total_errors=len(self._failures),
            record_ids=self.failed_record_ids,
        )

        for code in ErrorCode:
            count = len(self.get_by_code(code))
            if count > 0:
                report.by_code[code.value] = count

        if not self._failures:
            report.summary = "No failures"
        elif len(report.by_code) == 1:
            code, count = next(iter(report.by_code.items()))
            report.summary = f"{count} failure(s), all {code}"
        else:
            parts = ", ".join(f"{count} {code}" for code, count in report.by_code.items())
            report.summary = f"{report.total_errors} failure(s): {parts}"

        return report
