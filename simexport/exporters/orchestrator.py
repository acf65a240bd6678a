"""
exporters/orchestrator.py - Export orchestration.

Drives encode -> validate -> write for single records, batches and history
lookups. Every call walks the stage table in enums.LEGAL_TRANSITIONS and
records its trail on the result.

Batch policy:
- JSON: one combined document; any record or artifact failure fails the
  whole batch.
- PDF: as JSON, except that a record whose section cannot be rendered is
  left out and reported failed.
- CSV: a failing record's rows are left out and reported failed; the rest
  still go to the file.

Cancellation is polled before each record and before the write. A
cancelled CSV run writes the rows processed so far; JSON and PDF runs
write nothing and account for no records. A cancelled call appends no
terminal stage: its trail stops at the last stage it reached and the
result status is CANCELLED. FAILED is kept for calls that went wrong.

No public method raises; failures are reported on the result.
"""

from __future__ import annotations
import contextlib
import dataclasses
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

from .enums import ExportFormat, ExportStage, ExportStatus, is_valid_transition
from .factory import get_encoder
from .options import ExportOptions
from .results import BatchExportResult, ExportResult
from .validator import ExportValidator
from ..bootstrap.config import ExportSettings
from ..errors import (
    BatchErrorAggregator,
    ErrorCode,
    ExportValidationError,
    FailureInfo,
    FileWriteError,
    MissingDataError,
    RenderError,
)
from ..records import SimulationRecord

if TYPE_CHECKING:
    from ..history.source import HistorySource


ProgressCallback = Callable[[int, int], None]
CancelCallback = Callable[[], bool]

# (record id, its own failure or None)
Slot = Tuple[str, Optional[FailureInfo]]


class StageTrail:
    """Stage history of one export call."""

    def __init__(self):
        self.stages: List[ExportStage] = [ExportStage.PENDING]

    @property
    def current(self) -> ExportStage:
        return self.stages[-1]

    def advance(self, stage: ExportStage) -> None:
        if not is_valid_transition(self.current, stage):
            raise RuntimeError(
                f"Illegal export stage transition: {self.current.value} -> {stage.value}"
            )
        self.stages.append(stage)

    def fail(self) -> None:
        if self.current not in (ExportStage.DONE, ExportStage.FAILED):
            self.stages.append(ExportStage.FAILED)


class ExportOrchestrator:
    """
    Exports simulation records to files.

    Args:
        logger: Logger for export events (module logger if None)
        settings: Defaults for export_one / export_many options
        validator: Artifact validator
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        settings: Optional[ExportSettings] = None,
        validator: Optional[ExportValidator] = None,
    ):
        self.logger = logger or logging.getLogger("exports.orchestrator")
        self.settings = settings or ExportSettings()
        self.validator = validator or ExportValidator()

    # =========================================================================
    # SINGLE
    # =========================================================================

    def export_single(
        self,
        record: SimulationRecord,
        options: ExportOptions,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelCallback] = None,
    ) -> ExportResult:
        """
        Export one record to options.output_path.

        Returns:
            ExportResult; success=False with error set on any failure
        """
        trail = StageTrail()
        record_id = record.record_id
        self._notify(progress, 0, 1)

        if self._is_cancelled(cancel):
            return self._cancelled_single(record_id, trail)

        written: Optional[int] = None
        try:
            trail.advance(ExportStage.ENCODING)
            encoder = get_encoder(options.format)
            part = encoder.encode_entry(record, options)
            data = encoder.assemble([part], options, batch=False)
            self._notify(progress, 1, 1)

            trail.advance(ExportStage.VALIDATING)
            validation_errors = self.validator.check(data, options, expected_count=1)

            if self._is_cancelled(cancel):
                return self._cancelled_single(record_id, trail)

            trail.advance(ExportStage.WRITING)
            written = self._write(data, options.output_path)
        except Exception as e:
            trail.fail()
            failure = FailureInfo.from_exception(e, record_id)
            self.logger.error(f"Export of {record_id} failed: {failure.describe()}")
            self._notify(progress, 1, 1)
            return ExportResult.failed(failure, record_id, stages=trail.stages)

        self._notify(progress, 1, 1)

        if validation_errors:
            trail.fail()
            failure = FailureInfo.from_exception(
                ExportValidationError(validation_errors, record_id=record_id)
            )
            self.logger.error(f"Export of {record_id} failed validation: {validation_errors}")
            return ExportResult.failed(
                failure,
                record_id,
                output_path=options.output_path,
                bytes_written=written,
                validation_errors=validation_errors,
                stages=trail.stages,
            )

        trail.advance(ExportStage.DONE)
        self.logger.info(f"Exported {record_id} as {options.format.value} to {options.output_path}")
        return ExportResult(
            success=True,
            status=ExportStatus.SUCCEEDED,
            record_id=record_id,
            output_path=options.output_path,
            bytes_written=written,
            stages=trail.stages,
        )

    # =========================================================================
    # BATCH
    # =========================================================================

    def export_batch(
        self,
        records: Iterable[SimulationRecord],
        options: ExportOptions,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelCallback] = None,
    ) -> BatchExportResult:
        """
        Export records, in input order, to one artifact at options.output_path.

        Returns:
            BatchExportResult with per-record outcomes
        """
        records = list(records)
        requested = len(records)
        trail = StageTrail()
        result = BatchExportResult(requested=requested, stages=trail.stages)
        aggregator = BatchErrorAggregator()
        combined = options.format != ExportFormat.CSV

        self.logger.info(
            f"Batch export of {requested} record(s) as {options.format.value} to {options.output_path}"
        )
        self._notify(progress, 0, requested)

        slots: List[Slot] = []
        parts = []
        try:
            trail.advance(ExportStage.ENCODING)
            encoder = get_encoder(options.format)

            for record in records:
                if self._is_cancelled(cancel):
                    result.cancelled = True
                    break
                try:
                    parts.append(encoder.encode_entry(record, options))
                    slots.append((record.record_id, None))
                except Exception as e:
                    failure = aggregator.add_exception(e, record.record_id)
                    slots.append((record.record_id, failure))
                    if not self._skips_failed_record(options.format, e):
                        remaining = [(r.record_id, None) for r in records[len(slots):]]
                        self.logger.error(f"Batch export aborted: {failure.describe()}")
                        return self._fail_batch(result, trail, slots + remaining, failure, aggregator, progress)
                    self.logger.warning(f"Skipping record: {failure.describe()}")
                self._notify(progress, len(slots), requested)

            if result.cancelled and combined:
                return self._cancelled_batch(result, len(slots), progress)

            data = encoder.assemble(parts, options, batch=True)

            trail.advance(ExportStage.VALIDATING)
            validation_errors = self.validator.check(data, options, expected_count=len(parts))

            if self._is_cancelled(cancel):
                result.cancelled = True
                if combined:
                    return self._cancelled_batch(result, len(slots), progress)

            self._notify(progress, len(slots), requested)
            trail.advance(ExportStage.WRITING)
            written = self._write(data, options.output_path)
        except Exception as e:
            failure = aggregator.add_exception(e)
            self.logger.error(f"Batch export failed: {failure.describe()}")
            accounted = slots if result.cancelled else slots + [(r.record_id, None) for r in records[len(slots):]]
            return self._fail_batch(result, trail, accounted, failure, aggregator, progress)

        result.output_path = options.output_path
        result.bytes_written = written

        if validation_errors:
            failure = FailureInfo.from_exception(ExportValidationError(validation_errors))
            aggregator.add(failure)
            result.validation_errors = validation_errors
            self.logger.error(f"Batch export failed validation: {validation_errors}")
            return self._fail_batch(result, trail, slots, failure, aggregator, progress)

        trail.advance(ExportStage.DONE)
        for record_id, own in slots:
            if own is not None:
                result.per_record_results.append(
                    ExportResult.failed(own, record_id, stages=list(trail.stages))
                )
            else:
                result.per_record_results.append(ExportResult(
                    success=True,
                    status=ExportStatus.SUCCEEDED,
                    record_id=record_id,
                    output_path=options.output_path,
                    bytes_written=written,
                    stages=list(trail.stages),
                ))

        self._tally(result, aggregator)
        self._notify(progress, len(slots), requested)
        if aggregator.has_errors():
            self.logger.warning(f"Batch export failures: {aggregator.generate_report().summary}")
        self.logger.info(
            f"Batch export finished: {result.succeeded}/{result.total} succeeded"
            + (" (cancelled)" if result.cancelled else "")
        )
        return result

    # =========================================================================
    # HISTORY
    # =========================================================================

    def export_from_history(
        self,
        record_ids: Sequence[str],
        source: "HistorySource",
        options: ExportOptions,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelCallback] = None,
    ) -> BatchExportResult:
        """
        Fetch records by id and export them as a batch.

        Ids the source cannot supply are reported failed with status
        skipped and code MISSING_DATA; they never abort the run.
        """
        record_ids = list(record_ids)
        requested = len(record_ids)

        self._notify(progress, 0, requested)

        try:
            fetched = source.fetch_records(record_ids)
        except Exception as e:
            self.logger.error(f"History lookup failed: {e}")
            return self._reject_batch(record_ids, e, progress)

        found = [r for r in fetched if r is not None]
        skipped = requested - len(found)
        if skipped:
            self.logger.warning(f"{skipped} of {requested} record(s) not found in history")

        def shifted(done: int, _total: int) -> None:
            self._notify(progress, done + skipped, requested)

        if found:
            batch = self.export_batch(found, options, progress=shifted, cancel=cancel)
        else:
            batch = BatchExportResult(stages=[ExportStage.PENDING])
            self._notify(progress, skipped, requested)

        merged = BatchExportResult(
            requested=requested,
            output_path=batch.output_path,
            bytes_written=batch.bytes_written,
            validation_errors=batch.validation_errors,
            cancelled=batch.cancelled,
            stages=batch.stages,
        )
        aggregator = BatchErrorAggregator()
        accounted = iter(batch.per_record_results)

        for rid, record in zip(record_ids, fetched):
            if record is None:
                failure = FailureInfo.from_exception(MissingDataError(rid, []))
                aggregator.add(failure)
                merged.per_record_results.append(
                    ExportResult.failed(failure, rid, status=ExportStatus.SKIPPED)
                )
                continue
            outcome = next(accounted, None)
            if outcome is not None:
                merged.per_record_results.append(outcome)

        aggregator.add_all(batch.failures)
        self._tally(merged, aggregator)
        if batch.error_code is not None and batch.succeeded == 0 and batch.total > 0:
            merged.error_code = batch.error_code
        return merged

    # =========================================================================
    # COMMAND SURFACE
    # =========================================================================

    def export_one(
        self,
        record: SimulationRecord,
        format,
        path: str,
        options: Optional[ExportOptions] = None,
    ) -> ExportResult:
        """Export one record; format and path override any given options."""
        try:
            opts = self._options_for(format, path, options)
        except Exception as e:
            failure = FailureInfo.from_exception(e, record.record_id)
            self.logger.error(f"Export of {record.record_id} rejected: {failure.describe()}")
            return ExportResult.failed(failure, record.record_id, stages=[ExportStage.PENDING, ExportStage.FAILED])
        return self.export_single(record, opts)

    def export_many(
        self,
        records: Iterable[SimulationRecord],
        format,
        path: str,
        options: Optional[ExportOptions] = None,
    ) -> BatchExportResult:
        """Export records as one batch; format and path override any given options."""
        records = list(records)
        try:
            opts = self._options_for(format, path, options)
        except Exception as e:
            self.logger.error(f"Batch export rejected: {e}")
            return self._reject_batch([r.record_id for r in records], e, None)
        return self.export_batch(records, opts)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _options_for(self, format, path: str, options: Optional[ExportOptions]) -> ExportOptions:
        if options is None:
            return ExportOptions.from_settings(self.settings, format, path)
        return dataclasses.replace(options, format=format, output_path=path)

    def _skips_failed_record(self, format: ExportFormat, exc: Exception) -> bool:
        if format == ExportFormat.CSV:
            return True
        if format == ExportFormat.PDF:
            return isinstance(exc, RenderError)
        return False

    def _write(self, data: bytes, path: str) -> int:
        """
        Write atomically: temp file in the target directory, then replace.

        Raises:
            FileWriteError: path missing or not writable
        """
        if not path:
            raise FileWriteError("", "no output path given")

        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, target)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise FileWriteError(str(path), e.strerror or str(e))

        return len(data)

    def _fail_batch(
        self,
        result: BatchExportResult,
        trail: StageTrail,
        accounted: List[Slot],
        failure: FailureInfo,
        aggregator: BatchErrorAggregator,
        progress: Optional[ProgressCallback],
    ) -> BatchExportResult:
        """Every accounted record fails; records keep their own failure if they had one."""
        trail.fail()
        result.stages = trail.stages
        result.per_record_results = [
            ExportResult.failed(own or failure, record_id, stages=list(trail.stages))
            for record_id, own in accounted
        ]
        result.total = len(accounted)
        result.succeeded = 0
        result.failed = len(accounted)
        result.failures = aggregator.failures
        result.errors = aggregator.messages()
        result.error_code = failure.code
        self._notify(progress, len(accounted), result.requested)
        return result

    def _reject_batch(
        self,
        record_ids: List[str],
        exc: Exception,
        progress: Optional[ProgressCallback],
    ) -> BatchExportResult:
        """Fail every requested record before any encoding started."""
        aggregator = BatchErrorAggregator()
        failure = aggregator.add_exception(exc)
        result = BatchExportResult(requested=len(record_ids))
        return self._fail_batch(
            result, StageTrail(), [(rid, None) for rid in record_ids], failure, aggregator, progress,
        )

    def _cancelled_batch(
        self,
        result: BatchExportResult,
        processed: int,
        progress: Optional[ProgressCallback],
    ) -> BatchExportResult:
        self.logger.info("Batch export cancelled; no file written")
        result.cancelled = True
        result.total = 0
        result.succeeded = 0
        result.failed = 0
        self._notify(progress, processed, result.requested)
        return result

    def _cancelled_single(self, record_id: str, trail: StageTrail) -> ExportResult:
        self.logger.info(f"Export of {record_id} cancelled")
        return ExportResult(
            success=False,
            status=ExportStatus.CANCELLED,
            record_id=record_id,
            stages=trail.stages,
        )

    def _tally(self, result: BatchExportResult, aggregator: BatchErrorAggregator) -> None:
        result.total = len(result.per_record_results)
        result.succeeded = sum(1 for r in result.per_record_results if r.success)
        result.failed = result.total - result.succeeded
        result.failures = aggregator.failures
        result.errors = aggregator.messages()
        if result.failed and result.succeeded:
            result.error_code = ErrorCode.PARTIAL_BATCH_FAILURE
        elif result.failed:
            result.error_code = result.failures[0].code if result.failures else ErrorCode.EXPORT_FAILED

    def _notify(self, progress: Optional[ProgressCallback], done: int, total: int) -> None:
        if progress is None:
            return
        try:
            progress(done, total)
        except Exception as e:
            self.logger.warning(f"Progress callback raised: {e}")

    def _is_cancelled(self, cancel: Optional[CancelCallback]) -> bool:
        if cancel is None:
            return False
        try:
            return bool(cancel())
        except Exception as e:
            self.logger.warning(f"Cancel callback raised: {e}")
            return False
