"""
exporters/csv_encoder.py - Tabular (CSV) encoder.

One header row with the fixed column set, then one row per record, or one
row per state change when the state diff is included. Record columns are
repeated on every change row. Nested values are JSON text in a single cell.
"""

from __future__ import annotations
import csv
import io
import json
from typing import List, Optional, Sequence, Union

from .base import BaseEncoder
from .enums import ExportFormat
from .options import ExportOptions
from ..errors import SerializationError
from ..records import SimulationRecord, StateChange, Value, to_native

TABULAR_VERSION = 1

TABULAR_COLUMNS = (
    "record_id",
    "contract_id",
    "function_name",
    "network",
    "method",
    "timestamp",
    "outcome",
    "args",
    "result",
    "error",
    "cpu_instructions",
    "memory_bytes",
    "duration_ms",
    "change_index",
    "change_kind",
    "change_key",
    "before",
    "after",
)

Row = List[str]


class TabularEncoder(BaseEncoder):
    """Encodes records as delimited text."""

    format = ExportFormat.CSV
    content_type = "text/csv"
    file_extension = ".csv"

    columns = TABULAR_COLUMNS

    def build_entry(self, record: SimulationRecord, options: ExportOptions) -> List[Row]:
        """Rows for one record, max(1, M) when M state changes are included."""
        pretty = options.resolved_prettify

        def cell(value: Optional[Value]) -> str:
            return self._json_cell(value, pretty, record.record_id)

        base = [
            record.record_id,
            record.contract_id,
            record.function_name,
            record.network,
            record.method,
            record.timestamp.isoformat() if record.timestamp else "",
            record.outcome.value if record.outcome else "",
            self._json_text([to_native(a) for a in record.args], pretty, record.record_id),
            cell(record.result),
            cell(record.error),
        ]

        usage = record.resource_usage if options.include_resource_usage else None
        if usage is not None:
            base += [str(usage.cpu_instructions), str(usage.memory_bytes), str(usage.duration_ms)]
        else:
            base += ["", "", ""]

        changes: Sequence[StateChange] = ()
        if options.include_state_diff and record.state_diff is not None:
            changes = record.state_diff.changes

        if not changes:
            return [base + ["", "", "", "", ""]]

        return [
            base + [
                str(index),
                change.kind.value,
                change.key,
                cell(change.before),
                cell(change.after),
            ]
            for index, change in enumerate(changes)
        ]

    def assemble(
        self,
        parts: Sequence[List[Row]],
        options: ExportOptions,
        batch: bool = False,
    ) -> bytes:
        output = io.StringIO()
        writer = self._writer(output, options)
        writer.writerow(self.columns)
        for rows in parts:
            for row in rows:
                if len(row) != len(self.columns):
                    raise SerializationError(
                        f"row has {len(row)} cells, expected {len(self.columns)}"
                    )
                if options.line_terminator == "\n" and any("\r" in c for c in row):
                    # A bare CR is not in an LF terminator, so minimal quoting misses it
                    self._writer(output, options, csv.QUOTE_ALL).writerow(row)
                else:
                    writer.writerow(row)
        return output.getvalue().encode("utf-8")

    def parse(self, data: Union[bytes, str], options: Optional[ExportOptions] = None) -> List[Row]:
        """Split tabular output into rows of cells, header included."""
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        delimiter = options.delimiter if options else ","
        reader = csv.reader(io.StringIO(data, newline=""), delimiter=delimiter)
        return [row for row in reader]

    def _writer(self, output: io.StringIO, options: ExportOptions, quoting: int = csv.QUOTE_MINIMAL):
        return csv.writer(
            output,
            delimiter=options.delimiter,
            lineterminator=options.line_terminator,
            quoting=quoting,
        )

    def _json_cell(self, value: Optional[Value], pretty: bool, record_id: str) -> str:
        if value is None:
            return ""
        return self._json_text(to_native(value), pretty, record_id)

    def _json_text(self, data, pretty: bool, record_id: str) -> str:
        try:
            if pretty:
                return json.dumps(data, ensure_ascii=False, allow_nan=False, indent=2)
            return json.dumps(data, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise SerializationError(str(e), record_id=record_id)
