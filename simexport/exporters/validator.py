"""
exporters/validator.py - Post-encode artifact checks.

Structural integrity checks run on the produced bytes, separate from the
encoders. check() returns one message per failed check; empty means valid.
"""

from __future__ import annotations
import csv
import json
from typing import Any, Dict, List, Optional

from .csv_encoder import TABULAR_COLUMNS, TabularEncoder
from .enums import ExportFormat
from .options import ExportOptions


class ExportValidator:
    """Validates export artifacts by format."""

    def check(
        self,
        data: bytes,
        options: ExportOptions,
        expected_count: Optional[int] = None,
    ) -> List[str]:
        """
        Check an artifact.

        Args:
            data: Artifact bytes
            options: Options it was produced with (format, delimiter)
            expected_count: Records the artifact should hold (JSON only)

        Returns:
            List of problems; empty if valid
        """
        if options.format == ExportFormat.JSON:
            return self.check_json(data, expected_count)
        if options.format == ExportFormat.CSV:
            return self.check_csv(data, options)
        return self.check_pdf(data)

    def check_json(self, data: bytes, expected_count: Optional[int] = None) -> List[str]:
        errors: List[str] = []
        try:
            document = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            return [f"Output is not valid JSON: {e}"]

        if not isinstance(document, dict):
            return ["JSON root is not an object"]

        metadata = document.get("metadata")
        entries = document.get("entries")
        if not isinstance(metadata, dict):
            errors.append("Missing 'metadata' object")
        if not isinstance(entries, list):
            errors.append("Missing 'entries' array")

        if isinstance(metadata, dict) and isinstance(entries, list):
            count = metadata.get("entryCount")
            if count != len(entries):
                errors.append(f"entryCount {count} does not match {len(entries)} entries")

        if isinstance(entries, list) and expected_count is not None and len(entries) != expected_count:
            errors.append(f"Expected {expected_count} entries, found {len(entries)}")

        return errors

    def check_csv(self, data: bytes, options: ExportOptions) -> List[str]:
        if not data:
            return ["Output is empty"]

        try:
            rows = TabularEncoder().parse(data, options)
        except (UnicodeDecodeError, csv.Error) as e:
            return [f"Output is not valid delimited text: {e}"]

        if not rows:
            return ["Output has no rows"]

        errors: List[str] = []
        header = rows[0]
        if tuple(header) != TABULAR_COLUMNS:
            errors.append("Header does not match the tabular column set")

        for line, row in enumerate(rows[1:], start=2):
            if len(row) != len(header):
                errors.append(f"Row {line} has {len(row)} columns, expected {len(header)}")

        return errors

    def check_pdf(self, data: bytes) -> List[str]:
        if not data:
            return ["Output is empty"]

        errors: List[str] = []
        if not data.startswith(b"%PDF-"):
            errors.append("Missing %PDF- header")
        if not data.rstrip().endswith(b"%%EOF"):
            errors.append("Missing %%EOF trailer")
        return errors

    def summarize(self, data: bytes, options: ExportOptions) -> Dict[str, Any]:
        """Validation report for an existing artifact."""
        errors = self.check(data, options)
        return {
            "format": options.format.value,
            "size_bytes": len(data),
            "valid": not errors,
            "errors": errors,
        }
