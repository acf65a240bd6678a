"""
exporters/base.py - Base encoder class.

An encoder turns records into artifact bytes in two steps so callers can
handle per-record failures: encode_entry() builds one record's part and
assemble() joins parts into the final artifact.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, List, Sequence

from .enums import ExportFormat
from .options import ExportOptions
from ..records import SimulationRecord


class BaseEncoder(ABC):
    """Abstract base class for record encoders."""

    format: ExportFormat
    content_type: str = "application/octet-stream"
    file_extension: str = ""

    @abstractmethod
    def build_entry(self, record: SimulationRecord, options: ExportOptions) -> Any:
        """Format-specific part for a record already known to be complete."""
        pass

    @abstractmethod
    def assemble(
        self,
        parts: Sequence[Any],
        options: ExportOptions,
        batch: bool = False,
    ) -> bytes:
        """
        Join per-record parts into the artifact.

        Args:
            parts: Results of encode_entry(), in input order
            options: Export options
            batch: Batch layout (cover block, etc.)

        Returns:
            Artifact bytes
        """
        pass

    def encode_entry(self, record: SimulationRecord, options: ExportOptions) -> Any:
        """
        Encode one record's part.

        Raises:
            MissingDataError: record is incomplete
            SerializationError: a value cannot be represented
        """
        record.require_complete()
        return self.build_entry(record, options)

    def encode(
        self,
        records: Sequence[SimulationRecord],
        options: ExportOptions,
        batch: bool = False,
    ) -> bytes:
        """Encode records straight to artifact bytes."""
        parts: List[Any] = [self.encode_entry(r, options) for r in records]
        return self.assemble(parts, options, batch=batch)
