"""
errors/ - Export error taxonomy and batch aggregation

Structured error classification for the export engine.
"""

from .taxonomy import (
    ErrorCode,
    ExportError,
    SerializationError,
    FileWriteError,
    ExportValidationError,
    MissingDataError,
    RenderError,
    UnsupportedFormatError,
    FailureInfo,
    EXPORT_ERROR_TYPES,
)

from .aggregator import (
    BatchErrorReport,
    BatchErrorAggregator,
)

__all__ = [
    # Taxonomy
    "ErrorCode",
    "ExportError",
    "SerializationError",
    "FileWriteError",
    "ExportValidationError",
    "MissingDataError",
    "RenderError",
    "UnsupportedFormatError",
    "FailureInfo",
    "EXPORT_ERROR_TYPES",
    # Aggregator
    "BatchErrorReport",
    "BatchErrorAggregator",
]
