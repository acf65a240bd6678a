"""
exporters/ - Format encoders, validation and export orchestration
"""

from .enums import (
    ExportFormat,
    ExportStatus,
    ExportStage,
    LEGAL_TRANSITIONS,
    is_valid_transition,
    format_from_extension,
)
from .options import ExportOptions, coerce_format
from .results import ExportResult, BatchExportResult
from .base import BaseEncoder
from .json_encoder import JsonEncoder, FORMAT_VERSION
from .csv_encoder import TabularEncoder, TABULAR_COLUMNS, TABULAR_VERSION
from .pdf_encoder import DocumentEncoder
from .factory import get_encoder, list_formats
from .validator import ExportValidator
from .orchestrator import ExportOrchestrator, StageTrail

__all__ = [
    # Enums
    "ExportFormat",
    "ExportStatus",
    "ExportStage",
    "LEGAL_TRANSITIONS",
    "is_valid_transition",
    "format_from_extension",
    # Options / results
    "ExportOptions",
    "coerce_format",
    "ExportResult",
    "BatchExportResult",
    # Encoders
    "BaseEncoder",
    "JsonEncoder",
    "FORMAT_VERSION",
    "TabularEncoder",
    "TABULAR_COLUMNS",
    "TABULAR_VERSION",
    "DocumentEncoder",
    "get_encoder",
    "list_formats",
    # Validation / orchestration
    "ExportValidator",
    "ExportOrchestrator",
    "StageTrail",
]
