"""
exporters/enums.py - Export enumerations and stage transitions.
"""

from enum import Enum
from typing import Dict, List


class ExportFormat(Enum):
    """Export format options."""
    JSON = "json"
    CSV = "csv"
    PDF = "pdf"


class ExportStatus(Enum):
    """Per-record (or per-call) outcome."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"


class ExportStage(Enum):
    """Stages an export call moves through."""
    PENDING = "pending"
    ENCODING = "encoding"
    VALIDATING = "validating"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


# ==================== Legal Stage Transitions ====================
# Any stage may fail; a cancelled call stops where it is.

LEGAL_TRANSITIONS: Dict[ExportStage, List[ExportStage]] = {
    ExportStage.PENDING: [
        ExportStage.ENCODING,
        ExportStage.FAILED,
    ],

    ExportStage.ENCODING: [
        ExportStage.VALIDATING,
        ExportStage.FAILED,
    ],

    ExportStage.VALIDATING: [
        ExportStage.WRITING,
        ExportStage.FAILED,
    ],

    ExportStage.WRITING: [
        ExportStage.DONE,
        ExportStage.FAILED,
    ],

    ExportStage.DONE: [],
    ExportStage.FAILED: [],
}


def is_valid_transition(from_stage: ExportStage, to_stage: ExportStage) -> bool:
    """Check if a stage transition is legal."""
    return to_stage in LEGAL_TRANSITIONS.get(from_stage, [])


def format_from_extension(file_path: str) -> ExportFormat:
    """
    Detect format from file extension.

    Raises:
        ValueError: extension does not map to a format
    """
    ext = file_path.lower().rsplit(".", 1)[-1] if "." in file_path else ""

    extension_map = {
        "json": ExportFormat.JSON,
        "csv": ExportFormat.CSV,
        "pdf": ExportFormat.PDF,
    }

    if ext not in extension_map:
        raise ValueError(
            f"Cannot detect format from extension '.{ext}'. "
            f"Supported: {list(extension_map.keys())}"
        )

    return extension_map[ext]
