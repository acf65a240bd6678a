"""
exporters/factory.py - Encoder registry.
"""

from __future__ import annotations
from typing import Dict, List, Type

from .base import BaseEncoder
from .csv_encoder import TabularEncoder
from .enums import ExportFormat
from .json_encoder import JsonEncoder
from .options import coerce_format
from .pdf_encoder import DocumentEncoder


# Registry of encoders by format
_ENCODER_REGISTRY: Dict[ExportFormat, Type[BaseEncoder]] = {
    ExportFormat.JSON: JsonEncoder,
    ExportFormat.CSV: TabularEncoder,
    ExportFormat.PDF: DocumentEncoder,
}


def get_encoder(format) -> BaseEncoder:
    """
    Get encoder instance for format.

    Args:
        format: ExportFormat or its string value

    Returns:
        BaseEncoder instance

    Raises:
        UnsupportedFormatError: Unknown export format
    """
    return _ENCODER_REGISTRY[coerce_format(format)]()


def list_formats() -> List[Dict[str, str]]:
    """Describe available export formats."""
    return [
        {
            "format": fmt.value,
            "extension": cls.file_extension,
            "content_type": cls.content_type,
        }
        for fmt, cls in _ENCODER_REGISTRY.items()
    ]
