"""
exporters/options.py - Per-call export options.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from .enums import ExportFormat
from ..errors import UnsupportedFormatError

if TYPE_CHECKING:
    from ..bootstrap.config import ExportSettings


_PRETTIFY_DEFAULTS = {
    ExportFormat.JSON: True,
    ExportFormat.CSV: False,
    ExportFormat.PDF: True,
}

PAGE_SIZES = ("A4", "LETTER")


def coerce_format(value) -> ExportFormat:
    """
    Accept an ExportFormat or its string value.

    Raises:
        UnsupportedFormatError: unknown format
    """
    if isinstance(value, ExportFormat):
        return value
    try:
        return ExportFormat(str(value).lower())
    except ValueError:
        raise UnsupportedFormatError(str(value))


@dataclass
class ExportOptions:
    """Options for one export call."""

    format: ExportFormat = ExportFormat.JSON
    output_path: str = ""

    # Content toggles
    include_state_diff: bool = True
    include_resource_usage: bool = True

    # None resolves per format, see resolved_prettify
    prettify: Optional[bool] = None

    # Structured
    json_indent: int = 2

    # Tabular
    delimiter: str = ","
    line_terminator: str = "\r\n"

    # Document
    page_size: str = "A4"
    font_name: str = "Helvetica"
    deterministic: bool = False

    def __post_init__(self):
        self.format = coerce_format(self.format)
        if len(self.delimiter) != 1 or self.delimiter in ('"', "\r", "\n"):
            raise ValueError(f"Invalid delimiter: {self.delimiter!r}")
        if self.line_terminator not in ("\r\n", "\n"):
            raise ValueError(f"Invalid line terminator: {self.line_terminator!r}")
        self.page_size = self.page_size.upper()
        if self.page_size not in PAGE_SIZES:
            raise ValueError(f"Unsupported page size: {self.page_size}")

    @property
    def resolved_prettify(self) -> bool:
        if self.prettify is None:
            return _PRETTIFY_DEFAULTS[self.format]
        return self.prettify

    @classmethod
    def from_settings(
        cls,
        settings: "ExportSettings",
        format=None,
        output_path: str = "",
        **overrides,
    ) -> "ExportOptions":
        """
        Build options from configuration defaults.

        Args:
            settings: Loaded ExportSettings
            format: Target format (settings default if None)
            output_path: Destination path
            **overrides: Any ExportOptions field
        """
        values = dict(
            format=format if format is not None else settings.default_format,
            output_path=output_path,
            include_state_diff=settings.include_state_diff,
            include_resource_usage=settings.include_resource_usage,
            json_indent=settings.json_indent,
            delimiter=settings.csv_delimiter,
            line_terminator=settings.csv_line_terminator,
            page_size=settings.pdf_page_size,
            font_name=settings.pdf_font,
            deterministic=settings.pdf_deterministic,
        )
        values.update(overrides)
        return cls(**values)
