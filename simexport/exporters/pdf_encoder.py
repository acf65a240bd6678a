"""
exporters/pdf_encoder.py - Document (PDF) encoder.

Renders records with reportlab platypus. Each record becomes one section:

- header block (id, contract, function, network, method, timestamp)
- outcome block with a status badge
- arguments and result/error blocks
- resource usage table (when included and present)
- state diff table (when included and non-empty); snapshots too long for
  a cell follow the table as code blocks

Sections are separated by page breaks. Batch documents open with a cover
block. Standard Type 1 fonts only cover cp1252; text outside it raises
RenderError rather than rendering as blanks.
"""

from __future__ import annotations
import io
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.platypus import (
    PageBreak,
    Paragraph,
    Preformatted,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from .base import BaseEncoder
from .enums import ExportFormat
from .options import ExportOptions
from ..errors import RenderError
from ..records import SimulationRecord, Value, to_native

logger = logging.getLogger("exports.pdf")

PAGE_SIZES = {
    "A4": A4,
    "LETTER": LETTER,
}

BOLD_VARIANTS = {
    "Helvetica": "Helvetica-Bold",
    "Times-Roman": "Times-Bold",
    "Courier": "Courier-Bold",
}

SUCCESS_COLOR = colors.HexColor("#2e7d32")
FAILURE_COLOR = colors.HexColor("#c62828")
MARGIN = 18 * mm
GRID_COLOR = colors.HexColor("#bdbdbd")
HEADER_FILL = colors.HexColor("#eeeeee")

# Longer snapshots move out of the diff table; a table row cannot span pages
SNAPSHOT_CELL_LIMIT = 300
# Courier 8pt across the frame
CODE_LINE_LENGTH = 95


@dataclass(frozen=True)
class DocumentSection:
    """Pre-rendered text for one record's section."""
    record_id: str
    title: str
    succeeded: bool
    timestamp: Optional[datetime]
    header: List[tuple]
    args_text: str
    outcome_label: str
    outcome_text: str
    usage_rows: Optional[List[tuple]]
    change_rows: Optional[List[tuple]]


class DocumentEncoder(BaseEncoder):
    """Encodes records as a paginated PDF."""

    format = ExportFormat.PDF
    content_type = "application/pdf"
    file_extension = ".pdf"

    def build_entry(self, record: SimulationRecord, options: ExportOptions) -> DocumentSection:
        """
        Prepare a record's section and test-render it on its own.

        Raises:
            RenderError: text outside the font encoding, or the section
                cannot be laid out
        """
        pretty = options.resolved_prettify

        header = [
            ("Record", record.record_id),
            ("Contract", record.contract_id),
            ("Function", record.function_name),
            ("Network", record.network or "-"),
            ("Method", record.method or "-"),
            ("Timestamp", record.timestamp.isoformat() if record.timestamp else "-"),
        ]

        if record.succeeded:
            outcome_label, outcome_value = "Result", record.result
        else:
            outcome_label, outcome_value = "Error", record.error

        usage_rows = None
        if options.include_resource_usage and record.resource_usage is not None:
            usage = record.resource_usage
            usage_rows = [
                ("CPU instructions", f"{usage.cpu_instructions:,}"),
                ("Memory bytes", f"{usage.memory_bytes:,}"),
                ("Duration (ms)", f"{usage.duration_ms:g}"),
            ]

        change_rows = None
        if options.include_state_diff and record.state_diff is not None and not record.state_diff.is_empty:
            change_rows = [
                (
                    change.key,
                    change.kind.value,
                    self._value_text(change.before, pretty),
                    self._value_text(change.after, pretty),
                )
                for change in record.state_diff
            ]

        section = DocumentSection(
            record_id=record.record_id,
            title=f"{record.function_name} on {record.contract_id}",
            succeeded=record.succeeded,
            timestamp=record.timestamp,
            header=header,
            args_text=self._json_text([to_native(a) for a in record.args], pretty),
            outcome_label=outcome_label,
            outcome_text=self._value_text(outcome_value, pretty),
            usage_rows=usage_rows,
            change_rows=change_rows,
        )

        if options.font_name in pdfmetrics.standardFonts:
            self._check_encodable(section)

        self._render(self._section_flowables(section, options), options)
        return section

    def assemble(
        self,
        parts: Sequence[DocumentSection],
        options: ExportOptions,
        batch: bool = False,
    ) -> bytes:
        story: List[Any] = []
        if batch:
            story.extend(self._cover_flowables(parts, options))
            if parts:
                story.append(PageBreak())

        for i, section in enumerate(parts):
            if i > 0:
                story.append(PageBreak())
            story.extend(self._section_flowables(section, options))

        if not story:
            story.append(Paragraph("No records.", self._styles(options)["body"]))

        return self._render(story, options)

    # =========================================================================
    # RENDERING
    # =========================================================================

    def _render(self, story: List[Any], options: ExportOptions) -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=PAGE_SIZES[options.page_size],
            leftMargin=MARGIN,
            rightMargin=MARGIN,
            topMargin=MARGIN,
            bottomMargin=MARGIN,
            title="Simulation Export",
            author="simexport",
            invariant=1 if options.deterministic else 0,
        )
        try:
            doc.build(story)
        except Exception as e:
            logger.debug(f"Layout failed: {e}")
            raise RenderError(f"{type(e).__name__}: {e}")
        return buffer.getvalue()

    def _frame_width(self, options: ExportOptions) -> float:
        return PAGE_SIZES[options.page_size][0] - 2 * MARGIN

    def _styles(self, options: ExportOptions) -> dict:
        font = options.font_name
        bold = BOLD_VARIANTS.get(font, font)
        sample = getSampleStyleSheet()
        return {
            "title": ParagraphStyle("ExportTitle", parent=sample["Title"], fontName=bold),
            "heading": ParagraphStyle("ExportHeading", parent=sample["Heading2"], fontName=bold),
            "label": ParagraphStyle("ExportLabel", parent=sample["Heading4"], fontName=bold),
            "body": ParagraphStyle("ExportBody", parent=sample["BodyText"], fontName=font),
            "cell": ParagraphStyle("ExportCell", parent=sample["BodyText"], fontName=font, fontSize=8, leading=10),
            "badge": ParagraphStyle(
                "ExportBadge", parent=sample["BodyText"], fontName=bold,
                textColor=colors.white, alignment=1,
            ),
            "code": ParagraphStyle("ExportCode", parent=sample["Code"], fontName="Courier", fontSize=8, leading=10),
        }

    def _cover_flowables(self, parts: Sequence[DocumentSection], options: ExportOptions) -> List[Any]:
        styles = self._styles(options)
        succeeded = sum(1 for p in parts if p.succeeded)

        if options.deterministic:
            # Wall clock would break byte-identical output
            stamps = [p.timestamp for p in parts if p.timestamp is not None]
            exported_at = max(stamps).isoformat() if stamps else "-"
        else:
            exported_at = datetime.now(timezone.utc).isoformat()

        rows = [
            ("Records", str(len(parts))),
            ("Succeeded", str(succeeded)),
            ("Failed", str(len(parts) - succeeded)),
            ("Exported at", exported_at),
        ]
        return [
            Paragraph("Simulation Export", styles["title"]),
            Spacer(1, 6 * mm),
            self._key_value_table(rows, styles, options),
        ]

    def _section_flowables(self, section: DocumentSection, options: ExportOptions) -> List[Any]:
        styles = self._styles(options)
        flowables: List[Any] = [
            Paragraph(escape(section.title), styles["heading"]),
            self._key_value_table(section.header, styles, options),
            Spacer(1, 4 * mm),
            Paragraph("Outcome", styles["label"]),
            self._badge(section.succeeded, styles),
            Spacer(1, 4 * mm),
            Paragraph("Arguments", styles["label"]),
            self._code_block(section.args_text, styles),
            Paragraph(escape(section.outcome_label), styles["label"]),
            self._code_block(section.outcome_text, styles),
        ]

        if section.usage_rows:
            flowables.append(Paragraph("Resource Usage", styles["label"]))
            flowables.append(self._key_value_table(section.usage_rows, styles, options))

        if section.change_rows:
            flowables.append(Paragraph("State Changes", styles["label"]))
            flowables.extend(self._diff_flowables(section.change_rows, styles, options))

        return flowables

    def _badge(self, succeeded: bool, styles: dict) -> Table:
        label = "SUCCESS" if succeeded else "FAILURE"
        badge = Table([[Paragraph(label, styles["badge"])]], colWidths=[30 * mm], hAlign="LEFT")
        badge.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, -1), SUCCESS_COLOR if succeeded else FAILURE_COLOR),
            ("TOPPADDING", (0, 0), (-1, -1), 2),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
        ]))
        return badge

    def _key_value_table(self, rows: Sequence[tuple], styles: dict, options: ExportOptions) -> Table:
        data = [
            [Paragraph(escape(k), styles["cell"]), Paragraph(escape(v), styles["cell"])]
            for k, v in rows
        ]
        width = self._frame_width(options)
        table = Table(data, colWidths=[35 * mm, width - 35 * mm], hAlign="LEFT")
        table.setStyle(TableStyle([
            ("GRID", (0, 0), (-1, -1), 0.25, GRID_COLOR),
            ("BACKGROUND", (0, 0), (0, -1), HEADER_FILL),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]))
        return table

    def _diff_flowables(self, rows: Sequence[tuple], styles: dict, options: ExportOptions) -> List[Any]:
        """
        Diff table, followed by any snapshots too long for a table cell.

        A long snapshot's cell points to a code block under the table,
        which can break across pages.
        """
        data = [[Paragraph(h, styles["cell"]) for h in ("Key", "Change", "Before", "After")]]
        overflow: List[tuple] = []
        for key, kind, before, after in rows:
            cells = [Paragraph(escape(key), styles["cell"]), Paragraph(escape(kind), styles["cell"])]
            for side, text in (("before", before), ("after", after)):
                if len(text) > SNAPSHOT_CELL_LIMIT:
                    overflow.append((f"{key} ({side})", text))
                    text = "See below"
                cells.append(Paragraph(escape(text), styles["cell"]))
            data.append(cells)

        snapshot = (self._frame_width(options) - 62 * mm) / 2
        table = Table(data, colWidths=[40 * mm, 22 * mm, snapshot, snapshot], repeatRows=1, hAlign="LEFT")
        table.setStyle(TableStyle([
            ("GRID", (0, 0), (-1, -1), 0.25, GRID_COLOR),
            ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]))

        flowables: List[Any] = [table]
        for label, text in overflow:
            flowables.append(Paragraph(escape(label), styles["label"]))
            flowables.append(self._code_block(text, styles))
        return flowables

    def _code_block(self, text: str, styles: dict) -> Preformatted:
        return Preformatted(text, styles["code"], maxLineLength=CODE_LINE_LENGTH, newLineChars="")

    # =========================================================================
    # TEXT
    # =========================================================================

    def _value_text(self, value: Optional[Value], pretty: bool) -> str:
        if value is None:
            return "-"
        return self._json_text(to_native(value), pretty)

    def _json_text(self, data: Any, pretty: bool) -> str:
        # Non-finite floats render as-is; the document is not machine-read
        if pretty:
            return json.dumps(data, ensure_ascii=False, indent=2)
        return json.dumps(data, ensure_ascii=False)

    def _check_encodable(self, section: DocumentSection) -> None:
        texts = [section.title] + [v for _, v in section.header]
        texts += [section.args_text, section.outcome_text]
        for row in section.change_rows or ():
            texts.extend(row)
        for text in texts:
            try:
                text.encode("cp1252")
            except UnicodeEncodeError as e:
                bad = text[e.start:e.end]
                raise RenderError(
                    f"character {bad!r} cannot be encoded in the document font",
                    record_id=section.record_id,
                )
