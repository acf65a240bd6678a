"""
Unit tests for exporters/validator.py
"""

import json

from simexport.exporters import (
    ExportOptions,
    ExportValidator,
    JsonEncoder,
    TABULAR_COLUMNS,
    TabularEncoder,
)


JSON_OPTIONS = ExportOptions(format="json")
CSV_OPTIONS = ExportOptions(format="csv")
PDF_OPTIONS = ExportOptions(format="pdf")


class TestJsonValidation:
    """Test structured artifact checks."""

    def test_valid(self, success_record):
        data = JsonEncoder().encode([success_record], JSON_OPTIONS)
        assert ExportValidator().check(data, JSON_OPTIONS, expected_count=1) == []

    def test_not_json(self):
        errors = ExportValidator().check(b"{not json", JSON_OPTIONS)
        assert len(errors) == 1
        assert errors[0].startswith("Output is not valid JSON")

    def test_missing_sections(self):
        errors = ExportValidator().check(b"{}", JSON_OPTIONS)
        assert errors == ["Missing 'metadata' object", "Missing 'entries' array"]

    def test_entry_count_mismatch(self):
        data = json.dumps({"metadata": {"entryCount": 2}, "entries": [{}]}).encode()
        errors = ExportValidator().check(data, JSON_OPTIONS)
        assert errors == ["entryCount 2 does not match 1 entries"]

    def test_expected_count(self, success_record):
        data = JsonEncoder().encode([success_record], JSON_OPTIONS)
        errors = ExportValidator().check(data, JSON_OPTIONS, expected_count=3)
        assert errors == ["Expected 3 entries, found 1"]


class TestCsvValidation:
    """Test tabular artifact checks."""

    def test_valid(self, success_record, diff_record):
        data = TabularEncoder().encode([success_record, diff_record], CSV_OPTIONS)
        assert ExportValidator().check(data, CSV_OPTIONS) == []

    def test_empty(self):
        assert ExportValidator().check(b"", CSV_OPTIONS) == ["Output is empty"]

    def test_wrong_header(self):
        errors = ExportValidator().check(b"a,b,c\r\n1,2,3\r\n", CSV_OPTIONS)
        assert errors == ["Header does not match the tabular column set"]

    def test_ragged_rows_reported_by_line(self):
        header = ",".join(TABULAR_COLUMNS)
        full = ",".join(["x"] * len(TABULAR_COLUMNS))
        data = f"{header}\r\n{full}\r\nshort,row\r\n{full},extra\r\n".encode()
        errors = ExportValidator().check(data, CSV_OPTIONS)
        assert errors == [
            f"Row 3 has 2 columns, expected {len(TABULAR_COLUMNS)}",
            f"Row 4 has {len(TABULAR_COLUMNS) + 1} columns, expected {len(TABULAR_COLUMNS)}",
        ]

    def test_custom_delimiter(self, success_record):
        options = ExportOptions(format="csv", delimiter="\t")
        data = TabularEncoder().encode([success_record], options)
        assert ExportValidator().check(data, options) == []


class TestPdfValidation:
    """Test document artifact checks."""

    def test_valid_markers(self):
        assert ExportValidator().check(b"%PDF-1.4\n...\n%%EOF\n", PDF_OPTIONS) == []

    def test_empty(self):
        assert ExportValidator().check(b"", PDF_OPTIONS) == ["Output is empty"]

    def test_missing_markers(self):
        errors = ExportValidator().check(b"hello", PDF_OPTIONS)
        assert errors == ["Missing %PDF- header", "Missing %%EOF trailer"]

    def test_truncated(self):
        errors = ExportValidator().check(b"%PDF-1.4\n1 0 obj", PDF_OPTIONS)
        assert errors == ["Missing %%EOF trailer"]

    def test_summarize(self):
        report = ExportValidator().summarize(b"hello", PDF_OPTIONS)
        assert report["valid"] is False
        assert report["size_bytes"] == 5
        assert report["format"] == "pdf"
