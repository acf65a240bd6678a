"""
Unit tests for errors/taxonomy.py and errors/aggregator.py
"""

import pytest

from simexport.errors import (
    EXPORT_ERROR_TYPES,
    BatchErrorAggregator,
    ErrorCode,
    ExportError,
    ExportValidationError,
    FailureInfo,
    FileWriteError,
    MissingDataError,
    RenderError,
    SerializationError,
    UnsupportedFormatError,
)


class TestErrorTaxonomy:
    """Test export error classes."""

    def test_str_includes_code(self):
        err = SerializationError("NaN in result")
        assert str(err) == "[SERIALIZATION_FAILED] Value could not be serialized: NaN in result"

    def test_codes(self):
        assert FileWriteError("/x", "denied").code == ErrorCode.FILE_WRITE_FAILED
        assert RenderError("bad glyph").code == ErrorCode.RENDER_FAILED
        assert UnsupportedFormatError("xml").code == ErrorCode.UNSUPPORTED_FORMAT
        assert ExportValidationError(["a"]).code == ErrorCode.VALIDATION_FAILED

    def test_all_subclass_export_error(self):
        for cls in EXPORT_ERROR_TYPES.values():
            assert issubclass(cls, ExportError)

    def test_missing_data_message(self):
        err = MissingDataError("r1", ["outcome", "result"])
        assert err.message == "Record r1 is incomplete: outcome, result"
        assert err.details["missing"] == ["outcome", "result"]

    def test_missing_data_not_available(self):
        assert MissingDataError("r9", []).message == "Record r9 is not available"

    def test_validation_error_summarizes_issues(self):
        err = ExportValidationError(["first", "second", "third"])
        assert "first" in err.message
        assert "(+2 more)" in err.message
        assert err.details["issue_count"] == 3

    def test_record_id_keyword(self):
        err = SerializationError("bad", record_id="r2")
        assert err.record_id == "r2"

    def test_to_dict(self):
        data = FileWriteError("/tmp/x.json", "disk full").to_dict()
        assert data["code"] == "FILE_WRITE_FAILED"
        assert data["details"]["path"] == "/tmp/x.json"


class TestFailureInfo:
    """Test boundary failure representation."""

    def test_from_export_error(self):
        failure = FailureInfo.from_exception(MissingDataError("r1", ["outcome"]))
        assert failure.code == ErrorCode.MISSING_DATA
        assert failure.record_id == "r1"

    def test_from_unexpected_exception(self):
        failure = FailureInfo.from_exception(KeyError("x"), record_id="r3")
        assert failure.code == ErrorCode.EXPORT_FAILED
        assert failure.message.startswith("KeyError")
        assert failure.record_id == "r3"

    def test_describe(self):
        failure = FailureInfo.from_exception(MissingDataError("r1", ["outcome"]))
        assert failure.describe() == "r1: [MISSING_DATA] Record r1 is incomplete: outcome"

    def test_describe_without_record(self):
        failure = FailureInfo(code=ErrorCode.FILE_WRITE_FAILED, message="nope")
        assert failure.describe() == "[FILE_WRITE_FAILED] nope"

    def test_to_dict_is_json_safe(self):
        failure = FailureInfo(
            code=ErrorCode.EXPORT_FAILED,
            message="m",
            details={"obj": object(), "items": [1, object()]},
        )
        data = failure.to_dict()
        assert isinstance(data["details"]["obj"], str)
        assert data["details"]["items"][0] == 1
        assert isinstance(data["details"]["items"][1], str)


class TestBatchErrorAggregator:
    """Test per-record failure aggregation."""

    @pytest.fixture
    def aggregator(self):
        agg = BatchErrorAggregator()
        agg.add_exception(MissingDataError("r1", ["outcome"]), "r1")
        agg.add_exception(SerializationError("NaN"), "r2")
        agg.add_exception(MissingDataError("r3", ["result"]), "r3")
        return agg

    def test_messages_in_order(self, aggregator):
        messages = aggregator.messages()
        assert len(messages) == 3
        assert messages[0].startswith("r1: [MISSING_DATA]")
        assert messages[1].startswith("r2: [SERIALIZATION_FAILED]")

    def test_get_by_code(self, aggregator):
        assert len(aggregator.get_by_code(ErrorCode.MISSING_DATA)) == 2

    def test_failed_record_ids(self, aggregator):
        assert aggregator.failed_record_ids == ["r1", "r2", "r3"]

    def test_report(self, aggregator):
        report = aggregator.generate_report()
        assert report.total_errors == 3
        assert report.by_code == {"SERIALIZATION_FAILED": 1, "MISSING_DATA": 2}
        assert report.summary.startswith("3 failure(s)")

    def test_report_single_code(self):
        agg = BatchErrorAggregator()
        agg.add_exception(RenderError("x"), "a")
        agg.add_exception(RenderError("y"), "b")
        assert agg.generate_report().summary == "2 failure(s), all RENDER_FAILED"

    def test_empty(self):
        agg = BatchErrorAggregator()
        assert not agg.has_errors()
        assert agg.generate_report().summary == "No failures"
