"""
Unit tests for the simexport CLI
"""

import json
import logging
import pytest

from simexport.cli import CommandResult, OutputFormat, build_registry, format_output, main


@pytest.fixture(autouse=True)
def restore_root_logging():
    """main() reconfigures the root logger."""
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run in an empty directory with no config files."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def history_file(workdir, success_record, failure_record, diff_record):
    path = workdir / "history.json"
    path.write_text(json.dumps([r.to_dict() for r in (success_record, failure_record, diff_record)]))
    return path


class TestRegistry:

    def test_aliases(self):
        registry = build_registry()
        assert registry.get("x") is registry.get("export")
        assert registry.get("ls") is registry.get("formats")
        assert registry.get("check") is registry.get("validate")
        assert registry.get("nope") is None


class TestExportCommand:
    """Test `simexport export`."""

    def test_export_all_to_json(self, history_file, workdir, capsys):
        out = workdir / "out.json"
        code = main(["export", str(history_file), "-o", str(out)])

        assert code == 0
        assert "Exported 3 record(s)" in capsys.readouterr().out
        assert json.loads(out.read_text())["metadata"]["entryCount"] == 3

    def test_default_output_path(self, history_file, workdir):
        assert main(["export", str(history_file), "-f", "csv"]) == 0
        assert (workdir / "exports" / "simulations.csv").exists()

    def test_selected_ids(self, history_file, workdir):
        out = workdir / "out.json"
        assert main(["export", str(history_file), "--id", "sim-003", "--id", "sim-001", "-o", str(out)]) == 0
        ids = [e["id"] for e in json.loads(out.read_text())["entries"]]
        assert ids == ["sim-003", "sim-001"]

    def test_missing_id_fails(self, history_file, workdir, capsys):
        out = workdir / "out.csv"
        code = main(["export", str(history_file), "-f", "csv", "--id", "ghost", "--id", "sim-001", "-o", str(out)])
        assert code == 1
        assert "1 of 2 record(s) failed" in capsys.readouterr().out
        assert out.exists()

    def test_json_output_mode(self, history_file, workdir, capsys):
        out = workdir / "out.json"
        assert main(["--json", "export", str(history_file), "-o", str(out), "--no-state-diff"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["success"]
        assert payload["data"]["succeeded"] == 3
        assert "stateDiff" not in json.loads(out.read_text())["entries"][2]

    def test_rejected_entries_count_as_failed(self, workdir, success_record, capsys):
        bad = success_record.to_dict()
        bad["id"] = "sim-neg"
        bad["resourceUsage"]["cpuInstructions"] = -1
        path = workdir / "history.json"
        path.write_text(json.dumps([success_record.to_dict(), bad]))
        out = workdir / "out.csv"

        code = main(["--json", "export", str(path), "-f", "csv", "-o", str(out)])

        assert code == 1
        payload = json.loads(capsys.readouterr().out)
        assert not payload["success"]
        assert payload["data"]["total"] == 2
        assert payload["data"]["succeeded"] == 1
        assert payload["data"]["failed"] == 1
        assert payload["data"]["skipped"][0]["code"] == "MISSING_DATA"
        assert any("MISSING_DATA" in d for d in payload["details"])
        assert out.exists()

    def test_selected_ids_ignore_rejected_entries(self, workdir, success_record):
        bad = dict(success_record.to_dict(), id="sim-bad")
        bad["resourceUsage"]["cpuInstructions"] = -1
        path = workdir / "history.json"
        path.write_text(json.dumps([success_record.to_dict(), bad]))
        out = workdir / "out.json"
        assert main(["export", str(path), "--id", "sim-001", "-o", str(out)]) == 0

    def test_bad_history_file(self, workdir, capsys):
        assert main(["export", str(workdir / "absent.json")]) == 1
        assert "Error:" in capsys.readouterr().out

    def test_bad_delimiter(self, history_file, capsys):
        assert main(["export", str(history_file), "-f", "csv", "--delimiter", ";;"]) == 1


class TestOtherCommands:

    def test_formats(self, workdir, capsys):
        assert main(["formats"]) == 0
        out = capsys.readouterr().out
        assert "format | extension | content_type" in out
        assert "application/pdf" in out

    def test_validate_good_file(self, history_file, workdir, capsys):
        out = workdir / "out.csv"
        main(["export", str(history_file), "-f", "csv", "-o", str(out)])
        capsys.readouterr()
        assert main(["validate", str(out)]) == 0
        assert "is valid" in capsys.readouterr().out

    def test_validate_bad_file(self, workdir, capsys):
        path = workdir / "broken.pdf"
        path.write_bytes(b"not a pdf")
        assert main(["check", str(path)]) == 1
        assert "Missing %PDF- header" in capsys.readouterr().out

    def test_validate_unknown_extension(self, workdir):
        path = workdir / "notes.txt"
        path.write_text("hi")
        assert main(["validate", str(path)]) == 1


class TestFormatOutput:

    def test_text_failure_lists_details(self):
        result = CommandResult(success=False, error="boom", details=["a", "b"], exit_code=1)
        assert format_output(result, OutputFormat.TEXT) == "Error: boom\n  - a\n  - b"

    def test_json(self):
        result = CommandResult(message="ok", data={"n": 1})
        assert json.loads(format_output(result, OutputFormat.JSON))["data"] == {"n": 1}
