"""
Unit tests for bootstrap/config.py
"""

import json
import logging

from simexport.bootstrap import (
    ExportSettings,
    LoggingConfig,
    SimExportConfig,
    configure_logging,
    load_config,
)


class TestExportSettings:

    def test_defaults(self, monkeypatch):
        for name in ("SIMEXPORT_DEFAULT_FORMAT", "SIMEXPORT_CSV_LINE_TERMINATOR"):
            monkeypatch.delenv(name, raising=False)
        settings = ExportSettings.from_env()
        assert settings.default_format == "json"
        assert settings.csv_line_terminator == "\r\n"
        assert settings.include_state_diff

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SIMEXPORT_DEFAULT_FORMAT", "csv")
        monkeypatch.setenv("SIMEXPORT_CSV_DELIMITER", ";")
        monkeypatch.setenv("SIMEXPORT_CSV_LINE_TERMINATOR", "LF")
        monkeypatch.setenv("SIMEXPORT_INCLUDE_STATE_DIFF", "false")
        monkeypatch.setenv("SIMEXPORT_PDF_PAGE_SIZE", "letter")

        settings = ExportSettings.from_env()
        assert settings.default_format == "csv"
        assert settings.csv_delimiter == ";"
        assert settings.csv_line_terminator == "\n"
        assert not settings.include_state_diff
        assert settings.pdf_page_size == "LETTER"


class TestSimExportConfig:
    """Test file and environment loading."""

    def test_from_file_overlays_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SIMEXPORT_ENVIRONMENT", "staging")
        path = tmp_path / "simexport.json"
        path.write_text(json.dumps({
            "debug": True,
            "export": {"default_format": "pdf", "pdf_deterministic": True},
            "logging": {"level": "WARNING"},
        }))

        config = SimExportConfig.from_file(str(path))
        assert config.environment == "staging"
        assert config.debug
        assert config.export.default_format == "pdf"
        assert config.export.pdf_deterministic
        assert config.logging.level == "WARNING"

    def test_unknown_export_key_ignored(self, tmp_path, caplog):
        path = tmp_path / "simexport.json"
        path.write_text(json.dumps({"export": {"colour": "blue"}}))
        with caplog.at_level(logging.WARNING, logger="bootstrap.config"):
            config = SimExportConfig.from_file(str(path))
        assert not hasattr(config.export, "colour")
        assert "colour" in caplog.text

    def test_missing_file_falls_back(self, tmp_path):
        config = SimExportConfig.from_file(str(tmp_path / "absent.json"))
        assert isinstance(config.export, ExportSettings)

    def test_load_config_searches_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "simexport.json").write_text(json.dumps({"environment": "local"}))
        assert load_config().environment == "local"

    def test_load_config_without_files(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setenv("SIMEXPORT_ENVIRONMENT", "ci")
        assert load_config().environment == "ci"

    def test_to_dict(self):
        data = SimExportConfig().to_dict()
        assert data["export"]["default_format"] == "json"
        assert data["logging"]["level"] == "INFO"


class TestConfigureLogging:

    def test_log_file(self, tmp_path):
        root = logging.getLogger()
        saved_level = root.level
        log_file = tmp_path / "simexport.log"

        configure_logging(LoggingConfig(level="DEBUG", log_file=str(log_file)))
        try:
            logging.getLogger("exports.orchestrator").debug("hello")
            for handler in root.handlers:
                handler.flush()
            assert "hello" in log_file.read_text()
        finally:
            for handler in list(root.handlers):
                root.removeHandler(handler)
                handler.close()
            root.setLevel(saved_level)
