"""
bootstrap/config.py - Export engine configuration

Provides configuration loading from files, environment variables, and defaults.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from pathlib import Path
import os
import json
import logging

logger = logging.getLogger("bootstrap.config")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class ExportSettings:
    """Defaults applied when building ExportOptions."""

    default_format: str = "json"
    export_dir: str = "./exports"

    # Content toggles
    include_state_diff: bool = True
    include_resource_usage: bool = True

    # Structured
    json_indent: int = 2

    # Tabular
    csv_delimiter: str = ","
    csv_line_terminator: str = "\r\n"

    # Document
    pdf_page_size: str = "A4"
    pdf_font: str = "Helvetica"
    pdf_deterministic: bool = False

    @classmethod
    def from_env(cls) -> "ExportSettings":
        terminator = os.getenv("SIMEXPORT_CSV_LINE_TERMINATOR", "crlf").lower()
        return cls(
            default_format=os.getenv("SIMEXPORT_DEFAULT_FORMAT", "json"),
            export_dir=os.getenv("SIMEXPORT_EXPORT_DIR", "./exports"),
            include_state_diff=_env_bool("SIMEXPORT_INCLUDE_STATE_DIFF", "true"),
            include_resource_usage=_env_bool("SIMEXPORT_INCLUDE_RESOURCE_USAGE", "true"),
            json_indent=int(os.getenv("SIMEXPORT_JSON_INDENT", "2")),
            csv_delimiter=os.getenv("SIMEXPORT_CSV_DELIMITER", ","),
            csv_line_terminator="\n" if terminator == "lf" else "\r\n",
            pdf_page_size=os.getenv("SIMEXPORT_PDF_PAGE_SIZE", "A4").upper(),
            pdf_font=os.getenv("SIMEXPORT_PDF_FONT", "Helvetica"),
            pdf_deterministic=_env_bool("SIMEXPORT_PDF_DETERMINISTIC", "false"),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(
            level=os.getenv("SIMEXPORT_LOG_LEVEL", "INFO"),
            format=os.getenv("SIMEXPORT_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            log_file=os.getenv("SIMEXPORT_LOG_FILE"),
        )


@dataclass
class SimExportConfig:
    """Root configuration."""

    environment: str = "development"
    debug: bool = False
    version: str = "1.0.0"

    export: ExportSettings = field(default_factory=ExportSettings)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "SimExportConfig":
        """Create configuration from environment variables."""
        return cls(
            environment=os.getenv("SIMEXPORT_ENVIRONMENT", "development"),
            debug=_env_bool("SIMEXPORT_DEBUG", "false"),
            export=ExportSettings.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "SimExportConfig":
        """Load configuration from JSON file."""
        path = Path(filepath)
        if not path.exists():
            logger.warning(f"Config file not found: {filepath}, using defaults")
            return cls.from_env()

        with open(path) as f:
            data = json.load(f)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "SimExportConfig":
        """Create config from dictionary."""
        config = cls.from_env()

        # Override with file values
        if "environment" in data:
            config.environment = data["environment"]
        if "debug" in data:
            config.debug = data["debug"]

        if "export" in data:
            for key, value in data["export"].items():
                if hasattr(config.export, key):
                    setattr(config.export, key, value)
                else:
                    logger.warning(f"Ignoring unknown export setting: {key}")

        if "logging" in data:
            for key, value in data["logging"].items():
                if hasattr(config.logging, key):
                    setattr(config.logging, key, value)

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "version": self.version,
            "export": {
                "default_format": self.export.default_format,
                "export_dir": self.export.export_dir,
                "include_state_diff": self.export.include_state_diff,
                "include_resource_usage": self.export.include_resource_usage,
                "json_indent": self.export.json_indent,
                "csv_delimiter": self.export.csv_delimiter,
                "csv_line_terminator": self.export.csv_line_terminator,
                "pdf_page_size": self.export.pdf_page_size,
                "pdf_font": self.export.pdf_font,
                "pdf_deterministic": self.export.pdf_deterministic,
            },
            "logging": {
                "level": self.logging.level,
                "log_file": self.logging.log_file,
            },
        }


def load_config(filepath: str = None) -> SimExportConfig:
    """
    Load configuration from file or environment.

    Args:
        filepath: Optional path to JSON config file

    Returns:
        SimExportConfig instance
    """
    if filepath:
        config = SimExportConfig.from_file(filepath)
    else:
        config = None
        default_paths = [
            "./simexport.json",
            "./config/simexport.json",
            os.path.expanduser("~/.simexport/config.json"),
        ]

        for path in default_paths:
            if Path(path).exists():
                logger.info(f"Loading config from: {path}")
                config = SimExportConfig.from_file(path)
                break

        if config is None:
            config = SimExportConfig.from_env()

    logger.info(f"Configuration loaded: environment={config.environment}")
    return config


def configure_logging(config: LoggingConfig) -> None:
    """Configure root logging for CLI and service entry points."""
    handlers = [logging.StreamHandler()]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))

    logging.basicConfig(
        level=getattr(logging, config.level.upper(), logging.INFO),
        format=config.format,
        handlers=handlers,
        force=True,
    )
