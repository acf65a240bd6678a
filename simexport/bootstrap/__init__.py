"""
bootstrap/ - Configuration and logging setup
"""

from .config import (
    ExportSettings,
    LoggingConfig,
    SimExportConfig,
    load_config,
    configure_logging,
)

__all__ = [
    "ExportSettings",
    "LoggingConfig",
    "SimExportConfig",
    "load_config",
    "configure_logging",
]
