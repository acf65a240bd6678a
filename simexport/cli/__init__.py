"""
cli/ - Command line interface
"""

from .core import (
    OutputFormat,
    CLIContext,
    CommandResult,
    CLICommand,
    CommandRegistry,
    format_output,
)
from .commands import (
    ExportCommand,
    FormatsCommand,
    ValidateCommand,
    build_registry,
    build_parser,
)
from .main import main

__all__ = [
    # Core
    "OutputFormat",
    "CLIContext",
    "CommandResult",
    "CLICommand",
    "CommandRegistry",
    "format_output",
    # Commands
    "ExportCommand",
    "FormatsCommand",
    "ValidateCommand",
    "build_registry",
    "build_parser",
    "main",
]
