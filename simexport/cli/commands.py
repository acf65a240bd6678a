"""
cli/commands.py - CLI command implementations
"""

from __future__ import annotations
import argparse
from pathlib import Path

from .core import CLICommand, CLIContext, CommandRegistry, CommandResult
from ..errors import ExportError
from ..exporters import (
    ExportFormat,
    ExportOptions,
    ExportValidator,
    format_from_extension,
    get_encoder,
    list_formats,
)
from ..history import JsonHistorySource

FORMAT_CHOICES = [f.value for f in ExportFormat]


class ExportCommand(CLICommand):
    """Export records from a history file."""

    name = "export"
    description = "Export simulation records from a history file"
    aliases = ["x"]

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("history", help="History JSON file")
        parser.add_argument("--id", dest="ids", action="append", default=[],
                            help="Record id to export (repeatable; default all)")
        parser.add_argument("--format", "-f", choices=FORMAT_CHOICES, help="Export format")
        parser.add_argument("--output", "-o", help="Output file path")
        parser.add_argument("--no-state-diff", action="store_true", help="Leave out state diffs")
        parser.add_argument("--no-resource-usage", action="store_true", help="Leave out resource usage")
        pretty = parser.add_mutually_exclusive_group()
        pretty.add_argument("--pretty", dest="prettify", action="store_true", default=None,
                            help="Indent nested JSON")
        pretty.add_argument("--compact", dest="prettify", action="store_false",
                            help="Compact nested JSON")
        parser.add_argument("--delimiter", help="CSV delimiter")

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        settings = ctx.config.export
        format = args.format or settings.default_format

        try:
            source = JsonHistorySource(args.history)
            encoder = get_encoder(format)
            output = args.output or str(Path(settings.export_dir) / f"simulations{encoder.file_extension}")

            overrides = {
                "include_state_diff": settings.include_state_diff and not args.no_state_diff,
                "include_resource_usage": settings.include_resource_usage and not args.no_resource_usage,
                "prettify": args.prettify,
            }
            if args.delimiter:
                overrides["delimiter"] = args.delimiter
            options = ExportOptions.from_settings(settings, format, output, **overrides)
        except (ExportError, ValueError) as e:
            return CommandResult(success=False, error=str(e), exit_code=1)

        ids = args.ids or source.record_ids()
        # Entries rejected while loading count as failed when exporting everything
        skipped = [] if args.ids else source.load_failures
        result = ctx.get_orchestrator().export_from_history(ids, source, options)

        total = result.total + len(skipped)
        failed = result.failed + len(skipped)
        data = {
            "output_path": result.output_path,
            "format": options.format.value,
            "total": total,
            "succeeded": result.succeeded,
            "failed": failed,
        }
        if skipped:
            data["skipped"] = [f.to_dict() for f in skipped]
        details = [f.describe() for f in skipped] + result.errors + result.validation_errors

        if result.success and not skipped:
            return CommandResult(
                success=True,
                message=f"Exported {result.succeeded} record(s) to {result.output_path}",
                data=data,
            )
        return CommandResult(
            success=False,
            error=f"{failed} of {total} record(s) failed",
            data=data,
            details=details,
            exit_code=1,
        )


class FormatsCommand(CLICommand):
    """List export formats."""

    name = "formats"
    description = "List available export formats"
    aliases = ["ls"]

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        return CommandResult(
            success=True,
            message="Available formats:",
            data=list_formats(),
            format_hint="table",
        )


class ValidateCommand(CLICommand):
    """Check an existing artifact."""

    name = "validate"
    description = "Validate an exported file"
    aliases = ["check"]

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("path", help="Exported file")
        parser.add_argument("--format", "-f", choices=FORMAT_CHOICES,
                            help="Format (detected from extension if omitted)")
        parser.add_argument("--delimiter", default=",", help="CSV delimiter")

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        path = Path(args.path)
        if not path.exists():
            return CommandResult(success=False, error=f"File not found: {path}", exit_code=1)

        try:
            format = args.format or format_from_extension(str(path)).value
            options = ExportOptions(format=format, output_path=str(path), delimiter=args.delimiter)
        except (ExportError, ValueError) as e:
            return CommandResult(success=False, error=str(e), exit_code=1)

        report = ExportValidator().summarize(path.read_bytes(), options)
        data = {"format": report["format"], "size_bytes": report["size_bytes"]}
        if report["valid"]:
            return CommandResult(success=True, message=f"{path} is valid", data=data)
        return CommandResult(
            success=False,
            error=f"{path} failed validation",
            data=data,
            details=report["errors"],
            exit_code=1,
        )


def build_registry() -> CommandRegistry:
    registry = CommandRegistry()
    for command in (ExportCommand(), FormatsCommand(), ValidateCommand()):
        registry.register(command)
    return registry


def build_parser(registry: CommandRegistry) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="simexport", description="Simulation record exporter")
    parser.add_argument("--config", "-c", help="Config file (JSON)")
    parser.add_argument("--json", action="store_true", help="Output in JSON format")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, command in registry.get_all().items():
        sub = subparsers.add_parser(name, aliases=command.aliases, help=command.description)
        command.configure_parser(sub)
    return parser
