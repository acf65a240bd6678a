"""
cli/main.py - `simexport` console entry point
"""

from __future__ import annotations
from typing import List, Optional
import logging

from .commands import build_parser, build_registry
from .core import CLIContext, OutputFormat, format_output
from ..bootstrap.config import configure_logging, load_config

logger = logging.getLogger("cli")


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    registry = build_registry()
    parser = build_parser(registry)
    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.verbose:
        config.logging.level = "DEBUG"
    configure_logging(config.logging)

    ctx = CLIContext(
        config=config,
        output_format=OutputFormat.JSON if args.json else OutputFormat.TEXT,
        verbose=args.verbose,
    )

    command = registry.get(args.command)
    try:
        result = command.execute(ctx, args)
    except Exception as e:
        logger.exception(f"Command '{args.command}' crashed: {e}")
        return 1

    output_format = ctx.output_format
    if output_format == OutputFormat.TEXT and result.format_hint == "table":
        output_format = OutputFormat.TABLE
    print(format_output(result, output_format))
    return result.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
