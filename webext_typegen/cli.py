"""Command-line interface.

``generate`` compiles schema folders into a declaration file and
``download`` fetches the schema folders of a Firefox release.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .codegen import (
    ConfigError,
    DeclarationGenerator,
    GeneratorConfig,
    generate_code,
    load_config,
)
from .codegen.config import ENUM_STYLES, get_config_manager
from .download import SchemaDownloadError, download_schemas
from .logging_config import configure_logging, get_logger
from .utils import SchemaLoaderError, collect_schemas

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Initialize rich console
console = Console()


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webext-typegen",
        description="Generate TypeScript declarations from Firefox WebExtension schemas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  webext-typegen download -t FIREFOX_63_0_RELEASE -v 63.0 -o schemas
  webext-typegen generate -f 63.0 -s schemas/63.0/toolkit -s schemas/63.0/browser -o index.d.ts
        """.strip(),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate a declaration file")
    generate.add_argument("-f", "--firefox-version", help="Firefox version for the header")
    generate.add_argument(
        "-s",
        "--schemas",
        action="append",
        default=[],
        metavar="DIR",
        help="Schema folder (repeatable)",
    )
    generate.add_argument("-o", "--output", help="Output file (default: stdout)")
    generate.add_argument("--config", help="Configuration file path (JSON)")
    generate.add_argument(
        "--enum-style", choices=sorted(ENUM_STYLES), help="How enums are declared"
    )
    generate.add_argument(
        "--no-customizations",
        action="store_true",
        help="Do not apply the Firefox schema patches",
    )
    generate.add_argument(
        "--keep-unsupported",
        action="store_true",
        help="Do not mark unsupported members optional",
    )
    generate.add_argument(
        "--verbose", "-v", action="store_true", help="Show generation metadata"
    )

    download = subparsers.add_parser("download", help="Download schemas from the Firefox source")
    download.add_argument("-t", "--tag", required=True, help="Mercurial tag to download")
    download.add_argument("-v", "--version", required=True, help="Version name for the folder")
    download.add_argument("-o", "--out", required=True, help="Base output folder")

    return parser


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Build configuration from CLI arguments."""
    config_dict = {}

    if args.firefox_version:
        config_dict["firefox_version"] = args.firefox_version
    if args.schemas:
        config_dict["schema_dirs"] = list(args.schemas)
    if args.output:
        config_dict["output_file"] = args.output
    if args.enum_style:
        config_dict["enum_style"] = args.enum_style
    if args.no_customizations:
        config_dict["apply_customizations"] = False
    if args.keep_unsupported:
        config_dict["mark_unsupported_optional"] = False

    try:
        config = load_config(custom_config=config_dict, config_file=args.config)
    except ConfigError as e:
        raise CLIError(f"Configuration error: {e}") from e

    for warning in get_config_manager().validate_config(config):
        console.print(f"[yellow]⚠️  {warning}[/yellow]")

    if not config.schema_dirs:
        raise CLIError("At least one schema folder (-s) is required")
    return config


def _generate_and_output(config: GeneratorConfig, verbose: bool) -> int:
    """Generate declarations and handle output with rich formatting."""
    generator = DeclarationGenerator(config)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        load_task = progress.add_task("[cyan]Loading schemas...", total=None)
        try:
            fragments = collect_schemas(config.schema_dirs)
        except SchemaLoaderError as e:
            raise CLIError(str(e)) from e
        progress.remove_task(load_task)

        gen_task = progress.add_task("[green]Generating declarations...", total=None)
        result = generate_code(generator, fragments)
        progress.remove_task(gen_task)

    if not result.success:
        console.print(f"[red]✗ Generation failed:[/red] {escape(str(result.error_message))}")
        if result.exception:
            console.print(f"[dim]Details: {escape(repr(result.exception))}[/dim]")
        return 1

    if config.output_file:
        output_path = Path(config.output_file)
        try:
            output_path.write_text(result.code, encoding="utf-8")
        except OSError as e:
            console.print(f"[red]✗ Failed to write to {output_path}:[/red] {e}")
            return 1
        console.print(f"[green]✓[/green] Declarations saved to [cyan]{output_path}[/cyan]")
    else:
        console.print(result.code, markup=False, emoji=False, highlight=False, soft_wrap=True)

    if verbose and result.metadata:
        metadata_table = Table(
            title="📊 Generation Metadata",
            box=box.SIMPLE,
            show_header=True,
            header_style="bold cyan",
        )
        metadata_table.add_column("Property", style="bold")
        metadata_table.add_column("Value", style="green")

        for key, value in result.metadata.items():
            metadata_table.add_row(key.replace("_", " ").title(), str(value))

        console.print()
        console.print(metadata_table)

    if result.warnings:
        console.print("\n[yellow]⚠️  Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]•[/yellow] {escape(warning)}", highlight=False)
        console.print()

    return 0


def _download(args: argparse.Namespace) -> int:
    try:
        folders = download_schemas(args.tag, args.version, args.out)
    except SchemaDownloadError as e:
        raise CLIError(str(e)) from e

    for folder in folders:
        console.print(f"[green]✓[/green] Schemas saved to [cyan]{folder}[/cyan]")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ``webext-typegen`` command.

    Args:
        argv: Arguments without the program name (defaults to sys.argv).

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    args = create_parser().parse_args(argv)
    verbose = getattr(args, "verbose", False)
    configure_logging(logging.DEBUG if verbose else logging.WARNING)

    try:
        if args.command == "download":
            return _download(args)
        return _generate_and_output(_build_config(args), verbose)
    except CLIError as e:
        console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
        logger.debug("CLI error", exc_info=True)
        return 1
