"""
Command-line entry point for mermaid-fmt.

Formats Mermaid files (or markdown files with mermaid blocks) given on the
command line, or standard input when no file is given.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from . import __version__
from .config import FormatConfig, IndentUnit, load_config
from .exceptions import ConfigError, MermaidParseError
from .formatter import format_mermaid
from .logging_config import configure_logging
from .markdown import format_markdown

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = {".md", ".markdown"}

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mermaid-fmt",
        description="Format Mermaid diagram sources",
    )
    parser.add_argument("files", nargs="*", type=Path, help="Files to format (default: read stdin)")
    parser.add_argument("--write", "-w", action="store_true", help="Rewrite files in place")
    parser.add_argument("--check", action="store_true", help="Exit with 1 if any file would change")
    parser.add_argument("--indent", type=int, metavar="N", help="Spaces per indentation level (default: 4)")
    parser.add_argument("--tabs", action="store_true", help="Indent with tabs")
    parser.add_argument("--markdown", action="store_true", help="Treat input as markdown with mermaid blocks")
    parser.add_argument("--config", type=Path, help="JSON config file (default: ./mermaid_fmt.json)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _format_source(text: str, markdown: bool, config: FormatConfig) -> str:
    if markdown:
        return format_markdown(text, config)
    return format_mermaid(text, config)


def _report_parse_error(console: Console, source: str, error: MermaidParseError) -> None:
    console.print(f"[bold red]{escape(source)}:{error.line}:{error.column}:[/] {escape(error.message)}", highlight=False)
    if error.context:
        console.print(f"    {error.context}", markup=False, highlight=False)
    if error.suggestion:
        console.print(f"    [dim]{escape(error.suggestion)}[/]", highlight=False)


def _run_stdin(args: argparse.Namespace, config: FormatConfig, console: Console) -> int:
    text = sys.stdin.read()
    try:
        formatted = _format_source(text, args.markdown, config)
    except MermaidParseError as e:
        _report_parse_error(console, "<stdin>", e)
        return EXIT_FAILURE

    if args.check:
        if formatted != text:
            console.print("<stdin> would be reformatted", highlight=False)
            return EXIT_FAILURE
        return EXIT_OK

    sys.stdout.write(formatted)
    sys.stdout.flush()
    return EXIT_OK


def _run_files(args: argparse.Namespace, config: FormatConfig, console: Console) -> int:
    exit_code = EXIT_OK
    changed: List[Path] = []

    for path in args.files:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            console.print(f"[bold red]{escape(str(path))}:[/] {escape(str(e))}", highlight=False)
            exit_code = EXIT_FAILURE
            continue

        markdown = args.markdown or path.suffix.lower() in MARKDOWN_SUFFIXES
        try:
            formatted = _format_source(text, markdown, config)
        except MermaidParseError as e:
            _report_parse_error(console, str(path), e)
            exit_code = EXIT_FAILURE
            continue

        if args.check:
            if formatted != text:
                console.print(f"{path} would be reformatted", markup=False, highlight=False)
                changed.append(path)
            continue

        if args.write:
            if formatted != text:
                path.write_text(formatted, encoding="utf-8", newline="\n")
                changed.append(path)
                logger.info("Reformatted %s", path)
            continue

        sys.stdout.write(formatted)

    sys.stdout.flush()
    if args.check and changed:
        exit_code = EXIT_FAILURE
    if (args.check or args.write) and args.verbose:
        console.print(f"{len(changed)} of {len(args.files)} file(s) changed", highlight=False)
    return exit_code


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for mermaid-fmt."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.write and not args.files:
        parser.error("--write requires at least one file")
    if args.write and args.check:
        parser.error("--write and --check are mutually exclusive")

    configure_logging(args.verbose)
    console = Console(stderr=True, soft_wrap=True)

    try:
        config = load_config(
            path=args.config,
            indent_width=args.indent,
            indent_unit=IndentUnit.TABS if args.tabs else None,
        )
    except ConfigError as e:
        console.print(f"[bold red]Configuration error:[/] {escape(str(e))}", highlight=False)
        return EXIT_FAILURE

    logger.debug("Using %s", config)

    if not args.files:
        return _run_stdin(args, config, console)
    return _run_files(args, config, console)


if __name__ == "__main__":
    sys.exit(main())
