"""Command-line interface for code-hints."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .analyzer import CodeAnalyzer
from .annotations import report_labels
from .config import AnalyzerConfig
from .languages import FrontEndRegistry
from .locator import CodeLocator
from .models import AnalysisOptions, CodeUnit

# Configure logging - default to WARNING to reduce verbosity
logging.basicConfig(
    level=logging.WARNING, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def analyze_path(
    path: Path,
    language: Optional[str],
    line: Optional[int],
    column: int,
    options: AnalysisOptions,
    config: AnalyzerConfig,
    as_json: bool = False,
) -> int:
    """
    Analyze the unit at a position, or every unit in a file.

    Args:
        path: Source file to analyze
        language: Language identifier; inferred from the extension when None
        line: 1-based line of the unit to analyze; every unit when None
        column: 0-based column within ``line``
        options: Analyses to run
        config: Analyzer configuration
        as_json: Print reports as JSON instead of labels

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    language = language or FrontEndRegistry.language_for_file(path)
    if not language:
        print(f"Error: cannot determine language of {path}; use --language", file=sys.stderr)
        return 1

    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read {path}: {e}", file=sys.stderr)
        return 1

    locator = CodeLocator()
    units: List[CodeUnit]
    if line is None:
        units = locator.locate_all(source, language)
    else:
        unit = locator.locate(source, language, line, column)
        units = [unit] if unit is not None else []

    if not units:
        where = f"line {line}" if line is not None else "file"
        print(f"No function found at {where} in {path}", file=sys.stderr)
        return 1

    analyzer = CodeAnalyzer(config)
    reports = [analyzer.analyze(unit, options) for unit in units]

    if as_json:
        print(json.dumps([report.to_dict() for report in reports], indent=2, ensure_ascii=False))
        return 0

    for report in reports:
        print(report.unit_id)
        for label in report_labels(report):
            print(f"  {label}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="code-hints",
        description="Estimate complexity and flag performance/security issues in functions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Every function in a file
  code-hints src/OrderService.java

  # The function enclosing line 42, as JSON
  code-hints src/orders.py --line 42 --json

  # Only security rules, language given explicitly
  code-hints build.gradle.kts --language kotlin --no-complexity --no-performance

Environment:
  CODE_HINTS_MAX_UNIT_SIZE   Rule families skip units longer than this (default: 10000)
  CODE_HINTS_COMPLEXITY      Enable complexity analysis (default: true)
  CODE_HINTS_PERFORMANCE     Enable performance rules (default: true)
  CODE_HINTS_SECURITY        Enable security rules (default: true)
  CODE_HINTS_LOG_LEVEL       Logging level (default: WARNING)
        """,
    )

    parser.add_argument("path", help="Source file to analyze")
    parser.add_argument(
        "--line",
        "-l",
        type=int,
        default=None,
        help="1-based line inside the function to analyze (default: every function)",
    )
    parser.add_argument(
        "--column",
        "-c",
        type=int,
        default=0,
        help="0-based column on --line (default: 0)",
    )
    parser.add_argument(
        "--language",
        default=None,
        help="Language identifier (default: inferred from the file extension)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print reports as JSON",
    )

    # Analysis toggles
    parser.add_argument("--no-complexity", action="store_true", help="Skip complexity analysis")
    parser.add_argument("--no-performance", action="store_true", help="Skip performance rules")
    parser.add_argument("--no-security", action="store_true", help="Skip security rules")

    # Verbosity
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def cli(argv: Optional[Sequence[str]] = None):
    """Command-line interface for code-hints."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = AnalyzerConfig.from_env()
    except ValueError as e:
        parser.error(str(e))

    # Set logging level based on verbose flag
    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)
        logging.getLogger("code_hints").setLevel(logging.DEBUG)
    else:
        logging.getLogger().setLevel(config.logging_level)

    if args.line is not None and args.line < 1:
        parser.error("--line must be 1 or greater")

    defaults = config.options
    options = AnalysisOptions(
        complexity=defaults.complexity and not args.no_complexity,
        performance=defaults.performance and not args.no_performance,
        security=defaults.security and not args.no_security,
    )

    sys.exit(
        analyze_path(
            path=Path(args.path),
            language=args.language,
            line=args.line,
            column=args.column,
            options=options,
            config=config,
            as_json=args.json,
        )
    )


if __name__ == "__main__":
    cli()
