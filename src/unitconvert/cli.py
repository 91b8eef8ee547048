# -----------------------------------------------------------------------------
# CLI: interactive and one-shot front end for the converter
# Purpose:
#   Read conversions ("2km -> nmi"), expressions ("3 + 4 * 2") and bare unit
#   names from argv or stdin and print results; errors go to stderr.
# Notes:
#   - Exit codes: 0 ok, 1 a one-shot query failed, 2 bad configuration/catalog.
# -----------------------------------------------------------------------------
from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence, TextIO

from .catalog import CatalogError
from .config import LOG_LEVELS, load_settings
from .converter import UnitConverter, build_converter
from .evaluator import UnresolvedVariableError
from .expression import evaluate
from .log import configure_logging
from .tokenizer import ParseError, tokenize
from .types import TokenKind
from .units import ConversionError, looks_like_conversion, resolve_unit

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2

COMMANDS = ("exit", "units", "help")

HELP_TEXT = """\
Enter a conversion or an expression, one per line:
  2km -> nmi          convert between units of the same category
  20 C to F           'to' works as well as '->'
  3 + 4 * 2           evaluate an arithmetic expression
  km                  show the unit behind an abbreviation
Commands:
  units               list every known unit and abbreviation
  help                show this text
  exit                quit"""

log = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="unitconvert", description="Convert units and evaluate expressions.")
    parser.add_argument("query", nargs="*", help="Run a single query instead of reading lines from stdin.")
    parser.add_argument(
        "--debug",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        metavar="LEVEL",
        help=f"Log level ({', '.join(LOG_LEVELS)}); defaults to LOG_LEVEL or WARNING.",
    )
    parser.add_argument("--catalog", type=str, default=None, help="Path to a YAML unit catalog.")
    parser.add_argument("--no-cache", action="store_true", help="Do not memoize multi-hop conversions.")
    parser.add_argument("--no-reverse", action="store_true", help="Do not derive reverse conversions.")
    return parser


def format_value(value: float) -> str:
    # Very large and very small magnitudes read better in exponent form
    if value != 0 and (abs(value) > 99999 or abs(value) < 0.00009):
        return f"{value:e}"
    return f"{value}"


def print_units(converter: UnitConverter, out: TextIO) -> None:
    print(f"{'Unit':<20} {'Category':<12} Abbreviation", file=out)
    for entry in converter.units():
        print(f"{entry.unit:<20} {entry.category:<12} {entry.abbrev}", file=out)


def _is_unknown_word(cmd: str) -> bool:
    # "π" is alphabetic too, but it tokenizes as a number
    return cmd.isalpha() and all(t.kind is TokenKind.UNIT for t in tokenize(cmd))


def run_query(converter: UnitConverter, cmd: str,
              out: Optional[TextIO] = None, err: Optional[TextIO] = None) -> bool:
    """Run one conversion, expression or unit lookup. Returns False if it failed."""
    out = out or sys.stdout
    err = err or sys.stderr
    try:
        entry = resolve_unit(converter.units(), cmd) if cmd.isalpha() else None
        if entry is not None:
            print(f"{entry.unit} ({entry.category})", file=out)
        elif _is_unknown_word(cmd):
            print(f"{'ERROR':<5} Unknown command {cmd}", file=err)
            return False
        elif looks_like_conversion(cmd):
            result = converter.convert_from_expression(cmd)
            print(f"{format_value(result.value)} {result.to_unit.lower()}", file=out)
        else:
            print(format_value(evaluate(cmd)), file=out)
    except (ConversionError, ParseError, UnresolvedVariableError) as e:
        log.debug("Query %r failed: %r", cmd, e)
        print(f"{'ERROR':<5} {e}", file=err)
        return False
    return True


def process_line(converter: UnitConverter, line: str,
                 out: Optional[TextIO] = None, err: Optional[TextIO] = None) -> bool:
    """Handle one input line. Returns False when the session should end."""
    out = out or sys.stdout
    cmd = line.strip()
    if not cmd:
        return True
    if cmd == "exit":
        return False
    if cmd == "units":
        print_units(converter, out)
        return True
    if cmd == "help":
        print(HELP_TEXT, file=out)
        return True

    run_query(converter, cmd, out, err)
    return True


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = load_settings(
            log_level=args.debug,
            catalog_path=args.catalog,
            cache_results=False if args.no_cache else None,
            reverse_base_conversions=False if args.no_reverse else None,
        )
    except ValueError as e:
        # pydantic's ValidationError is a ValueError
        print(f"{'ERROR':<5} Invalid configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG

    logger = configure_logging(settings.log_level)
    logger.debug("CLI args: %s", args)

    try:
        converter = build_converter(settings, logger=logger)
    except CatalogError as e:
        print(f"{'ERROR':<5} Failed to load catalog: {e}", file=sys.stderr)
        return EXIT_CONFIG

    if args.query:
        query = " ".join(args.query).strip()
        if query in COMMANDS:
            process_line(converter, query)
            return EXIT_OK
        return EXIT_OK if run_query(converter, query) else EXIT_ERROR

    logger.info("Waiting for user input")
    for line in sys.stdin:
        if not process_line(converter, line):
            break
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
