"""Command-line interface for steplex."""

from __future__ import annotations

import argparse
import io
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from steplex.debug import dump_json, dump_tokens
from steplex.errors import LexError, LexicalError
from steplex.lexer import Lexer, LexResult
from steplex.logger import get_logger

logger = get_logger(__name__)

FORMATS = ("text", "json")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    format: str
    text: bool
    strict: bool
    max_errors: int
    verbose: bool


class ConfigError(Exception):
    """Invalid value in a steplex.toml file."""


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="steplex",
        description="Tokenize an ISO 10303-21 (STEP) exchange structure",
    )
    p.add_argument("input", help="Input .stp / .step / .p21 file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "--format",
        choices=FORMATS,
        default=None,
        help="Token listing format (default: text)",
    )
    p.add_argument(
        "--no-text",
        dest="text",
        action="store_false",
        default=None,
        help="Omit lexeme text from the listing",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Stop at the first lexical error without writing a listing",
    )
    p.add_argument(
        "--max-errors",
        type=int,
        default=None,
        metavar="N",
        help="Stop after N lexical errors (default: 0, no limit)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover steplex.toml)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "steplex.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    fmt = "text"
    text = True
    cfg_output = config.get("output")
    if isinstance(cfg_output, dict):
        cfg_format = cfg_output.get("format")
        if cfg_format is not None:
            if cfg_format not in FORMATS:
                raise ConfigError(f"invalid output.format {cfg_format!r} (expected text or json)")
            fmt = cfg_format
        cfg_text = cfg_output.get("text")
        if isinstance(cfg_text, bool):
            text = cfg_text
    if args.format is not None:
        fmt = args.format
    if args.text is not None:
        text = args.text

    strict = False
    max_errors = 0
    cfg_lexer = config.get("lexer")
    if isinstance(cfg_lexer, dict):
        cfg_strict = cfg_lexer.get("strict")
        if isinstance(cfg_strict, bool):
            strict = cfg_strict
        cfg_max = cfg_lexer.get("max_errors")
        if isinstance(cfg_max, int) and not isinstance(cfg_max, bool):
            max_errors = cfg_max
    if args.strict is not None:
        strict = args.strict
    if args.max_errors is not None:
        max_errors = args.max_errors
    if max_errors < 0:
        raise ConfigError(f"max_errors must be >= 0, got {max_errors}")

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        format=fmt,
        text=text,
        strict=strict,
        max_errors=max_errors,
        verbose=args.verbose,
    )


def lex_file(options: CliOptions) -> tuple[bytes, list[LexResult], list[LexError]]:
    """Read and lex a file, returning (data, items, errors).

    Raises LexError on the first error in strict mode.
    """
    data = options.input_file.read_bytes()
    lexer = Lexer(data)
    items: list[LexResult] = []
    errors: list[LexError] = []
    for item in lexer:
        items.append(item)
        if isinstance(item, LexicalError):
            exc = lexer.error(item)
            if options.strict:
                raise exc
            errors.append(exc)
            if options.max_errors and len(errors) >= options.max_errors:
                logger.warning("stopping after %d lexical errors", len(errors))
                break
    logger.debug("lexed %s: %d items, %d errors", options.input_file, len(items), len(errors))
    return data, items, errors


def render_listing(options: CliOptions, data: bytes, items: list[LexResult]) -> str:
    out = io.StringIO()
    if options.format == "json":
        dump_json(items, data, text=options.text, file=out)
    else:
        dump_tokens(items, data, text=options.text, file=out)
    return out.getvalue()


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        options = resolve_options(args)
    except (ConfigError, tomllib.TOMLDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    filename = str(options.input_file)
    try:
        data, items, errors = lex_file(options)
    except OSError as exc:
        print(f"error: cannot read {filename}: {exc.strerror or exc}", file=sys.stderr)
        return 2
    except LexError as exc:
        print(exc.format(filename), file=sys.stderr)
        return 1

    listing = render_listing(options, data, items)
    if options.output_file:
        options.output_file.write_text(listing, encoding="utf-8")
    else:
        sys.stdout.write(listing)

    for exc in errors:
        print(exc.format(filename), file=sys.stderr)

    return 1 if errors else 0
