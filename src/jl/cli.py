from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError
from rich.console import Console

from jl.core.color import EXTRA_COLORS, ColorMode
from jl.core.errors import InvalidTimezoneError, JlError
from jl.core.models import Level, Schema
from jl.core.parsing import NonJsonMode
from jl.core.pipeline import run
from jl.core.render import LoggerFormat
from jl.core.template import DEFAULT_TEMPLATE
from jl.core.timestamps import TimestampStyle
from jl.options import RunOptions, resolve_follow_interval_ms

LOGGER = logging.getLogger(__name__)

_SCHEMAS = ["auto", *(s.value for s in Schema)]


def _configure_logging() -> None:
    """Diagnostics go to stderr so they never mix with rendered output."""
    level_name = os.getenv("JL_LOG_LEVEL", "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_level(s: str) -> Level:
    try:
        return Level.from_name(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(
            "Invalid level. Allowed: TRACE, DEBUG, INFO, WARN, ERROR, FATAL"
        ) from e


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="jl",
        description="Pretty-print JSON log lines from stdin or files.",
    )
    p.add_argument("files", nargs="*", help="Input files (default: stdin)")
    p.add_argument("-f", "--format", default=DEFAULT_TEMPLATE, help="Template with {field} placeholders")
    p.add_argument("--add-fields", default=None, help="Comma-separated extra fields to show")
    p.add_argument("--omit-fields", default=None, help="Comma-separated extra fields to hide")
    p.add_argument("--color", choices=[m.value for m in ColorMode], default=ColorMode.AUTO.value)
    p.add_argument(
        "--non-json",
        choices=[m.value for m in NonJsonMode],
        default=NonJsonMode.PRINT_AS_IS.value,
        help="How to handle lines that are not JSON",
    )
    p.add_argument("--schema", dest="schema_choice", choices=_SCHEMAS, default="auto")
    p.add_argument(
        "--logger-format",
        choices=[m.value for m in LoggerFormat],
        default=LoggerFormat.SHORT_DOTS.value,
    )
    p.add_argument("--logger-length", type=int, default=30, help="Max logger width (0 = unlimited)")
    p.add_argument(
        "--ts-format",
        choices=[m.value for m in TimestampStyle],
        default=TimestampStyle.TIME.value,
    )
    p.add_argument("--min-level", type=_parse_level, default=None)
    p.add_argument("--raw-json", action="store_true", help="Emit the input JSON instead of a template")
    p.add_argument("--expanded", action="store_true", help="One extra field per line")
    p.add_argument("--key-color", choices=EXTRA_COLORS, default="magenta")
    p.add_argument("--value-color", choices=EXTRA_COLORS, default="cyan")
    p.add_argument("--tz", default="local", help="local, utc, or an IANA zone (e.g., Europe/Paris)")
    p.add_argument("--follow", action="store_true", help="Keep reading the last file as it grows")
    p.add_argument(
        "--follow-interval-ms",
        type=int,
        default=None,
        help="Follow poll interval in milliseconds (default: JL_FOLLOW_INTERVAL_MS or 200)",
    )
    p.add_argument("-o", "--output", default=None, help="Write to a file instead of stdout")
    return p


def _build_options(args: argparse.Namespace) -> RunOptions:
    values: dict[str, Any] = {k: v for k, v in vars(args).items() if v is not None}
    return RunOptions(**values)


def main(argv: Sequence[str] | None = None) -> None:
    """Parse arguments, render every input, and exit with a status code."""
    _configure_logging()
    args = build_parser().parse_args(argv)

    try:
        options = _build_options(args)
        interval_ms = resolve_follow_interval_ms(options.follow_interval_ms)
    except (ValidationError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    console = Console(file=sys.stdout)
    is_terminal = options.output is None and console.is_terminal and not console.no_color

    try:
        run(
            options,
            stdin=sys.stdin,
            stdout=sys.stdout,
            is_terminal=is_terminal,
            follow_interval=interval_ms / 1000,
        )
    except InvalidTimezoneError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)
    except BrokenPipeError:
        # The consumer went away; finish quietly, as if input had ended.
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        raise SystemExit(0)
    except KeyboardInterrupt:
        raise SystemExit(130)
    except (JlError, OSError) as e:
        LOGGER.debug("Run aborted", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
