"""
src/tinywx/cli.py

Command-line entry point: print the current weather as one short line for a
status bar.

Usage:
    tinywx --city London --country GB --api-key KEY --display icon temp humidity
    tinywx --config-file ~/.config/tinywx/config.toml

Settings come from flags or from a TOML file, never both. When no API key is
given, OWM_API_KEY is read from the environment (a .env file in or above the
working directory is loaded first).
"""

from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

from .client import fetch
from .config import API_KEY_ENV, CommandLine, ConfigSource, File, Units, flags_given, resolve
from .errors import EXIT_CONFIG, EXIT_OK, ConflictingSources, FileParseError, TinyWxError
from .render import render

VERSION = "0.1.0"


class _ArgumentParser(argparse.ArgumentParser):
    # usage errors share the configuration exit status, 2 is reserved for API failures
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_CONFIG, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(
        prog="tinywx",
        description="Fetch current weather from OpenWeatherMap and print it as one line.",
    )
    p.add_argument("--city", "-c", help="City name (quote it if it contains spaces)")
    p.add_argument("--state", "-s", help="State code, for US locations")
    p.add_argument("--country", "-C", help="Country code, e.g. GB")
    p.add_argument(
        "--api-key",
        "-k",
        help=f"OpenWeatherMap API key (defaults to {API_KEY_ENV} from the environment or .env)",
    )
    p.add_argument(
        "--units",
        "-u",
        choices=[u.value for u in Units],
        help="Units requested from the provider (default: metric)",
    )
    p.add_argument(
        "--display",
        "-d",
        nargs="+",
        default=[],
        metavar="FIELD",
        help="Fields to display, in order: icon, temperature (temp), feels_like, "
        "humidity, wind_speed (wind), description (desc), time. "
        "Append :GLYPH to decorate a field, e.g. humidity:humidity",
    )
    p.add_argument(
        "--icon",
        "-i",
        action="store_true",
        help="Prepend the condition icon to the displayed fields",
    )
    p.add_argument("--separator", "-S", help="String placed between fields (default: a space)")
    p.add_argument(
        "--config-file",
        "-f",
        type=Path,
        help="Read all settings from this TOML file. Cannot be combined with the "
        "location, key, units, display or separator flags. If the file has no "
        f"api_key, {API_KEY_ENV} from the environment or .env is used.",
    )
    p.add_argument("--verbose", "-v", action="store_true", help="Log debug output to stderr")
    p.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return p


def build_source(args: argparse.Namespace) -> ConfigSource:
    cmdline = CommandLine(
        city=args.city,
        state=args.state,
        country=args.country,
        api_key=args.api_key,
        units=args.units,
        display=list(args.display),
        icon=args.icon,
        separator=args.separator,
    )
    if args.config_file is None:
        return cmdline

    conflicts = flags_given(cmdline)
    if conflicts:
        raise ConflictingSources(conflicts)
    try:
        text = args.config_file.expanduser().read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileParseError(args.config_file, str(e)) from e
    return File(str(args.config_file), text)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s: %(message)s",
    )

    try:
        source = build_source(args)
        load_dotenv(find_dotenv(usecwd=True))
        cfg = resolve(source, os.environ)
        snapshot = fetch(cfg)
    except TinyWxError as e:
        logging.debug("aborting", exc_info=True)
        print(f"tinywx: {e}", file=sys.stderr)
        return e.exit_code

    print(render(snapshot, cfg))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
