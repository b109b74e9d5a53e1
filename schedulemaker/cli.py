"""
CLI (Command Line Interface).

    schedulemaker walk -k <key> -cf <config.json>
    schedulemaker walk -k <key> -sd <startDate> -ed <endDate> -c <course> [<course> ...]
    schedulemaker genconfig [-k <key>]

walk:      fetch the courses, generate every valid schedule and print/write them
genconfig: build a config file interactively, then walk it if a key was given

The API key can also be provided through the SCHEDULEMAKER_KEY environment variable.
"""

from __future__ import annotations

import argparse
import logging
import os
import time
from typing import Callable

from schedulemaker import printer
from schedulemaker.builder import generate_config
from schedulemaker.catalog import CatalogClient, CatalogError
from schedulemaker.config import Config, ConfigError, config_from_args, load_config
from schedulemaker.logs import setup_logging
from schedulemaker.maker import GenerationAborted, ScheduleMaker, ask_confirm
from schedulemaker.printer import OutputError
from schedulemaker.schedule import Schedule

logger = logging.getLogger(__name__)

KEY_ENV = "SCHEDULEMAKER_KEY"


def _confirm_fn(args: argparse.Namespace) -> Callable[[str], bool]:
    if args.yes:
        return lambda _prompt: True
    return ask_confirm


def _walk(key: str, config: Config, confirm: Callable[[str], bool]) -> list[Schedule]:
    """
    Validate the key, fetch the courses and generate schedules.
    """
    client = CatalogClient(key)
    logger.debug("Attempting to validate key")
    if not client.is_valid():
        raise GenerationAborted("'RITAuthorization' key was invalid", is_error=True)
    logger.debug("Key is valid")

    maker = ScheduleMaker(client, config, confirm=confirm)

    started = time.perf_counter()
    courses = maker.get_courses()
    logger.info("Queried %d courses; time taken: %.3fs", len(courses), time.perf_counter() - started)

    started = time.perf_counter()
    schedules = maker.make_schedules(courses)
    logger.info("Time taken: %.3fs", time.perf_counter() - started)
    return schedules


def _emit(args: argparse.Namespace, config: Config, schedules: list[Schedule]) -> None:
    confirm = _confirm_fn(args)
    fmt = getattr(args, "format", None) or config.format
    out = getattr(args, "output", None) or config.output
    printer.output(
        schedules,
        format=fmt,
        filepath=out,
        confirm=confirm,
        term=(config.start_date, config.end_date),
        pick=getattr(args, "pick", 1),
    )


def _cmd_walk(args: argparse.Namespace) -> int:
    key = (args.key or "").strip()
    if not key:
        logger.warning("No key argument given (use -k or %s)", KEY_ENV)
        return 2

    if args.config_file:
        config = load_config(args.config_file)
    else:
        required = {"--startDate": args.start_date, "--endDate": args.end_date, "--courses": args.courses}
        missing = [flag for flag, value in required.items() if not value]
        if missing:
            logger.warning("Missing arguments: %s", ", ".join(missing))
            return 2
        config = config_from_args(
            args.courses,
            args.start_date,
            args.end_date,
            start_time=args.start_time,
            end_time=args.end_time,
            format=args.format,
            output=args.output,
        )

    schedules = _walk(key, config, _confirm_fn(args))
    _emit(args, config, schedules)
    return 0


def _cmd_genconfig(args: argparse.Namespace) -> int:
    config, _ = generate_config()

    # without a key there is nothing to walk
    key = (args.key or "").strip()
    if not key:
        return 0

    schedules = _walk(key, config, _confirm_fn(args))
    _emit(args, config, schedules)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-k", "--key", default=os.environ.get(KEY_ENV), help=f"RITAuthorization key (or ${KEY_ENV})")
    common.add_argument("-d", "--debug", action="store_true", help="Turn on debug mode")
    common.add_argument("-s", "--silent", action="store_true", help="Only print warnings and errors")
    common.add_argument("-y", "--yes", action="store_true", help="Answer yes to every continue prompt")

    parser = argparse.ArgumentParser(prog="schedulemaker", description="Generate every conflict-free course schedule")
    sub = parser.add_subparsers(dest="command", required=True)

    p_walk = sub.add_parser("walk", parents=[common], help="Walk a path with given arguments to generate schedules")
    p_walk.add_argument("-cf", "--configFile", dest="config_file", help="Config JSON file to use")
    p_walk.add_argument("-sd", "--startDate", dest="start_date", help="Starting date to search for classes")
    p_walk.add_argument("-ed", "--endDate", dest="end_date", help="Ending date to search for classes")
    p_walk.add_argument("-c", "--courses", nargs="+", help="Courses to search for (e.g. CSCI-243)")
    p_walk.add_argument("-st", "--startTime", dest="start_time", help="Classes must start after this time (24hr)")
    p_walk.add_argument("-et", "--endTime", dest="end_time", help="Classes must end before this time (24hr)")
    p_walk.add_argument("-f", "--format", help="Output format: basic (default), full, json, ics")
    p_walk.add_argument("-o", "--output", help="Path to output file")
    p_walk.add_argument("--pick", type=int, default=1, help="Schedule number written by the ics format (default 1)")

    sub.add_parser("genconfig", parents=[common], help="Generate a configuration file interactively")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug, silent=args.silent)

    try:
        if args.command == "walk":
            raise SystemExit(_cmd_walk(args))
        if args.command == "genconfig":
            raise SystemExit(_cmd_genconfig(args))
    except GenerationAborted as exc:
        if exc.is_error:
            logger.error("%s", exc)
        else:
            logger.info("%s", exc)
        logger.info("Terminating . . .")
        raise SystemExit(1 if exc.is_error else 0)
    except (ConfigError, CatalogError, OutputError) as exc:
        logger.error("%s", exc)
        raise SystemExit(1)

    raise SystemExit(2)
