"""
Interactive config builder ("genconfig").

Walks the user through the required settings (name, term dates, courses,
output) and saves the result as a JSON config file. Rules and buffers are
not asked for; they can be added to the file by hand afterwards.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt

from schedulemaker.config import Config, normalize_course, parse_date, save_config

logger = logging.getLogger(__name__)

console = Console()

Ask = Callable[[str], str]


def _prompt(msg: str) -> str:
    return Prompt.ask(msg, default="", show_default=False, console=console)


def _confirm(msg: str) -> bool:
    return Confirm.ask(msg, default=False, console=console)


def _ask_date(ask: Ask, msg: str) -> date:
    # repeat until we get a valid date
    while True:
        raw = ask(msg).strip()
        try:
            return parse_date(raw)
        except ValueError:
            console.print(f"Unable to parse date '{raw}'; use YYYY-MM-DD or MM/DD/YYYY", markup=False)


def _ask_courses(ask: Ask) -> list[str]:
    console.print("Enter course IDs [NAME-NUM or NAME-NUM-SEC]; blank to finish", markup=False)
    courses: list[str] = []
    while True:
        raw = ask(f"Course {len(courses)}").strip()
        if raw:
            courses.append(normalize_course(raw))
            continue
        if courses:
            return courses
        console.print("At least 1 course is required")


def default_config_path(name: Optional[str]) -> Path:
    return Path(f"{name}-config.json" if name else "config.json")


def _with_extension(raw: str) -> Path:
    path = Path(raw)
    if path.suffix.lower() != ".json":
        path = path.with_name(path.name + ".json")
    return path


def generate_config(ask: Ask = _prompt, confirm: Callable[[str], bool] = _confirm) -> tuple[Config, Optional[Path]]:
    """
    Ask for every setting, save the file, and return (config, saved path).
    The saved path is None if writing failed.
    """
    logger.debug("Using genconfig CLI")
    console.print("[ Configuration CLI Builder ]", markup=False)

    name = ask("Configuration name").strip()
    start = _ask_date(ask, "Semester start date")
    end = _ask_date(ask, "Semester end date")
    if start >= end:
        logger.warning("Start date (%s) occurs after end date (%s); this may cause issues!", start, end)

    config = Config(
        name=name or None,
        courses=_ask_courses(ask),
        start_date=start,
        end_date=end,
    )

    config.format = ask("Schedule output format (basic, full, json)").strip() or None
    config.output = ask("Schedule output path").strip() or None

    logger.info("Configuration has been generated!")

    while True:
        raw = ask("Save config file to").strip()
        path = _with_extension(raw) if raw else default_config_path(config.name)

        # get a new path if the user doesn't want to overwrite
        if path.exists() and not confirm(f"File '{path}' already exists, overwrite?"):
            continue

        try:
            save_config(config, path)
        except OSError as exc:
            logger.error("Failed to write to file '%s': %s", path, exc)
            return config, None

        logger.info("Config file written to '%s'", path)
        return config, path
