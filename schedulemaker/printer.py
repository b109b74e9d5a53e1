"""
Schedule output.

Formats:
- basic: per day, one "start - end | section" line per meeting
- full:  course, section, room, instructors, start and end per meeting
- json:  machine-readable dump of every schedule's sections
- ics:   one picked schedule as weekly recurring calendar events

Output goes to the console unless a file path is given.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from rich.console import Console

from schedulemaker.export_ics import schedule_to_ics
from schedulemaker.model import Day, format_time
from schedulemaker.schedule import Schedule

logger = logging.getLogger(__name__)

HORIZ = "-" * 63

console = Console(highlight=False)


class OutputError(OSError):
    """Raised when schedules can't be written to the requested file."""


class Format(Enum):
    BASIC = "basic"
    FULL = "full"
    JSON = "json"
    ICS = "ics"


def parse_format(name: Optional[str]) -> Format:
    """
    Convert a format name to Format. Unknown names fall back to basic with a warning.
    """
    if name is None:
        return Format.BASIC
    try:
        return Format(name.strip().lower())
    except ValueError:
        logger.warning("Format '%s' was unrecognized; defaulting to basic", name)
        return Format.BASIC


def _time_cell(text: str) -> str:
    # right-align so "9:00 AM" lines up with "10:00 AM"
    return text.rjust(8)


def format_text(schedules: Sequence[Schedule], fmt: Format = Format.BASIC) -> str:
    out: list[str] = []
    for n, schedule in enumerate(schedules, start=1):
        out.append(f"[ Schedule {n} ]")
        entries = schedule.sorted_entries()

        for day in Day:
            today = [(m, s) for m, s in entries if m.day == day]
            if not today:
                continue

            out.append(day.label)
            for meeting, section in today:
                if fmt == Format.BASIC:
                    # 10:00 AM - 12:15 PM | CSCI-243-01
                    out.append(
                        f"\t{_time_cell(format_time(meeting.start))} - {_time_cell(format_time(meeting.end))} | {section}"
                    )
                    continue

                out.append(f"\t{section.course_name} | {section.name or section.uid}")
                out.append(f"\tRoom: {meeting.location or 'N / A'}")
                for inst in section.instructors:
                    out.append(f"\t{inst.name} | {inst.email} | {inst.office}")
                out.append(f"\tStart: {format_time(meeting.start)}")
                out.append(f"\tEnd: {format_time(meeting.end)}")
                out.append("")

        out.append(HORIZ)
        out.append("")

    return "\n".join(out)


def to_json_obj(schedules: Sequence[Schedule], generated: Optional[datetime] = None) -> dict[str, Any]:
    stamp = (generated or datetime.now()).isoformat(timespec="seconds")
    return {
        "generated": stamp,
        "schedules": [
            {"id": n, "sections": [s.to_dict() for s in schedule.path]}
            for n, schedule in enumerate(schedules, start=1)
        ],
    }


def render(
    schedules: Sequence[Schedule],
    fmt: Format,
    term: Optional[tuple[date, date]] = None,
    pick: int = 1,
) -> str:
    if fmt == Format.ICS:
        if term is None:
            raise OutputError("Calendar output needs the term start and end dates")
        text, count = schedule_to_ics(schedules[pick - 1], *term)
        logger.info("Rendered %d weekly events of schedule %d", count, pick)
        return text
    if fmt == Format.JSON:
        return json.dumps(to_json_obj(schedules), indent=2, ensure_ascii=False)
    return format_text(schedules, fmt)


def output(
    schedules: Sequence[Schedule],
    format: Optional[str] = None,
    filepath: Optional[str | Path] = None,
    confirm: Optional[Callable[[str], bool]] = None,
    term: Optional[tuple[date, date]] = None,
    pick: int = 1,
) -> Optional[Path]:
    """
    Print schedules, or write them to filepath.

    The ics format holds only schedule number `pick` and needs the term dates.
    An existing file is only overwritten if confirm() agrees. Returns the
    written path, or None when printing / when the user declined.
    """
    fmt = parse_format(format)
    logger.info("Writing mode: %s", fmt.value)
    if fmt == Format.ICS and not 1 <= pick <= len(schedules):
        logger.warning("No schedule #%d to export (have %d)", pick, len(schedules))
        return None
    text = render(schedules, fmt, term=term, pick=pick)

    if filepath is None:
        console.print(text, markup=False, soft_wrap=True)
        logger.info("Printing complete!")
        return None

    path = Path(filepath)
    if path.exists() and (confirm is None or not confirm(f"File '{path}' already exists, overwrite?")):
        logger.info("Not overwriting '%s'", path)
        return None

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise OutputError(f"Failed to write to file '{path}': {exc}") from exc

    logger.info("Schedules written to '%s'", path)
    return path
