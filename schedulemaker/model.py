"""
Central data model definitions used across the project.

This module defines the canonical structure of the objects the generator works on:
- Meeting: one weekly recurring time block (day + start + end + room)
- Section: one alternative offering of a course (a list of meetings)
- Course: a name plus its sections (real catalog course or buffer pseudo-course)
- Rules / Buffer: the declarative constraints read from the config file

All entities are immutable. "Changing" a value (e.g. the layover of a meeting)
means building a copy with dataclasses.replace().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from enum import IntEnum
from typing import Any, Callable, Optional

from schedulemaker.conflicts import meetings_conflict, sections_conflict

logger = logging.getLogger(__name__)

# Sentinel room name the catalog uses for online sections
ONLINE = "Online"

NOT_AVAILABLE = "N / A"

# Meeting-type tag of regular class meetings (exams etc. use other tags)
COURSE_MEETING = "Course"

_TIME_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M:%S %p", "%I:%M%p")


def parse_time(text: str) -> time:
    """
    Parse a wall-clock time like '10:00', '10:00:00' or '10:00 AM'.
    Raises ValueError for anything else.
    """
    raw = str(text).strip().upper()
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(raw, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time format: {text!r}")


def format_time(t: time) -> str:
    # 10:00 AM
    return t.strftime("%I:%M %p").lstrip("0")


class Day(IntEnum):
    """Day of week, Sunday first (matches the catalog's week layout)."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def parse(cls, text: str) -> "Day":
        """
        Accepts full names and three-letter prefixes, case-insensitive.
        """
        raw = str(text).strip().lower()
        if len(raw) >= 3:
            for day in cls:
                if day.name.lower().startswith(raw):
                    return day
        raise ValueError(f"Invalid day: {text!r}")

    @property
    def label(self) -> str:
        return self.name.capitalize()


ALL_DAYS: tuple[Day, ...] = tuple(Day)


@dataclass(frozen=True)
class Instructor:
    """
    Instructor display record, resolved by the catalog client.
    """

    name: str = NOT_AVAILABLE
    college: str = NOT_AVAILABLE
    email: str = NOT_AVAILABLE
    office: str = NOT_AVAILABLE

    @classmethod
    def from_catalog(cls, data: dict[str, Any]) -> "Instructor":
        """
        Build from a faculty payload where every field looks like {"content": "..."}.
        """

        def detail(key: str) -> str:
            value = data.get(key)
            if isinstance(value, dict):
                value = value.get("content")
            return str(value) if value else NOT_AVAILABLE

        return cls(
            name=detail("displayname"),
            college=detail("division"),
            email=detail("mail"),
            office=detail("physicaldeliveryofficename"),
        )

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "college": self.college, "email": self.email, "office": self.office}


@dataclass(frozen=True)
class Meeting:
    """
    One weekly occurrence of a section.

    Two meetings with the same day, room and times are the same meeting,
    regardless of the section they came from. The layover (minutes needed
    after this meeting before another one may start) is not part of that identity.
    """

    day: Day
    start: time
    end: time
    location: str = ""
    layover: int = field(default=0, compare=False)

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Meeting starts after it ends: {self.start} > {self.end}")
        if self.layover < 0:
            raise ValueError(f"Negative layover: {self.layover}")

    def with_layover(self, minutes: int) -> "Meeting":
        return replace(self, layover=minutes)

    def conflicts_with(self, other: "Meeting") -> bool:
        return meetings_conflict(self, other)

    def to_dict(self) -> dict[str, str]:
        return {
            "day": self.day.label,
            "room": self.location,
            "start": format_time(self.start),
            "end": format_time(self.end),
        }

    def __str__(self) -> str:
        return f"{self.location} | {self.day.label}: {format_time(self.start)} - {format_time(self.end)}"


@dataclass
class Rules:
    """
    Global constraints applied to every real course.
    None means "rule not configured".
    """

    no_class_on: Optional[list[Day]] = None
    no_class_before: Optional[time] = None
    no_class_after: Optional[time] = None
    allow_online: Optional[bool] = None
    layover: Optional[int] = None


@dataclass
class Buffer:
    """
    A protected block of time, scheduled like a course with a single section.
    """

    name: str
    days: list[Day]
    start_time: time
    end_time: time


@dataclass(frozen=True, eq=False)
class Section:
    """
    One schedulable alternative of a course.

    Sections compare by identity: the search tracks which course a section
    belongs to by its position, not by comparing section contents.
    """

    uid: str
    course_name: str
    meetings: tuple[Meeting, ...] = ()
    instructors: tuple[Instructor, ...] = ()
    name: str = ""

    @classmethod
    def from_buffer(cls, buffer: Buffer, course_name: Optional[str] = None) -> "Section":
        meetings = tuple(Meeting(day, buffer.start_time, buffer.end_time) for day in buffer.days)
        return cls(uid=buffer.name, course_name=course_name or buffer.name, meetings=meetings, name="Buffer")

    @classmethod
    def from_catalog(
        cls,
        record: dict[str, Any],
        course_name: str,
        start_term: date,
        end_term: date,
        resolve_room: Optional[Callable[[str], str]] = None,
        instructors: tuple[Instructor, ...] = (),
    ) -> "Section":
        """
        Build a section from one catalog record.

        The catalog lists every occurrence of the term. We keep regular class
        meetings inside the term window, walk them in date order and stop at
        the first repeat, which leaves exactly one representative week.
        """
        occurrences: list[tuple[date, Meeting]] = []
        for raw in record.get("meetings") or []:
            parsed = _parse_occurrence(raw, start_term, end_term)
            if parsed is not None:
                occurrences.append(parsed)

        occurrences.sort(key=lambda item: item[0])

        week: list[Meeting] = []
        for _, meeting in occurrences:
            if meeting in week:
                break
            week.append(meeting)

        if resolve_room is not None:
            week = [replace(m, location=resolve_room(m.location)) for m in week]

        week.sort(key=lambda m: m.day)

        return cls(
            uid=str(record.get("section") or ""),
            course_name=course_name,
            meetings=tuple(week),
            instructors=instructors,
            name=str(record.get("name") or ""),
        )

    @property
    def is_online(self) -> bool:
        return any(m.location == ONLINE for m in self.meetings)

    def with_layover(self, minutes: int) -> "Section":
        return replace(self, meetings=tuple(m.with_layover(minutes) for m in self.meetings))

    def conflicts_with(self, other: "Section") -> bool:
        return sections_conflict(self, other)

    def to_dict(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "sectionName": self.name,
            "instructors": [i.to_dict() for i in self.instructors],
            "meetings": [m.to_dict() for m in self.meetings],
        }

    def __str__(self) -> str:
        return self.uid or self.name


@dataclass(frozen=True, eq=False)
class Course:
    name: str
    sections: tuple[Section, ...] = ()
    is_buffer: bool = False

    @classmethod
    def from_buffer(cls, buffer: Buffer) -> "Course":
        name = buffer.name or "buffer"
        return cls(name=name, sections=(Section.from_buffer(buffer, name),), is_buffer=True)

    def with_sections(self, sections: tuple[Section, ...] | list[Section]) -> "Course":
        return replace(self, sections=tuple(sections))

    def __str__(self) -> str:
        return self.name


def _parse_occurrence(raw: Any, start_term: date, end_term: date) -> Optional[tuple[date, Meeting]]:
    """
    Turn one catalog occurrence into (date, Meeting).
    Returns None for non-class meetings, dates outside the term and malformed records.
    """
    if not isinstance(raw, dict):
        return None

    kind = raw.get("meetingType", raw.get("meeting_type"))
    if kind != COURSE_MEETING:
        return None

    try:
        when = date.fromisoformat(str(raw["date"])[:10])
        meeting = Meeting(
            day=Day.parse(raw["day"]),
            start=parse_time(raw["start"]),
            end=parse_time(raw["end"]),
            location=str(raw.get("room_id") or ""),
        )
    except (KeyError, TypeError, ValueError) as exc:
        logger.debug("Skipping malformed meeting %r: %s", raw, exc)
        return None

    if when < start_term or when > end_term:
        return None

    return when, meeting
