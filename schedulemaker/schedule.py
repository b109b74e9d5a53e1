"""
Schedule: one node of the backtracking search.

A schedule is a path of chosen sections, where path[i] is a section of
courses[i]. The courses come pre-sorted (fewest sections first), so each new
node simply picks a section of the next unplaced course. Nodes are never
modified; a successor is a fresh Schedule with one more section on its path.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from schedulemaker.conflicts import find_conflicts
from schedulemaker.model import Course, Meeting, Section, format_time

logger = logging.getLogger(__name__)


class Schedule:
    __slots__ = ("courses", "path", "_canonical")

    def __init__(self, courses: Sequence[Course], path: Iterable[Section] = ()) -> None:
        self.courses: tuple[Course, ...] = tuple(courses)
        self.path: tuple[Section, ...] = tuple(path)
        self._canonical: Optional[str] = None
        if len(self.path) > len(self.courses):
            raise ValueError("Path is longer than the number of courses")

    @property
    def target(self) -> int:
        return len(self.courses)

    @property
    def pool(self) -> list[Section]:
        """
        Sections of the courses that have no section on the path yet.
        """
        return [s for course in self.courses[len(self.path):] for s in course.sections]

    def _extend(self, section: Section) -> "Schedule":
        return Schedule(self.courses, self.path + (section,))

    def successors(self) -> list["Schedule"]:
        """
        One child per section of the next unplaced course.
        """
        if self.is_goal():
            return []
        return [self._extend(s) for s in self.courses[len(self.path)].sections]

    def is_valid(self) -> bool:
        """
        Check the section added last against the rest of the path.
        """
        if len(self.path) <= 1:
            return True

        prev = self.courses[len(self.path) - 2]
        last = self.courses[len(self.path) - 1]
        # course sizes never decrease along a path
        if len(prev.sections) > len(last.sections):
            logger.debug(
                "Invalid: %s (%d sections) > %s (%d sections): %s",
                prev.name, len(prev.sections), last.name, len(last.sections), self,
            )
            return False

        newest = self.path[-1]
        if any(newest.conflicts_with(other) for other in self.path[:-1]):
            logger.debug("Invalid: conflict detected: %s", self)
            return False

        logger.debug("Valid: %s", self)
        return True

    def is_goal(self) -> bool:
        return len(self.path) == self.target

    def conflicts(self) -> list[tuple[Section, Section]]:
        return find_conflicts(self.path)

    def sort(self) -> list[Meeting]:
        """
        All meetings of the path, by weekday then start time.
        """
        meetings = [m for section in self.path for m in section.meetings]
        return sorted(meetings, key=lambda m: (m.day, m.start))

    def sorted_entries(self) -> list[tuple[Meeting, Section]]:
        """
        Like sort(), but keeps track of which section each meeting belongs to (for display).
        """
        entries = [(m, section) for section in self.path for m in section.meetings]
        return sorted(entries, key=lambda e: (e[0].day, e[0].start))

    def canonical(self) -> str:
        """
        Text of the sorted meetings; schedules with the same text are duplicates.
        """
        if self._canonical is None:
            self._canonical = "\n".join(
                f"{m.day.label} {format_time(m.start)}-{format_time(m.end)} {m.location}" for m in self.sort()
            )
        return self._canonical

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schedule):
            raise TypeError(f"Cannot compare Schedule with {type(other).__name__}")
        return self.canonical() == other.canonical()

    def __hash__(self) -> int:
        return hash(self.canonical())

    def __len__(self) -> int:
        return len(self.path)

    def __str__(self) -> str:
        return " -> ".join(str(s) for s in self.path)

    def __repr__(self) -> str:
        return f"Schedule({len(self.path)}/{self.target}: {self})"
