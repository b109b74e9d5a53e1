"""
Conflict detection.

Meetings are weekly recurring blocks, so two meetings can only clash on the same weekday.
Overlap rule (same day):
    conflict unless one starts at or after the other's end + required gap

The required gap is the larger layover of the two meetings, so touching
endpoints (end == start) are fine with zero layover, and any layover makes
them clash.
"""

from __future__ import annotations

from datetime import time
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from schedulemaker.model import Meeting, Section


def _seconds(t: time) -> int:
    """
    Convert a wall-clock time to seconds since midnight (sub-second part dropped).
    """
    return t.hour * 3600 + t.minute * 60 + t.second


def _overlaps(a_start: int, a_end: int, b_start: int, b_end: int, gap: int) -> bool:
    return not (b_start >= a_end + gap or a_start >= b_end + gap)


def meetings_conflict(a: Meeting, b: Meeting) -> bool:
    """
    True if the two meetings clash, layovers included.
    """
    if a.day != b.day:
        return False
    gap = max(a.layover, b.layover) * 60
    return _overlaps(_seconds(a.start), _seconds(a.end), _seconds(b.start), _seconds(b.end), gap)


def sections_conflict(a: Section, b: Section) -> bool:
    """
    True if any meeting of one section clashes with any meeting of the other.
    """
    return any(meetings_conflict(ma, mb) for ma in a.meetings for mb in b.meetings)


def find_conflicts(sections: Sequence[Section]) -> list[tuple[Section, Section]]:
    """
    Find conflicting section pairs (A,B), each pair appears once (i<j).
    """
    conflicts: list[tuple[Section, Section]] = []

    # O(n^2) is fine, a schedule holds a handful of sections
    for i in range(len(sections)):
        for j in range(i + 1, len(sections)):
            if sections_conflict(sections[i], sections[j]):
                conflicts.append((sections[i], sections[j]))

    return conflicts
