"""
Rule and buffer preprocessing.

Turns the declarative constraints of the config file into something the
solver understands:

- day/time rules become pseudo-sections; every real section clashing with one is dropped
- "no online classes" drops sections held in the room called "Online"
- the global layover is copied onto every meeting of the real courses
- buffers become one-section pseudo-courses that take part in the search

Every function here returns new course lists and never touches its input.
"""

from __future__ import annotations

import logging
from datetime import time
from typing import Iterable, Optional

from schedulemaker.model import ALL_DAYS, Buffer, Course, Rules, Section

logger = logging.getLogger(__name__)

DAY_START = time.min
DAY_END = time.max


def _rule_section(name: str, buffer: Buffer) -> Section:
    return Section.from_buffer(buffer, course_name=name)


def rule_sections(rules: Optional[Rules]) -> list[tuple[Section, str]]:
    """
    Build one pseudo-section per configured day/time rule, paired with a message
    describing the rule (used in warnings).
    """
    out: list[tuple[Section, str]] = []
    if rules is None:
        return out

    if rules.no_class_on:
        days = list(rules.no_class_on)
        section = _rule_section("NoClassOn", Buffer("", days, DAY_START, DAY_END))
        out.append((section, f"No class on {', '.join(d.label for d in days)}"))

    if rules.no_class_before is not None:
        section = _rule_section("NoClassBefore", Buffer("", list(ALL_DAYS), DAY_START, rules.no_class_before))
        out.append((section, f"No class before {rules.no_class_before:%H:%M}"))

    if rules.no_class_after is not None:
        section = _rule_section("NoClassAfter", Buffer("", list(ALL_DAYS), rules.no_class_after, DAY_END))
        out.append((section, f"No class after {rules.no_class_after:%H:%M}"))

    return out


def _warn_if_emptied(before: Course, after: Course, message: str) -> None:
    if before.sections and not after.sections:
        logger.warning("All %s sections violate rule: %s", after.name, message)


def apply_rule(courses: Iterable[Course], rule: Section, message: str) -> list[Course]:
    """
    Drop every section that clashes with the rule's pseudo-section.
    """
    out: list[Course] = []
    for course in courses:
        kept = course.with_sections([s for s in course.sections if not s.conflicts_with(rule)])
        _warn_if_emptied(course, kept, message)
        out.append(kept)
    return out


def filter_online(courses: Iterable[Course]) -> list[Course]:
    out: list[Course] = []
    for course in courses:
        kept = course.with_sections([s for s in course.sections if not s.is_online])
        _warn_if_emptied(course, kept, "No online classes")
        out.append(kept)
    return out


def apply_layover(courses: Iterable[Course], minutes: int) -> list[Course]:
    """
    Copy the layover onto every meeting of the real courses. Buffers keep zero.
    """
    return [
        course if course.is_buffer else course.with_sections([s.with_layover(minutes) for s in course.sections])
        for course in courses
    ]


def buffer_courses(buffers: Optional[Iterable[Buffer]]) -> list[Course]:
    if not buffers:
        return []
    return [Course.from_buffer(b) for b in buffers]


def empty_courses(courses: Iterable[Course]) -> list[Course]:
    return [c for c in courses if not c.sections]


def apply_rules(courses: Iterable[Course], rules: Optional[Rules]) -> list[Course]:
    """
    Apply day/time rules, the online rule and the layover, in that order.
    Courses left without sections are kept (and warned about); dropping them
    is up to the caller.
    """
    out = list(courses)
    if rules is None:
        return out

    for section, message in rule_sections(rules):
        out = apply_rule(out, section, message)

    if rules.allow_online is False:
        out = filter_online(out)

    if rules.layover is not None:
        out = apply_layover(out, rules.layover)

    return out


def sort_courses(courses: Iterable[Course]) -> list[Course]:
    """
    Fewest sections first. The solver's pruning relies on this order.
    """
    return sorted(courses, key=lambda c: len(c.sections))


def prepare(
    courses: Iterable[Course],
    rules: Optional[Rules] = None,
    buffers: Optional[Iterable[Buffer]] = None,
) -> list[Course]:
    """
    Full preprocessing: rules, then buffers, then the size sort.
    """
    out = apply_rules(courses, rules)
    out.extend(buffer_courses(buffers))
    return sort_courses(out)
