"""
iCalendar (.ics) export.

We convert one generated schedule into a calendar file that can be imported into:
- Google Calendar
- Outlook
- Apple Calendar

Every meeting becomes a weekly recurring event that runs from its first
occurrence on/after the term start until the term end.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from schedulemaker.model import Day
from schedulemaker.schedule import Schedule

_ICS_DAYS = {
    Day.SUNDAY: "SU",
    Day.MONDAY: "MO",
    Day.TUESDAY: "TU",
    Day.WEDNESDAY: "WE",
    Day.THURSDAY: "TH",
    Day.FRIDAY: "FR",
    Day.SATURDAY: "SA",
}


def _ics_escape(text: str) -> str:
    """
    Escape text for ICS fields (very small subset, sufficient for our use).
    """
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def _dt_local(d: date, t: time) -> str:
    """
    Convert date + time to ICS local datetime string 'YYYYMMDDTHHMM00'.
    """
    return datetime.combine(d, t).strftime("%Y%m%dT%H%M00")


def first_occurrence(day: Day, start_term: date) -> date:
    """
    First date on or after start_term that falls on the given weekday.
    """
    # date.weekday(): Monday=0 .. Sunday=6
    offset = ((day.value - 1) % 7 - start_term.weekday()) % 7
    return start_term + timedelta(days=offset)


def schedule_to_ics(schedule: Schedule, start_term: date, end_term: date) -> tuple[str, int]:
    """
    Render a schedule as calendar text. Returns the text and the number of (recurring) events.
    """
    lines: list[str] = []
    lines.append("BEGIN:VCALENDAR")
    lines.append("VERSION:2.0")
    lines.append("PRODID:-//ScheduleMaker//EN")
    lines.append("CALSCALE:GREGORIAN")

    dtstamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    until = _dt_local(end_term, time(23, 59))

    count = 0
    for meeting, section in schedule.sorted_entries():
        first = first_occurrence(meeting.day, start_term)
        if first > end_term:
            continue

        dtstart = _dt_local(first, meeting.start)
        summary = f"{section.course_name} {section.uid}".strip() or "ScheduleMaker Event"
        uid = f"{section.course_name}-{section.uid}-{_ICS_DAYS[meeting.day]}-{dtstart}"

        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{_ics_escape(uid)}")
        lines.append(f"DTSTAMP:{dtstamp}")
        lines.append(f"DTSTART:{dtstart}")
        lines.append(f"DTEND:{_dt_local(first, meeting.end)}")
        lines.append(f"RRULE:FREQ=WEEKLY;BYDAY={_ICS_DAYS[meeting.day]};UNTIL={until}")
        lines.append(f"SUMMARY:{_ics_escape(summary)}")
        if meeting.location:
            lines.append(f"LOCATION:{_ics_escape(meeting.location)}")
        if section.name:
            lines.append(f"DESCRIPTION:{_ics_escape(section.name)}")
        lines.append("END:VEVENT")
        count += 1

    lines.append("END:VCALENDAR")

    # ICS standard uses CRLF
    return "\r\n".join(lines) + "\r\n", count
