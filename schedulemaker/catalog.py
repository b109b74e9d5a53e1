from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any, Optional

import requests

from schedulemaker.model import NOT_AVAILABLE, Course, Instructor, Section

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------

API_URL = "https://api.rit.edu/v1"

# Sections are numbered -01, -02, ...; stop after this many empty ones in a row
# (TBA sections show up as gaps)
MAX_MISSES = 10


class CatalogError(RuntimeError):
    """Raised when the catalog API can't be reached."""


class CatalogClient:
    """
    Small client for the course catalog API.

    Every request carries the RITAuthorization key. Rooms and instructors are
    looked up once and cached for the lifetime of the client.
    """

    def __init__(
        self,
        key: str,
        session: Optional[requests.Session] = None,
        base_url: str = API_URL,
        timeout: float = 30,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"RITAuthorization": key})
        self._rooms: dict[str, str] = {}
        self._instructors: dict[str, Optional[Instructor]] = {}

    # -----------------------------------------------------------------------
    # HTTP helpers
    # -----------------------------------------------------------------------

    def _get_json(self, path: str, faculty: bool = False) -> Any:
        """
        GET {base}/{path} and decode JSON. Returns None for unknown resources
        and undecodable payloads. Raises CatalogError on network failures and
        other error statuses.
        """
        url = f"{self.base_url}/{path}"
        logger.debug("Request URI: %s", url)
        try:
            resp = self.session.get(url, timeout=self.timeout)
            if resp.status_code == 404:
                logger.debug("Not found: %s", url)
                return None
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise CatalogError(f"Request failed: {url}: {exc}") from exc

        text = resp.text
        if faculty:
            # faculty payloads use "0" as the key of each value
            text = text.replace('"0"', '"content"')
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Bad response from %s, skipping", url)
            return None

    def is_valid(self) -> bool:
        """
        Check the key by requesting the room list.
        """
        try:
            resp = self.session.get(f"{self.base_url}/rooms", timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Unable to reach catalog API: %s", exc)
            return False
        return resp.ok

    # -----------------------------------------------------------------------
    # Lookups
    # -----------------------------------------------------------------------

    def room_name(self, room_id: str) -> str:
        if not room_id:
            return NOT_AVAILABLE
        if room_id not in self._rooms:
            payload = self._get_json(f"rooms/{room_id}")
            name = NOT_AVAILABLE
            if isinstance(payload, dict):
                data = payload.get("data")
                if isinstance(data, list) and data and isinstance(data[0], dict) and data[0].get("name"):
                    name = str(data[0]["name"])
            self._rooms[room_id] = name
        return self._rooms[room_id]

    def instructor(self, instructor_id: str) -> Optional[Instructor]:
        if instructor_id not in self._instructors:
            payload = self._get_json(f"faculty/{instructor_id}", faculty=True)
            data = payload.get("data") if isinstance(payload, dict) else None
            if isinstance(data, dict):
                self._instructors[instructor_id] = Instructor.from_catalog(data)
            else:
                logger.warning("No data for instructor %s, skipping", instructor_id)
                self._instructors[instructor_id] = None
        return self._instructors[instructor_id]

    # -----------------------------------------------------------------------
    # Courses
    # -----------------------------------------------------------------------

    def get_course(self, code: str, start_term: date, end_term: date) -> Course:
        """
        Fetch all sections of a course that meet between start_term and end_term.
        """
        logger.debug("Attempting to request info about %s", code)
        sections: list[Section] = []

        misses = 0
        number = 1
        while misses < MAX_MISSES:
            uri = f"course/{code}-{number:02d}"
            number += 1

            record = self._get_json(uri)
            if not isinstance(record, dict):
                logger.warning("Bad record for %s, skipping", uri)
                misses += 1
                continue

            if not record.get("meetings"):
                logger.debug("%s returned with no meetings, skipping", uri)
                misses += 1
                continue
            misses = 0

            instructors = tuple(
                i for i in (self.instructor(str(x)) for x in record.get("instructors") or []) if i is not None
            )
            section = Section.from_catalog(
                record,
                course_name=code,
                start_term=start_term,
                end_term=end_term,
                resolve_room=self.room_name,
                instructors=instructors,
            )
            if not section.meetings:
                logger.debug("%s has no meetings between %s and %s", section, start_term, end_term)
                continue

            sections.append(section)
            logger.debug("%s has been added to %s: %s", section.uid, code, section.name)

        return Course(name=code, sections=tuple(sections))
