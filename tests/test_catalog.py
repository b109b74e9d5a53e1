"""
Tests for the catalog client. HTTP is stubbed, no network access.
"""

import json
import unittest
from datetime import date, time
from unittest import mock

import requests

from schedulemaker.catalog import MAX_MISSES, CatalogClient, CatalogError
from schedulemaker.model import Day

BASE = "https://api.example.edu/v1"


def response(payload, status: int = 200) -> mock.Mock:
    resp = mock.Mock()
    resp.status_code = status
    resp.ok = status < 400
    resp.text = payload if isinstance(payload, str) else json.dumps(payload)
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return resp


def occurrence(day: str, when: str, room: str) -> dict:
    return {"day": day, "date": when, "start": "10:00:00", "end": "11:15:00", "meetingType": "Course",
            "room_id": room}


class FakeSession:
    def __init__(self, routes: dict) -> None:
        self.routes = routes
        self.headers: dict = {}
        self.calls: list[str] = []

    def get(self, url: str, timeout: float = 0) -> mock.Mock:
        self.calls.append(url)
        path = url[len(BASE) + 1:]
        if path in self.routes:
            return response(self.routes[path])
        return response({"meetings": []})


class TestCatalogClient(unittest.TestCase):
    def setUp(self) -> None:
        self.routes = {
            "rooms": {"data": []},
            "course/CSCI-243-01": {
                "section": "CSCI-243-01",
                "name": "Mechanics of Programming",
                "instructors": ["jdoe"],
                "meetings": [
                    occurrence("Monday", "2024-08-26", "r1"),
                    occurrence("Wednesday", "2024-08-28", "r1"),
                    occurrence("Monday", "2024-09-02", "r1"),
                ],
            },
            # section 02 does not meet inside the term
            "course/CSCI-243-02": {"section": "CSCI-243-02", "meetings": [occurrence("Monday", "2025-01-13", "r1")]},
            "course/CSCI-243-03": {"section": "CSCI-243-03", "meetings": [occurrence("Tuesday", "2024-08-27", "r2")]},
            "rooms/r1": {"data": [{"name": "GOL-1400"}]},
            "rooms/r2": {"data": []},
            "faculty/jdoe": '{"data": {"displayname": {"0": "Jane Doe"}, "mail": {"0": "jd@example.edu"}}}',
        }
        self.session = FakeSession(self.routes)
        self.client = CatalogClient("secret", session=self.session, base_url=BASE)

    def test_key_header_set(self) -> None:
        self.assertEqual(self.session.headers["RITAuthorization"], "secret")

    def test_is_valid(self) -> None:
        self.assertTrue(self.client.is_valid())

        bad = mock.Mock(headers={})
        bad.get.return_value = response("denied", status=401)
        self.assertFalse(CatalogClient("nope", session=bad, base_url=BASE).is_valid())

    def test_get_course(self) -> None:
        course = self.client.get_course("CSCI-243", date(2024, 8, 26), date(2024, 12, 13))

        self.assertEqual(course.name, "CSCI-243")
        self.assertFalse(course.is_buffer)
        self.assertEqual([s.uid for s in course.sections], ["CSCI-243-01", "CSCI-243-03"])

        first = course.sections[0]
        self.assertEqual([(m.day, m.start, m.location) for m in first.meetings],
                         [(Day.MONDAY, time(10), "GOL-1400"), (Day.WEDNESDAY, time(10), "GOL-1400")])
        self.assertEqual(first.instructors[0].name, "Jane Doe")
        self.assertEqual(first.instructors[0].email, "jd@example.edu")
        self.assertEqual(course.sections[1].meetings[0].location, "N / A")

    def test_stops_after_consecutive_misses(self) -> None:
        self.client.get_course("CSCI-243", date(2024, 8, 26), date(2024, 12, 13))
        course_calls = [c for c in self.session.calls if "/course/" in c]
        # 3 real sections, then MAX_MISSES empty ones
        self.assertEqual(len(course_calls), 3 + MAX_MISSES)
        self.assertTrue(course_calls[-1].endswith(f"CSCI-243-{3 + MAX_MISSES:02d}"))

    def test_rooms_cached(self) -> None:
        self.client.get_course("CSCI-243", date(2024, 8, 26), date(2024, 12, 13))
        self.assertEqual(sum(1 for c in self.session.calls if c.endswith("rooms/r1")), 1)

    def test_zero_values_outside_faculty_kept(self) -> None:
        # only faculty payloads carry "0" keys; a room literally named "0" stays "0"
        self.routes["rooms/r3"] = {"data": [{"name": "0"}]}
        self.assertEqual(self.client.room_name("r3"), "0")

    def test_unknown_course_has_no_sections(self) -> None:
        course = self.client.get_course("NOPE-100", date(2024, 8, 26), date(2024, 12, 13))
        self.assertEqual(course.sections, ())

    def test_network_error_raises(self) -> None:
        broken = mock.Mock(headers={})
        broken.get.side_effect = requests.ConnectionError("down")
        client = CatalogClient("secret", session=broken, base_url=BASE)
        with self.assertRaises(CatalogError):
            client.get_course("CSCI-243", date(2024, 8, 26), date(2024, 12, 13))

    def test_not_found_counts_as_miss(self) -> None:
        session = mock.Mock(headers={})
        session.get.return_value = response("missing", status=404)
        client = CatalogClient("secret", session=session, base_url=BASE)
        course = client.get_course("CSCI-243", date(2024, 8, 26), date(2024, 12, 13))
        self.assertEqual(course.sections, ())
        self.assertEqual(session.get.call_count, MAX_MISSES)


if __name__ == "__main__":
    unittest.main()
