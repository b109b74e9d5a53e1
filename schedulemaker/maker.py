"""
Schedule generation pipeline.

1. fetch every configured course from the catalog
2. apply rules (day/time windows, online, layover), decide what to do
   with courses left empty
3. add buffers, sort, and run the backtracking solver

Whether to continue when a course has no usable sections is a user decision;
it is asked through the `confirm` callback, so the pipeline itself never
prompts and can be driven from tests.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional

from rich.prompt import Confirm as RichConfirm

from schedulemaker import rules as rule_fns
from schedulemaker.catalog import CatalogClient
from schedulemaker.config import Config
from schedulemaker.logs import err_console
from schedulemaker.model import Course
from schedulemaker.schedule import Schedule
from schedulemaker.solver import Solver

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


class GenerationAborted(RuntimeError):
    """
    The run stopped before producing schedules.

    is_error is False when the user chose to stop, True when nothing
    could be generated.
    """

    def __init__(self, message: str = "Terminating", is_error: bool = False) -> None:
        super().__init__(message)
        self.is_error = is_error


def ask_confirm(prompt: str) -> bool:
    return RichConfirm.ask(prompt, default=False)


class ScheduleMaker:
    def __init__(self, client: Optional[CatalogClient], config: Config, confirm: Confirm = ask_confirm) -> None:
        self.client = client
        self.config = config
        self.confirm = confirm
        self.solver: Optional[Solver] = None

    def get_courses(self) -> list[Course]:
        """
        Request every configured course. Courses without sections in the term are
        dropped if the user agrees, otherwise the run is aborted.
        """
        if self.client is None:
            raise ValueError("A catalog client is required to fetch courses")

        logger.info("Attempting to retrieve info for [%s]", ", ".join(self.config.courses))
        courses: list[Course] = []
        for code in self.config.courses:
            with err_console.status(f"Querying database for {code} . . ."):
                course = self.client.get_course(code, self.config.start_date, self.config.end_date)
            if not course.sections:
                logger.warning(
                    "%s has no sections between %s and %s", course.name, self.config.start_date, self.config.end_date
                )
                if not self.confirm(f"Continue without {course.name}?"):
                    raise GenerationAborted()
                logger.info("Omitting %s from schedule", course.name)
                continue

            courses.append(course)
            logger.info("%s was successfully added (%d sections)", course.name, len(course.sections))

        logger.info("All course information has been queried")
        return courses

    def make_schedules(self, courses: list[Course]) -> list[Schedule]:
        """
        Apply rules and buffers, then run the backtracking solver.
        """
        logger.debug("Preparing backtracking algorithm")
        rules = self.config.rules

        courses = rule_fns.apply_rules(courses, rules)

        if rule_fns.empty_courses(courses):
            if not self.confirm("Some courses don't have any sections left; proceed anyway?"):
                raise GenerationAborted()
            courses = [c for c in courses if c.sections]

        if not courses:
            raise GenerationAborted("No remaining courses to make schedules with", is_error=True)

        courses = courses + rule_fns.buffer_courses(self.config.buffers)
        courses = rule_fns.sort_courses(courses)

        potential = math.prod(len(c.sections) for c in courses)
        logger.info("Running backtracking algorithm. Potential schedules: %d", potential)

        self.solver = Solver()
        schedules = self.solver.solve(Schedule(courses))
        logger.info("Number of valid schedules: %d", len(schedules))
        return schedules

    def run(self) -> list[Schedule]:
        return self.make_schedules(self.get_courses())
