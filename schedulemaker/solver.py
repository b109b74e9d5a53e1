"""
Backtracking solver.

Depth-first search over Schedule nodes. Nodes are immutable, so there is no
undo step: a pruned child is simply never pushed. The search uses an explicit
stack instead of recursion; children are pushed in reverse so they are visited
in the same order a recursive walk would visit them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from schedulemaker.schedule import Schedule

logger = logging.getLogger(__name__)


@dataclass
class SolverStats:
    expanded: int = 0
    pruned: int = 0
    goals: int = 0
    duplicates: int = 0


class Solver:
    def __init__(self) -> None:
        self.stats = SolverStats()
        logger.debug("Init new solver")

    def iter_solutions(self, root: Schedule) -> Iterator[Schedule]:
        """
        Yield every goal node reachable from root, duplicates included.
        """
        logger.debug("New initial path created (%d courses)", root.target)
        stack: list[Schedule] = [root]
        while stack:
            node = stack.pop()
            self.stats.expanded += 1

            if node.is_goal():
                self.stats.goals += 1
                logger.debug("Solution found: %s", node)
                yield node
                continue

            successors = node.successors()
            children = [child for child in successors if child.is_valid()]
            self.stats.pruned += len(successors) - len(children)
            stack.extend(reversed(children))

    def solve(self, root: Schedule) -> list[Schedule]:
        """
        Return all unique goal schedules, in the order they were found.
        """
        found: list[Schedule] = []
        seen: set[str] = set()
        for schedule in self.iter_solutions(root):
            key = schedule.canonical()
            if key in seen:
                self.stats.duplicates += 1
                continue
            seen.add(key)
            found.append(schedule)
        return found
