"""Best-improvement hill climbing over the critical-block neighborhood."""

from __future__ import annotations

import logging
from typing import Optional

from ..dispatching import DispatchRule, construct
from ..graph import ScheduleGraph
from ..models import Problem
from .base import Outcome, best_neighbor

logger = logging.getLogger("jssp.hill")


class HillClimber:
    """Accept the best neighbor while it strictly improves the makespan.

    Starts from the SPS dispatching schedule unless ``initial`` is given.
    Ignores the timeout: the makespan is a positive integer that drops on
    every accepted step, so the climb always ends at a local optimum.
    """

    name = "hill-climber"
    respects_timeout = False

    def __init__(self, problem: Problem, initial: Optional[ScheduleGraph] = None) -> None:
        self.problem = problem
        self.current = initial if initial is not None else construct(problem, DispatchRule.SPS)
        self.best = self.current

    def step(self) -> Outcome:
        found = best_neighbor(self.current)
        if found is None or found[1].makespan() >= self.current.makespan():
            logger.debug("local optimum at %d", self.current.makespan())
            return Outcome.TERMINATED
        move, graph = found
        logger.debug("improved %d -> %d via %s", self.current.makespan(), graph.makespan(), move)
        self.current = graph
        self.best = graph
        return Outcome.IMPROVED

    def climb(self) -> ScheduleGraph:
        """Run to the local optimum and return it."""
        while self.step() is Outcome.IMPROVED:
            pass
        return self.best
