"""Random-restart hill climbing."""

from __future__ import annotations

import logging
import random

from ..dispatching import construct_random
from ..models import Problem
from .base import Outcome
from .hill_climb import HillClimber

logger = logging.getLogger("jssp.restart")


class RandomRestartHillClimber:
    """One step = one full climb from a fresh random schedule.

    The timeout is therefore only observed between restarts; a single climb
    may overrun the budget.
    """

    name = "random-restart-hill-climber"
    respects_timeout = True

    def __init__(self, problem: Problem, rng: random.Random) -> None:
        self.problem = problem
        self.rng = rng
        self.current = construct_random(problem, rng)
        self.best = self.current
        self.restarts = 0

    def step(self) -> Outcome:
        local = HillClimber(self.problem, initial=self.current).climb()
        self.restarts += 1
        outcome = Outcome.UNCHANGED
        if local.makespan() < self.best.makespan():
            logger.debug(
                "restart %d improved best %d -> %d",
                self.restarts,
                self.best.makespan(),
                local.makespan(),
            )
            self.best = local
            outcome = Outcome.IMPROVED
        self.current = construct_random(self.problem, self.rng)
        return outcome
