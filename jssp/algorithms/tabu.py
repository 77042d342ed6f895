"""Tabu Search over the critical-block neighborhood (Taillard style).

Notes:
    - Full best-admissible scan of the neighborhood each iteration; the chosen
      move is applied even when it worsens the current makespan.
    - Tabu key: ``(machine, (op_a, op_b))`` of the exchanged pair, so undoing
      a swap is forbidden for ``tenure`` iterations.
    - Aspiration: a tabu move is admissible when it beats the best makespan.
    - Long-term memory: candidates are ranked by estimated makespan plus a
      penalty for operations that were pushed back often,
      ``0.5 * max_delta * sqrt(n*m) * pushes(op) / total_pushes``.
    - No admissible move left -> the search terminates.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Optional

from ..dispatching import construct_random
from ..graph import ScheduleGraph
from ..models import Problem
from ..neighborhood import Move, TabuKey
from .base import Outcome, best_neighbor

logger = logging.getLogger("jssp.tabu")


def default_tenure(problem: Problem) -> int:
    """Tenure from Taillard's parallel tabu search for the job shop.

    ``(n + m/2) * exp(-n / 5m) + (n*m / 2) * exp(-5m / n)``, at least 1.
    """
    n = float(problem.job_count)
    m = float(problem.machine_count)
    tenure = (n + m / 2.0) * math.exp(-n / (5.0 * m)) + (n * m) / 2.0 * math.exp(-5.0 * m / n)
    return max(1, int(tenure))


class TabuSearch:
    name = "tabu-search"
    respects_timeout = True

    def __init__(
        self,
        problem: Problem,
        rng: random.Random,
        tenure: Optional[int] = None,
        initial: Optional[ScheduleGraph] = None,
        frequency_penalty: bool = True,
    ) -> None:
        self.problem = problem
        self.tenure = tenure if tenure is not None else default_tenure(problem)
        self.frequency_penalty = frequency_penalty
        self.current = initial if initial is not None else construct_random(problem, rng)
        self.best = self.current
        # Tabu list: move key -> last iteration at which it stays forbidden
        self.tabu: dict[TabuKey, int] = {}
        self.iteration = 0
        self.last_move: Optional[Move] = None
        # Operation id -> how often it was moved behind its machine neighbor
        self.push_backs = [0] * problem.operation_count
        self.total_push_backs = 0
        # Largest makespan increase between two successive current solutions
        self.max_delta = 0
        self._penalty_scale = 0.5 * math.sqrt(problem.job_count * problem.machine_count)
        logger.debug("tenure=%d", self.tenure)

    def is_tabu(self, move: Move) -> bool:
        return self.tabu.get(move.key, -1) >= self.iteration

    def penalty(self, move: Move) -> float:
        """Frequency penalty of the operation ``move`` pushes back."""
        if not self.frequency_penalty or self.total_push_backs == 0:
            return 0.0
        share = self.push_backs[move.first] / self.total_push_backs
        return self._penalty_scale * self.max_delta * share

    def _admissible(self, move: Move, estimate: int) -> bool:
        if move.key not in self.tabu:
            return True
        # The estimate is a lower bound; confirm aspiration on the real makespan
        best_c = self.best.makespan()
        if estimate >= best_c:
            return False
        return self.current.apply_move(move).recompute().makespan() < best_c

    def step(self) -> Outcome:
        self.iteration += 1
        expired = [k for k, exp in self.tabu.items() if exp < self.iteration]
        for k in expired:
            del self.tabu[k]

        best_c = self.best.makespan()
        found = best_neighbor(
            self.current,
            admissible=self._admissible,
            score=lambda move, estimate: estimate + self.penalty(move),
        )
        if found is None:
            logger.info(
                "[tabu] no admissible move iter=%d best=%d", self.iteration, best_c
            )
            return Outcome.TERMINATED

        move, graph = found
        self.tabu[move.key] = self.iteration + self.tenure
        self.last_move = move
        self.max_delta = max(self.max_delta, graph.makespan() - self.current.makespan())
        self.push_backs[move.first] += 1
        self.total_push_backs += 1
        self.current = graph
        if graph.makespan() < best_c:
            self.best = graph
            logger.debug("[tabu] iter %d best %d -> %d", self.iteration, best_c, graph.makespan())
            return Outcome.IMPROVED
        return Outcome.UNCHANGED
