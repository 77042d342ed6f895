"""Simulated Annealing over the critical-block neighborhood.

Cooling follows van Laarhoven, Aarts & Lenstra (1992): the temperature is
kept for one epoch of ``max(operations - machines, 1)`` iterations and then
lowered according to the spread of the makespans visited in that epoch. A
flat epoch restarts the chain from a new random schedule.
"""

from __future__ import annotations

import logging
import math
import random
import statistics
from typing import Optional

from ..dispatching import construct_random
from ..graph import ScheduleGraph
from ..models import Problem
from ..neighborhood import generate_moves
from .base import Outcome

logger = logging.getLogger("jssp.sa")

MIN_TEMPERATURE = 1e-3


def acceptance_probability(delta: int | float, temperature: float) -> float:
    """Boltzmann acceptance: 1 for non-worsening moves, ``exp(-delta/T)`` otherwise."""
    if delta <= 0:
        return 1.0
    return math.exp(-delta / temperature)


def initial_temperature(
    problem: Problem,
    rng: random.Random,
    start_acceptance_ratio: float,
    sample_size: int = 30,
) -> float:
    """Temperature at which an average uphill move is accepted with the given ratio.

    Samples ``sample_size`` random schedules, applies one random move to each
    and solves ``exp(-mean|delta| / T0) = ratio`` for ``T0``.

    Args:
        problem: Problem to sample schedules from.
        rng: Random generator of the run.
        start_acceptance_ratio: Target acceptance ratio in (0, 1).
        sample_size: Number of sampled (schedule, move) pairs.

    Returns:
        Initial temperature, never below ``MIN_TEMPERATURE``.
    """
    deltas: list[int] = []
    for _ in range(sample_size):
        graph = construct_random(problem, rng)
        moves = list(generate_moves(graph))
        if not moves:
            continue
        neighbor = graph.apply_move(rng.choice(moves)).recompute()
        deltas.append(abs(neighbor.makespan() - graph.makespan()))
    mean = statistics.fmean(deltas) if deltas else 0.0
    if mean == 0.0:
        return MIN_TEMPERATURE
    return max(mean / math.log(1.0 / start_acceptance_ratio), MIN_TEMPERATURE)


def cool(temperature: float, delta: float, sigma: float) -> float:
    """One cooling step; ``sigma`` is the makespan spread of the last epoch.

    Raises:
        ValueError: ``sigma`` is not positive. A flat epoch restarts the
            search instead of cooling it.
    """
    if sigma <= 0.0:
        raise ValueError(f"sigma must be > 0, got {sigma}")
    temperature = temperature / (1.0 + temperature * math.log(1.0 + delta) / (3.0 * sigma))
    return max(temperature, MIN_TEMPERATURE)


class SimulatedAnnealing:
    """Annealing with restarts.

    An epoch whose visited makespans are all equal means the chain is frozen:
    the search restarts from a new random schedule with a freshly derived
    initial temperature. ``best`` survives restarts.
    """

    name = "simulated-annealing"
    respects_timeout = True

    def __init__(
        self,
        problem: Problem,
        rng: random.Random,
        start_acceptance_ratio: float = 0.8,
        delta: float = 0.1,
        initial: Optional[ScheduleGraph] = None,
        sample_size: int = 30,
    ) -> None:
        if not 0.0 < start_acceptance_ratio < 1.0:
            raise ValueError(
                f"start_acceptance_ratio must be in (0, 1), got {start_acceptance_ratio}"
            )
        if delta <= 0.0:
            raise ValueError(f"delta must be > 0, got {delta}")
        self.problem = problem
        self.rng = rng
        self.delta = delta
        self.start_acceptance_ratio = start_acceptance_ratio
        self.sample_size = sample_size
        self.temperature = initial_temperature(problem, rng, start_acceptance_ratio, sample_size)
        self.current = initial if initial is not None else construct_random(problem, rng)
        self.best = self.current
        self.epoch_length = max(problem.operation_count - problem.machine_count, 1)
        self.restarts = 0
        self._epoch_costs: list[int] = []
        logger.debug(
            "[SA] T0=%.4f epoch_length=%d", self.temperature, self.epoch_length
        )

    def restart(self) -> None:
        self.restarts += 1
        self.current = construct_random(self.problem, self.rng)
        self.temperature = initial_temperature(
            self.problem, self.rng, self.start_acceptance_ratio, self.sample_size
        )
        self._epoch_costs = []
        logger.debug(
            "[SA] restart %d T0=%.4f makespan=%d best=%d",
            self.restarts,
            self.temperature,
            self.current.makespan(),
            self.best.makespan(),
        )

    def step(self) -> Outcome:
        moves = list(generate_moves(self.current))
        if not moves:
            # No exchange on a critical block can shorten the critical path
            logger.info("[SA] empty neighborhood at makespan %d", self.current.makespan())
            return Outcome.TERMINATED

        candidate = self.current.apply_move(self.rng.choice(moves)).recompute()
        delta = candidate.makespan() - self.current.makespan()
        if delta <= 0 or self.rng.random() < acceptance_probability(delta, self.temperature):
            self.current = candidate

        self._epoch_costs.append(self.current.makespan())
        if len(self._epoch_costs) >= self.epoch_length:
            sigma = statistics.pstdev(self._epoch_costs)
            if sigma == 0.0:
                self.restart()
            else:
                old_t = self.temperature
                self.temperature = cool(self.temperature, self.delta, sigma)
                self._epoch_costs = []
                logger.debug("[SA] cooling T: %.4f -> %.4f", old_t, self.temperature)

        if self.current.makespan() < self.best.makespan():
            self.best = self.current
            return Outcome.IMPROVED
        return Outcome.UNCHANGED
